import json
import subprocess
from pathlib import Path

import pytest

from worktree_rainbow import cli
from worktree_rainbow.impl.json_file import COLOR_CUSTOMIZATIONS


@pytest.fixture
def work_repo(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    for args in [
        ["init", "--initial-branch=feat/login"],
        ["config", "user.name", "Test"],
        ["config", "user.email", "test@test"],
        ["commit", "--allow-empty", "-m", "Init"],
    ]:
        subprocess.run(["git", *args], cwd=path, check=True, capture_output=True)
    return path


def run(work_repo: Path, tmp_path: Path, *args: str) -> int:
    db = f"sqlite:///{tmp_path / 'colors.db'}"
    return cli.main(["--workspace", str(work_repo), "--db", db, *args])


def customizations(work_repo: Path) -> dict | None:
    path = work_repo / ".vscode" / "settings.json"
    if not path.exists():
        return None
    return json.loads(path.read_text()).get(COLOR_CUSTOMIZATIONS)


def test_reroll_and_clear(tmp_path, work_repo):
    assert run(work_repo, tmp_path, "reroll") == 0
    first = customizations(work_repo)["titleBar.activeBackground"]

    assert run(work_repo, tmp_path, "reroll", "--file", str(work_repo / "a.txt")) == 0
    assert len(customizations(work_repo)) == 6

    assert run(work_repo, tmp_path, "clear") == 0
    assert customizations(work_repo) is None
    assert first.startswith("#")


def test_show(tmp_path, work_repo, capsys):
    assert run(work_repo, tmp_path, "show") == 0
    out = capsys.readouterr().out
    color = customizations(work_repo)["titleBar.activeBackground"]
    assert "feat/login" in out
    assert color in out


def test_default_branch_setting(tmp_path, work_repo):
    settings = work_repo / ".vscode" / "settings.json"
    settings.parent.mkdir()
    settings.write_text(json.dumps({"worktreeRainbow.defaultBranches": ["feat/login"]}))

    assert run(work_repo, tmp_path, "reroll") == 1
    assert customizations(work_repo) is None


def test_no_repository(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    assert run(empty, tmp_path, "reroll") == 1


def test_commented_settings_file_is_reported(tmp_path, work_repo):
    settings = work_repo / ".vscode" / "settings.json"
    settings.parent.mkdir()
    text = '{\n  // keep the tabs\n  "editor.insertSpaces": false,\n}\n'
    settings.write_text(text)

    assert run(work_repo, tmp_path, "clear") == 1
    assert settings.read_text() == text, "Unreadable settings are left alone"
