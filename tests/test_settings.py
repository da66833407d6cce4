import json
from pathlib import Path

from worktree_rainbow.settings import DEFAULT_BRANCHES_KEY, Settings


def test_defaults():
    settings = Settings()
    assert settings.default_branches == ["main", "master"]
    assert settings.is_default_branch("main")
    assert not settings.is_default_branch("feature")


def test_load_missing_file(tmp_path: Path):
    assert Settings.load(tmp_path / "settings.json") == Settings()


def test_load_default_branches(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({DEFAULT_BRANCHES_KEY: ["trunk", "develop"]}))

    settings = Settings.load(path)
    assert settings.default_branches == ["trunk", "develop"]
    assert not settings.is_default_branch("main")


def test_load_without_key(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"editor.fontSize": 14}))
    assert Settings.load(path) == Settings()


def test_load_ignores_bad_value(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({DEFAULT_BRANCHES_KEY: "main"}))
    assert Settings.load(path) == Settings()


def test_load_commented_file_falls_back(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text('{\n  // trunk only\n  "worktreeRainbow.defaultBranches": ["trunk"],\n}\n')
    assert Settings.load(path) == Settings()
