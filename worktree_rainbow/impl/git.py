import asyncio
import shutil
import subprocess
from pathlib import Path
from typing import Any, Iterable

from loguru import logger

from worktree_rainbow.base import (
    DETACHED,
    Branch,
    Handler,
    Named,
    Repository,
    Unsubscribe,
)

HEADS = "refs/heads/"


def _run_git(cwd: Path, args: list[str]) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def git_available() -> bool:
    return shutil.which("git") is not None


def find_toplevel(path: str | Path) -> Path | None:
    path = Path(path).absolute()
    cwd = path if path.is_dir() else path.parent
    if not cwd.is_dir():
        return None
    try:
        return Path(_run_git(cwd, ["rev-parse", "--show-toplevel"]))
    except subprocess.CalledProcessError:
        return None


class GitRepository(Repository):
    """
    A git working copy (or linked worktree) observed by polling HEAD.
    """

    def __init__(self, path: str | Path) -> None:
        toplevel = find_toplevel(path)
        if toplevel is None:
            raise ValueError(f"{path} is not inside a git working copy")

        self.path = toplevel
        self.root = str(toplevel)
        self.handlers: list[Handler] = []
        self._state = self.head_state()

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("GitRepository(...)")
        else:
            p.text(f"GitRepository(root={self.root!r})")

    def current_branch(self) -> Branch:
        """Branch as of the last poll. Never runs git."""
        ref = self._state[0]
        if not ref:
            return DETACHED
        return Named(ref.removeprefix(HEADS))

    def head_state(self) -> tuple[str, str]:
        try:
            # --quiet makes symbolic-ref fail silently on a detached HEAD
            ref = _run_git(self.path, ["symbolic-ref", "--quiet", "HEAD"])
        except subprocess.CalledProcessError:
            ref = ""
        try:
            commit = _run_git(self.path, ["rev-parse", "--verify", "--quiet", "HEAD"])
        except subprocess.CalledProcessError:
            # Unborn branch
            commit = ""
        return ref, commit

    def subscribe(self, handler: Handler) -> Unsubscribe:
        self.handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self.handlers:
                self.handlers.remove(handler)

        return unsubscribe

    def _update(self, state: tuple[str, str]) -> bool:
        if state == self._state:
            return False
        self._state = state
        logger.debug("HEAD moved in {}: {}", self.root, state[0] or state[1])
        for handler in list(self.handlers):
            handler()
        return True

    def poll(self) -> bool:
        """Notify subscribers if HEAD moved since the last poll."""
        return self._update(self.head_state())

    async def watch(self, interval: float = 1.0) -> None:
        """Poll until cancelled. Handlers are called on the event loop."""
        while True:
            await asyncio.sleep(interval)
            self._update(await asyncio.to_thread(self.head_state))


def discover_repositories(paths: Iterable[str | Path]) -> list[GitRepository]:
    """One repository per distinct working copy, in the order first seen."""
    repositories: dict[Path, GitRepository] = {}
    for path in paths:
        toplevel = find_toplevel(path)
        if toplevel is None:
            logger.debug("{} is not in a git working copy", path)
            continue
        if toplevel not in repositories:
            repositories[toplevel] = GitRepository(toplevel)
    return list(repositories.values())
