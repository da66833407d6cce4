import os
from functools import partial
from typing import Any

from loguru import logger

from worktree_rainbow.base import DETACHED, Color, Named, Reporter, Repository
from worktree_rainbow.coordinator import BranchColorCoordinator
from worktree_rainbow.watcher import RepositoryWatcher, Step

PREFIX = "Worktree Rainbow: "


class LogReporter(Reporter):
    def info(self, message: str) -> None:
        logger.info(message)

    def warning(self, message: str) -> None:
        logger.warning(message)

    def error(self, message: str) -> None:
        logger.error(message)


def resolve_repository(
    repositories: list[Repository], active_path: str | None
) -> Repository | None:
    """
    Pick the repository holding the active document.

    The deepest matching root wins, ties go to the first registered one.
    Without a match the first repository is used.
    """
    if active_path:
        best: Repository | None = None
        for repo in repositories:
            root = repo.root
            if active_path == root or active_path.startswith(root + os.sep):
                if best is None or len(root) > len(best.root):
                    best = repo
        if best is not None:
            return best
    return repositories[0] if repositories else None


class BranchColorService:
    """
    Watches every registered repository and runs the user commands.
    """

    def __init__(
        self, coordinator: BranchColorCoordinator, reporter: Reporter | None = None
    ) -> None:
        self.coordinator = coordinator
        self.reporter = reporter or LogReporter()
        self.repositories: list[Repository] = []
        self.watchers: dict[str, RepositoryWatcher] = {}

    def add_repository(self, repository: Repository) -> None:
        if repository.root in self.watchers:
            return
        self.repositories.append(repository)
        watcher = RepositoryWatcher(repository, self.coordinator, self.reporter)
        self.watchers[repository.root] = watcher
        watcher.start()
        logger.info("Watching {}", repository.root)

    async def _in_queue(self, repository: Repository, step: Step) -> Any:
        # Behind pending transitions of the same repository, never alongside them
        watcher = self.watchers.get(repository.root)
        if watcher is None:
            return await step()
        return await watcher.submit(step)

    def resolve_repository(self, active_path: str | None = None) -> Repository | None:
        return resolve_repository(self.repositories, active_path)

    async def reroll(self, active_path: str | None = None) -> Color | None:
        try:
            repo = self.resolve_repository(active_path)
            if repo is None:
                self.reporter.warning(PREFIX + "No git repository found.")
                return None

            branch = repo.current_branch()
            if branch == DETACHED:
                self.reporter.warning(PREFIX + "No branch detected.")
                return None

            assert isinstance(branch, Named)
            if not self.coordinator.is_colorable(branch):
                self.reporter.info(
                    PREFIX + f'"{branch.name}" is a default branch (no color applied).'
                )
                return None

            color = await self._in_queue(
                repo, partial(self.coordinator.reroll, repo.root, branch)
            )
            self.reporter.info(PREFIX + f'New color {color} for "{branch.name}"')
            return color
        except Exception:
            logger.exception("Reroll failed")
            self.reporter.error(PREFIX + "Failed to reroll color.")
            return None

    async def clear(self, active_path: str | None = None) -> bool:
        try:
            repo = self.resolve_repository(active_path)
            if repo is None:
                self.reporter.warning(PREFIX + "No git repository found.")
                return False

            await self._in_queue(
                repo, partial(self.coordinator.clear, repo.root, repo.current_branch())
            )
            self.reporter.info(PREFIX + "Color cleared.")
            return True
        except Exception:
            logger.exception("Clear failed")
            self.reporter.error(PREFIX + "Failed to clear color.")
            return False

    async def drain(self) -> None:
        """Wait for every repository queue to become empty."""
        for watcher in list(self.watchers.values()):
            await watcher.join()

    async def close(self) -> None:
        for watcher in self.watchers.values():
            await watcher.stop()
        self.watchers.clear()
        self.repositories.clear()
