import asyncio
from functools import partial
from typing import Any, Awaitable, Callable

from loguru import logger

from worktree_rainbow.base import Branch, Reporter, Repository, Unsubscribe
from worktree_rainbow.coordinator import BranchColorCoordinator

Step = Callable[[], Awaitable[Any]]

_UNSET = object()


class RepositoryWatcher:
    """
    Feeds branch transitions of one repository to the coordinator.

    Notifications that report the same branch as the last enqueued one are
    dropped. Everything else is queued and processed in arrival order, one
    step at a time. A failing transition is logged and reported, and the
    queue moves on. Commands submitted with `submit` share the same queue,
    so they never overlap a transition.
    """

    def __init__(
        self,
        repository: Repository,
        coordinator: BranchColorCoordinator,
        reporter: Reporter,
    ) -> None:
        self.repository = repository
        self.coordinator = coordinator
        self.reporter = reporter

        self.queue: asyncio.Queue[tuple[Step, asyncio.Future | None]] = asyncio.Queue()
        self._last: Branch | object = _UNSET
        self._unsubscribe: Unsubscribe | None = None
        self._worker: asyncio.Task | None = None
        self._current: asyncio.Future | None = None

    def start(self) -> None:
        if self._worker is not None:
            return
        self._worker = asyncio.create_task(self._run())
        self._on_change()
        self._unsubscribe = self.repository.subscribe(self._on_change)

    def _on_change(self) -> None:
        branch = self.repository.current_branch()
        if branch == self._last:
            return
        self._last = branch
        logger.debug("Queued {} for {}", branch, self.repository.root)
        self.queue.put_nowait((partial(self._sync, branch), None))

    async def _sync(self, branch: Branch) -> None:
        try:
            await self.coordinator.sync(self.repository.root, branch)
        except Exception:
            logger.exception(
                "Failed to update color for {} in {}",
                branch,
                self.repository.root,
            )
            self.reporter.error("Worktree Rainbow: Failed to update color.")

    def submit(self, step: Step) -> asyncio.Future:
        """Queue a step behind pending transitions. The future carries its outcome."""
        future = asyncio.get_running_loop().create_future()
        self.queue.put_nowait((step, future))
        return future

    async def _run(self) -> None:
        while True:
            step, future = await self.queue.get()
            self._current = future
            try:
                result = await step()
            except Exception as exc:
                if future is None or future.done():
                    logger.exception("Queued step failed in {}", self.repository.root)
                else:
                    future.set_exception(exc)
            else:
                if future is not None and not future.done():
                    future.set_result(result)
            finally:
                self._current = None
                self.queue.task_done()

    async def join(self) -> None:
        """Wait until every queued step has been processed."""
        await self.queue.join()

    async def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._worker is not None:
            if self._current is not None:
                self._current.cancel()
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

        # Steps that never ran
        while not self.queue.empty():
            _, future = self.queue.get_nowait()
            if future is not None:
                future.cancel()
            self.queue.task_done()
