import asyncio
import random

import pytest

from worktree_rainbow.coordinator import BranchColorCoordinator
from worktree_rainbow.impl.memory import (
    MemoryAssignmentStore,
    MemoryCustomizationsStore,
    MemoryRepository,
)
from worktree_rainbow.merger import ConfigurationMerger
from worktree_rainbow.watcher import RepositoryWatcher


class RecordingStore(MemoryAssignmentStore):
    def __init__(self):
        super().__init__()
        self.log: list[tuple[str, str]] = []

    def get(self, repo_root, branch):
        self.log.append(("get", branch))
        return super().get(repo_root, branch)

    def put(self, repo_root, branch, color):
        self.log.append(("put", branch))
        super().put(repo_root, branch, color)


def backgrounds(blob: MemoryCustomizationsStore) -> list[str | None]:
    return [w["titleBar.activeBackground"] if w else None for w in blob.writes]


@pytest.fixture
def setup(reporter):
    store = RecordingStore()
    blob = MemoryCustomizationsStore()
    coordinator = BranchColorCoordinator(
        store, ConfigurationMerger(blob), rng=random.Random(5)
    )
    return store, blob, coordinator, reporter


@pytest.mark.asyncio
async def test_start_applies_current_branch(setup):
    store, blob, coordinator, reporter = setup
    repo = MemoryRepository("/repo", "feature")
    watcher = RepositoryWatcher(repo, coordinator, reporter)

    watcher.start()
    await watcher.join()
    await watcher.stop()

    assert backgrounds(blob) == [store.get("/repo", "feature")]


@pytest.mark.asyncio
async def test_start_with_detached_head_clears(setup):
    store, blob, coordinator, reporter = setup
    repo = MemoryRepository("/repo", None)
    watcher = RepositoryWatcher(repo, coordinator, reporter)

    watcher.start()
    await watcher.join()
    await watcher.stop()

    assert blob.writes == [None]


@pytest.mark.asyncio
async def test_spurious_notifications_are_dropped(setup):
    store, blob, coordinator, reporter = setup
    repo = MemoryRepository("/repo", "feature")
    watcher = RepositoryWatcher(repo, coordinator, reporter)
    watcher.start()

    for _ in range(5):
        repo.touch()
    await watcher.join()

    assert len(blob.writes) == 1
    assert store.log == [("get", "feature"), ("put", "feature")]
    await watcher.stop()


@pytest.mark.asyncio
async def test_burst_is_processed_in_order(setup):
    store, blob, coordinator, reporter = setup
    repo = MemoryRepository("/repo", "main")
    watcher = RepositoryWatcher(repo, coordinator, reporter)
    watcher.start()

    # Faster than processing: no awaits between switches
    repo.checkout("feature-1")
    repo.checkout("feature-2")
    repo.checkout("feature-3")
    await watcher.join()
    await watcher.stop()

    assert [entry for entry in store.log if entry[0] == "put"] == [
        ("put", "feature-1"),
        ("put", "feature-2"),
        ("put", "feature-3"),
    ]
    assert backgrounds(blob) == [
        None,
        store.get("/repo", "feature-1"),
        store.get("/repo", "feature-2"),
        store.get("/repo", "feature-3"),
    ]
    assert blob.value["titleBar.activeBackground"] == store.get("/repo", "feature-3")


@pytest.mark.asyncio
async def test_switching_back_is_a_new_transition(setup):
    store, blob, coordinator, reporter = setup
    repo = MemoryRepository("/repo", "feature-1")
    watcher = RepositoryWatcher(repo, coordinator, reporter)
    watcher.start()

    repo.checkout("feature-2")
    repo.checkout("feature-1")
    await watcher.join()
    await watcher.stop()

    assert len(blob.writes) == 3
    assert backgrounds(blob)[0] == backgrounds(blob)[2]


class FlakyStore(MemoryAssignmentStore):
    def put(self, repo_root, branch, color):
        if branch == "broken":
            raise OSError("write failed")
        super().put(repo_root, branch, color)


@pytest.mark.asyncio
async def test_failed_step_does_not_block_queue(reporter):
    blob = MemoryCustomizationsStore()
    store = FlakyStore()
    coordinator = BranchColorCoordinator(store, ConfigurationMerger(blob))
    repo = MemoryRepository("/repo", "broken")
    watcher = RepositoryWatcher(repo, coordinator, reporter)
    watcher.start()

    repo.checkout("feature")
    await watcher.join()
    await watcher.stop()

    assert reporter.levels() == ["error"]
    assert backgrounds(blob) == [store.get("/repo", "feature")]


@pytest.mark.asyncio
async def test_repositories_have_independent_queues(setup):
    store, blob, coordinator, reporter = setup
    repo_a = MemoryRepository("/a", "feature")
    repo_b = MemoryRepository("/b", "feature")
    watchers = [
        RepositoryWatcher(repo_a, coordinator, reporter),
        RepositoryWatcher(repo_b, coordinator, reporter),
    ]
    for watcher in watchers:
        watcher.start()

    # Deduplication is per repository
    repo_b.touch()
    for watcher in watchers:
        await watcher.join()
        await watcher.stop()

    assert store.get("/a", "feature") is not None
    assert store.get("/b", "feature") is not None
    assert len(blob.writes) == 2


@pytest.mark.asyncio
async def test_stop_unsubscribes(setup):
    store, blob, coordinator, reporter = setup
    repo = MemoryRepository("/repo", "feature")
    watcher = RepositoryWatcher(repo, coordinator, reporter)
    watcher.start()
    await watcher.join()
    await watcher.stop()

    repo.checkout("other")
    assert repo.handlers == []
    assert watcher.queue.empty()


@pytest.mark.asyncio
async def test_submitted_step_runs_after_pending_transitions(setup):
    store, blob, coordinator, reporter = setup
    repo = MemoryRepository("/repo", "feature-1")
    watcher = RepositoryWatcher(repo, coordinator, reporter)
    watcher.start()
    repo.checkout("feature-2")

    seen = await watcher.submit(lambda: asyncio.sleep(0, result=dict(store.data)))

    assert set(seen) == {"colors:/repo:feature-1", "colors:/repo:feature-2"}
    await watcher.stop()


@pytest.mark.asyncio
async def test_submitted_step_failure_goes_to_caller(setup):
    store, blob, coordinator, reporter = setup
    watcher = RepositoryWatcher(MemoryRepository("/repo", "feature"), coordinator, reporter)
    watcher.start()

    async def fail():
        raise OSError("settings unreadable")

    with pytest.raises(OSError):
        await watcher.submit(fail)
    assert reporter.messages == [], "Caller reports its own failures"

    # The queue keeps going
    assert await watcher.submit(lambda: asyncio.sleep(0, result="ok")) == "ok"
    await watcher.stop()


@pytest.mark.asyncio
async def test_stop_cancels_unfinished_steps(setup):
    store, blob, coordinator, reporter = setup
    watcher = RepositoryWatcher(MemoryRepository("/repo", "feature"), coordinator, reporter)
    watcher.start()
    gate = asyncio.Event()

    running = watcher.submit(gate.wait)
    waiting = watcher.submit(gate.wait)
    await asyncio.sleep(0)
    await watcher.stop()

    assert running.cancelled()
    assert waiting.cancelled()
    assert watcher.queue.empty()
