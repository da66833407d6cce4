import asyncio
from contextlib import AbstractAsyncContextManager, nullcontext

from loguru import logger

from worktree_rainbow.base import Customizations, CustomizationsStore
from worktree_rainbow.colors import Palette

MANAGED_KEYS = (
    "titleBar.activeBackground",
    "titleBar.activeForeground",
    "titleBar.inactiveBackground",
    "titleBar.inactiveForeground",
    "statusBar.background",
    "statusBar.foreground",
)


class ConfigurationMerger:
    """
    Overlays or removes the managed keys of a shared customizations blob.

    Every other key in the blob is passed through untouched. The merge is a
    plain read-modify-write: two mergers writing the same blob at once can
    lose one another's keys. Pass the same lock to every merger of a blob to
    serialize them.
    """

    def __init__(
        self, store: CustomizationsStore, lock: asyncio.Lock | None = None
    ) -> None:
        self.store = store
        self.lock = lock

    def _guard(self) -> AbstractAsyncContextManager:
        return self.lock if self.lock is not None else nullcontext()

    async def apply_palette(self, palette: Palette) -> None:
        async with self._guard():
            existing = await asyncio.to_thread(self.store.read) or {}
            updated: Customizations = {**existing, **palette.customizations()}
            await asyncio.to_thread(self.store.write, updated)
        logger.debug("Applied palette {}", palette.background)

    async def clear_managed(self) -> None:
        async with self._guard():
            existing = await asyncio.to_thread(self.store.read) or {}
            cleaned = {k: v for k, v in existing.items() if k not in MANAGED_KEYS}
            await asyncio.to_thread(self.store.write, cleaned or None)
        logger.debug("Cleared managed keys")
