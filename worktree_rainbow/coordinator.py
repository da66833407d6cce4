import asyncio
import random

from loguru import logger

from worktree_rainbow import colors
from worktree_rainbow.base import AssignmentStore, Branch, Color, Named
from worktree_rainbow.colors import Palette
from worktree_rainbow.merger import ConfigurationMerger
from worktree_rainbow.settings import Settings


class BranchColorCoordinator:
    """
    Decides between applying and clearing a branch color.

    Default branches and detached heads are never assigned a color: the
    managed keys are simply removed. Any other branch gets its stored color,
    or a freshly generated one that is stored first.
    """

    def __init__(
        self,
        store: AssignmentStore,
        merger: ConfigurationMerger,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.merger = merger
        self.settings = settings or Settings()
        self.rng = rng or random.Random()

    def is_colorable(self, branch: Branch) -> bool:
        return isinstance(branch, Named) and not self.settings.is_default_branch(
            branch.name
        )

    async def sync(self, repo_root: str, branch: Branch) -> Color | None:
        """Bring the customizations in line with the branch. Returns the applied color."""
        if not self.is_colorable(branch):
            logger.debug("No color for {} in {}", branch, repo_root)
            await self.merger.clear_managed()
            return None

        assert isinstance(branch, Named)
        color = await asyncio.to_thread(self.store.get, repo_root, branch.name)
        if color is None:
            color = colors.generate(self.rng)
            await asyncio.to_thread(self.store.put, repo_root, branch.name, color)
            logger.info("Assigned {} to {} in {}", color, branch.name, repo_root)

        await self.merger.apply_palette(Palette.from_color(color))
        return color

    async def reroll(self, repo_root: str, branch: Branch) -> Color | None:
        """Replace the branch color with a new one. No-op for uncolorable branches."""
        if not self.is_colorable(branch):
            return None

        assert isinstance(branch, Named)
        color = colors.generate(self.rng)
        await asyncio.to_thread(self.store.put, repo_root, branch.name, color)
        await self.merger.apply_palette(Palette.from_color(color))
        logger.info("Rerolled {} to {} in {}", branch.name, color, repo_root)
        return color

    async def clear(self, repo_root: str, branch: Branch) -> None:
        """Forget the branch color and remove the managed keys, default branch or not."""
        if isinstance(branch, Named):
            await asyncio.to_thread(self.store.delete, repo_root, branch.name)
        await self.merger.clear_managed()
        logger.info("Cleared color for {} in {}", branch, repo_root)
