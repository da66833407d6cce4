"""
User settings for Worktree Rainbow.

Settings live in the workspace settings.json next to the color
customizations they control.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

DEFAULT_BRANCHES_KEY = "worktreeRainbow.defaultBranches"


def _default_branches() -> list[str]:
    return ["main", "master"]


@dataclass
class Settings:
    """Branch coloring options"""

    # Branches that never get a color
    default_branches: list[str] = field(default_factory=_default_branches)

    def is_default_branch(self, name: str) -> bool:
        return name in self.default_branches

    @classmethod
    def load(cls, settings_path: str | Path) -> "Settings":
        """Load settings from a workspace settings.json, or return defaults"""
        path = Path(settings_path)
        if not path.exists():
            return cls()

        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            # Comments or trailing commas are common in editor settings
            logger.warning("Using default settings, cannot read {}: {}", path, exc)
            return cls()

        branches = data.get(DEFAULT_BRANCHES_KEY) if isinstance(data, dict) else None
        if branches is None:
            return cls()
        if not isinstance(branches, list) or not all(
            isinstance(b, str) for b in branches
        ):
            logger.warning(
                "Ignoring {} in {}: expected a list of branch names",
                DEFAULT_BRANCHES_KEY,
                path,
            )
            return cls()

        return cls(default_branches=list(branches))
