from .base import (
    DETACHED,
    AssignmentStore,
    Branch,
    Color,
    CustomizationsStore,
    Detached,
    Named,
    Reporter,
    Repository,
)
from .colors import Palette
from .merger import MANAGED_KEYS, ConfigurationMerger
from .coordinator import BranchColorCoordinator
from .watcher import RepositoryWatcher
from .app import BranchColorService, LogReporter, resolve_repository
from .settings import Settings
from .impl.memory import (
    MemoryAssignmentStore,
    MemoryCustomizationsStore,
    MemoryRepository,
)
from .impl.sql import create_sql_assignment_store

__all__ = [
    "DETACHED",
    "AssignmentStore",
    "Branch",
    "Color",
    "CustomizationsStore",
    "Detached",
    "Named",
    "Reporter",
    "Repository",
    "Palette",
    "MANAGED_KEYS",
    "ConfigurationMerger",
    "BranchColorCoordinator",
    "RepositoryWatcher",
    "BranchColorService",
    "LogReporter",
    "resolve_repository",
    "Settings",
    "MemoryAssignmentStore",
    "MemoryCustomizationsStore",
    "MemoryRepository",
    "create_sql_assignment_store",
]
