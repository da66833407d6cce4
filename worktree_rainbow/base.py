from dataclasses import dataclass
from typing import Any, Callable

Color = str
Customizations = dict[str, Any]
Handler = Callable[[], None]
Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class Named:
    name: str


@dataclass(frozen=True)
class Detached:
    pass


Branch = Named | Detached

DETACHED = Detached()


def branch_of(name: str | None) -> Branch:
    return DETACHED if name is None else Named(name)


def color_key(repo_root: str, branch: str) -> str:
    return f"colors:{repo_root}:{branch}"


class AssignmentStore:
    """
    Durable mapping of (repository root, branch name) to a chosen color.

    Entries never expire. A store is owned by a single process.
    """

    def get(self, repo_root: str, branch: str) -> Color | None:
        """Return the color assigned to the branch, if any."""
        raise NotImplementedError()

    def put(self, repo_root: str, branch: str, color: Color) -> None:
        """Create or replace the assignment for the branch."""
        raise NotImplementedError()

    def delete(self, repo_root: str, branch: str) -> None:
        """Remove the assignment for the branch. Missing entries are ignored."""
        raise NotImplementedError()


class CustomizationsStore:
    """
    Externally owned key/value blob holding editor color customizations.

    None stands for "unset", which is different from an empty mapping.
    """

    def read(self) -> Customizations | None:
        """Read the whole blob."""
        raise NotImplementedError()

    def write(self, value: Customizations | None) -> None:
        """Replace the whole blob. Pass None to unset it."""
        raise NotImplementedError()


class Repository:
    """
    Version-controlled working copy, identified by its root path.
    """

    root: str

    def current_branch(self) -> Branch:
        """Return the checked out branch, or DETACHED."""
        raise NotImplementedError()

    def subscribe(self, handler: Handler) -> Unsubscribe:
        """
        Register a handler called whenever the repository state changes.

        Notifications may fire for changes unrelated to the branch.
        """
        raise NotImplementedError()


class Reporter:
    """User-facing messages. Fire and forget."""

    def info(self, message: str) -> None:
        raise NotImplementedError()

    def warning(self, message: str) -> None:
        raise NotImplementedError()

    def error(self, message: str) -> None:
        raise NotImplementedError()
