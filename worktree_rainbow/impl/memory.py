from typing import Any

from worktree_rainbow.base import (
    AssignmentStore,
    Branch,
    Color,
    Customizations,
    CustomizationsStore,
    Handler,
    Repository,
    Unsubscribe,
    branch_of,
    color_key,
)

MemoryAssignmentData = dict[str, Color]


class MemoryAssignmentStore(AssignmentStore):
    def __init__(self, data: MemoryAssignmentData | None = None) -> None:
        # Share `data` between instances to survive a simulated restart
        self.data = data if data is not None else {}

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("MemoryAssignmentStore(...)")
        else:
            with p.group(4, "MemoryAssignmentStore(", ")"):
                p.breakable()
                p.text(f"data={self.data},")
                p.breakable()

    def get(self, repo_root: str, branch: str) -> Color | None:
        return self.data.get(color_key(repo_root, branch))

    def put(self, repo_root: str, branch: str, color: Color) -> None:
        self.data[color_key(repo_root, branch)] = color

    def delete(self, repo_root: str, branch: str) -> None:
        self.data.pop(color_key(repo_root, branch), None)


class MemoryCustomizationsStore(CustomizationsStore):
    def __init__(self, value: Customizations | None = None) -> None:
        self.value = value
        self.writes: list[Customizations | None] = []

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("MemoryCustomizationsStore(...)")
        else:
            with p.group(4, "MemoryCustomizationsStore(", ")"):
                p.breakable()
                p.text(f"value={self.value},")
                p.breakable()
                p.text(f"writes={len(self.writes)},")
                p.breakable()

    def read(self) -> Customizations | None:
        return dict(self.value) if self.value is not None else None

    def write(self, value: Customizations | None) -> None:
        self.value = dict(value) if value is not None else None
        self.writes.append(self.value)


class MemoryRepository(Repository):
    def __init__(self, root: str, branch: str | None = None) -> None:
        self.root = root
        self.branch: Branch = branch_of(branch)
        self.handlers: list[Handler] = []

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("MemoryRepository(...)")
        else:
            p.text(f"MemoryRepository(root={self.root!r}, branch={self.branch})")

    def current_branch(self) -> Branch:
        return self.branch

    def subscribe(self, handler: Handler) -> Unsubscribe:
        self.handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self.handlers:
                self.handlers.remove(handler)

        return unsubscribe

    def checkout(self, branch: str | None) -> None:
        self.branch = branch_of(branch)
        self.touch()

    def touch(self) -> None:
        """Notify subscribers without changing the branch."""
        for handler in list(self.handlers):
            handler()
