import pytest

from worktree_rainbow.base import Reporter


class RecordingReporter(Reporter):
    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def levels(self) -> list[str]:
        return [level for level, _ in self.messages]


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()
