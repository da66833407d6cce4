import json
from pathlib import Path
from typing import Any

from worktree_rainbow.base import Customizations, CustomizationsStore

COLOR_CUSTOMIZATIONS = "workbench.colorCustomizations"


class JsonCustomizationsStore(CustomizationsStore):
    """
    One section of a workspace settings.json.

    Other top-level settings in the file are written back as they were read.
    """

    def __init__(
        self, settings_path: str | Path, section: str = COLOR_CUSTOMIZATIONS
    ) -> None:
        self.settings_path = Path(settings_path)
        self.section = section

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("JsonCustomizationsStore(...)")
        else:
            p.text(
                f"JsonCustomizationsStore(path={self.settings_path}, section={self.section!r})"
            )

    def _load(self) -> dict[str, Any]:
        if not self.settings_path.exists():
            return {}
        with open(self.settings_path, "r") as f:
            text = f.read()
        if not text.strip():
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"{self.settings_path} does not hold a JSON object")
        return data

    def read(self) -> Customizations | None:
        value = self._load().get(self.section)
        if value is None:
            return None
        if not isinstance(value, dict):
            raise ValueError(f"{self.section} in {self.settings_path} is not an object")
        return value

    def write(self, value: Customizations | None) -> None:
        data = self._load()
        if value is None:
            if self.section not in data:
                return
            del data[self.section]
        else:
            data[self.section] = value

        self.settings_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.settings_path, "w") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
