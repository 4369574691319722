"""Type definitions for syskit.

Shared enums and dataclasses for the catalog, navigation state and config.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

FAVORITES_KEY = "favorites"
RECENT_KEY = "recent"
SYNTHETIC_KEYS = (FAVORITES_KEY, RECENT_KEY)

REF_SEPARATOR = "|"


class Theme(str, Enum):
    """Color themes, in cycling order."""

    DARK = "dark"
    LIGHT = "light"
    HIGH_CONTRAST = "high-contrast"

    def __str__(self) -> str:
        return self.value

    def next(self) -> "Theme":
        """Return the theme after this one (dark -> light -> high-contrast -> dark)."""
        members = list(Theme)
        return members[(members.index(self) + 1) % len(members)]


class Pane(str, Enum):
    """Focusable panes of the main screen."""

    CATEGORIES = "categories"
    ACTIONS = "actions"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Category:
    """A named group of actions backed by a directory under the menu tree."""

    display_name: str
    storage_key: str

    @property
    def is_synthetic(self) -> bool:
        """Favorites and Recent are derived views, not directories."""
        return self.storage_key in SYNTHETIC_KEYS

    @property
    def label(self) -> str:
        """Label shown in the category pane."""
        if self.storage_key == FAVORITES_KEY:
            return f"★ {self.display_name}"
        if self.storage_key == RECENT_KEY:
            return f"⟲ {self.display_name}"
        return self.display_name


@dataclass(frozen=True)
class ActionRef:
    """Serializable pointer to an action: ``<category name>|<unit stem>``."""

    category: str
    unit: str

    def __str__(self) -> str:
        return f"{self.category}{REF_SEPARATOR}{self.unit}"

    @classmethod
    def parse(cls, value: str) -> "ActionRef":
        """Parse a serialized reference.

        The unit is everything after the last separator, so category names
        may themselves contain ``|``.

        Raises:
            ValueError: If the value is not of the form ``category|unit``.
        """
        category, sep, unit = value.strip().rpartition(REF_SEPARATOR)
        if not sep or not category or not unit:
            raise ValueError(f"Invalid action reference: {value!r}")
        return cls(category=category, unit=unit)


@dataclass(frozen=True)
class Action:
    """A described, optionally destructive unit of work with an entry point."""

    description: str
    source_file: Path
    category: Category
    destructive: bool = False
    dependencies: tuple[str, ...] = ()
    long_description: str = ""

    @property
    def ref(self) -> ActionRef:
        return ActionRef(category=self.category.display_name, unit=self.source_file.stem)

    @property
    def entry_point(self) -> list[str]:
        """Command line that runs this unit's ``run`` body in a child process."""
        from .runner import entry_command

        return entry_command(self.source_file)


@dataclass
class Config:
    """User settings persisted as ``key=value`` lines."""

    theme: Theme = Theme.DARK
    category_width_override: int = 0
    confirmation_enabled: bool = True
    auto_save_logs: bool = True


@dataclass
class UnitMeta:
    """Metadata bindings read from a unit file."""

    description: str = ""
    destructive: bool = False
    dependencies: list[str] = field(default_factory=list)
    long_description: str = ""
