"""Semantic style palettes for the menu screens.

Every value is a Rich style string; the renderer never hard-codes colors.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..types import Theme


@dataclass(frozen=True)
class TuiTheme:
    """Semantic palette tokens for the renderer."""

    name: str
    title: str
    muted: str
    rule: str
    header_focus: str
    header: str
    row_focus: str
    category_current: str
    category: str
    action_current: str
    action: str
    warning: str
    favorite: str
    hint: str
    accent: str
    success: str
    error: str
    notice: str


_DARK = TuiTheme(
    name="dark",
    title="bold cyan",
    muted="dim",
    rule="blue",
    header_focus="reverse bold bright_white",
    header="bold bright_yellow",
    row_focus="reverse bold bright_white",
    category_current="bold cyan",
    category="green",
    action_current="bold magenta",
    action="",
    warning="red",
    favorite="bright_yellow",
    hint="bright_yellow",
    accent="bold green",
    success="green",
    error="red",
    notice="bright_yellow",
)

# Bright variants read better on pale backgrounds; "white" text becomes black.
_LIGHT = TuiTheme(
    name="light",
    title="bold bright_cyan",
    muted="dim black",
    rule="bright_blue",
    header_focus="reverse bold black",
    header="bold bright_yellow",
    row_focus="reverse bold black",
    category_current="bold black",
    category="bright_green",
    action_current="bold bright_magenta",
    action="black",
    warning="bright_red",
    favorite="bright_yellow",
    hint="bright_yellow",
    accent="bold black",
    success="bright_green",
    error="bright_red",
    notice="bright_yellow",
)

_HIGH_CONTRAST = TuiTheme(
    name="high-contrast",
    title="bold bright_cyan",
    muted="bold",
    rule="bold bright_blue",
    header_focus="bold reverse bright_white",
    header="bold bright_yellow",
    row_focus="bold reverse bright_white",
    category_current="bold bright_cyan",
    category="bold bright_green",
    action_current="bold bright_magenta",
    action="bold",
    warning="bold bright_red",
    favorite="bold bright_yellow",
    hint="bold bright_yellow",
    accent="bold bright_green",
    success="bold bright_green",
    error="bold bright_red",
    notice="bold bright_yellow",
)

THEMES: dict[Theme, TuiTheme] = {
    Theme.DARK: _DARK,
    Theme.LIGHT: _LIGHT,
    Theme.HIGH_CONTRAST: _HIGH_CONTRAST,
}


def get_theme(theme: Theme) -> TuiTheme:
    """Return the palette for a configured theme."""
    return THEMES.get(theme, _DARK)
