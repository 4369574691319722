"""Bordered overlays drawn on top of the menu.

Confirmation, help and message dialogs block on a single key. The execution
overlay is redrawn by the process supervisor while a unit runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from rich.text import Text

from .keys import is_yes
from .screen import Screen
from .theme import TuiTheme

STOPPED_NOTICE = "*** EXECUTION STOPPED BY USER ***"
RUNNING_FOOTER = "[Ctrl-C] Stop [Enter] Close"
STOPPED_FOOTER = "STOPPED - Press [Enter] to close"
COMPLETED_FOOTER = "COMPLETED - Press [Enter] to close"
ANY_KEY = "Press any key to continue..."

CONFIRM_WIDTH = 60
CONFIRM_HEIGHT = 8

HELP_LINES = [
    "Navigation:",
    "  ←→ - Switch between categories and actions",
    "  ↑↓ - Navigate within panes",
    "  Enter - Execute selected action",
    "  q - Quit application",
    "",
    "Features:",
    "  / - Search actions (Esc to leave search)",
    "  * - Toggle favorite",
    "  t - Change theme",
    "  ? - Show this help",
    "",
    "Execution Overlay:",
    "  Ctrl-C - Stop running action",
    "  Enter - Close overlay",
    "",
    "Symbols:",
    "  ! - Potentially destructive action",
    "  ★ - Favorited action",
    "",
    "Press any key to close help...",
]


@dataclass(frozen=True)
class Box:
    """A bordered rectangle on screen."""

    row: int
    col: int
    width: int
    height: int

    @classmethod
    def centered(cls, screen: Screen, width: int, height: int) -> "Box":
        screen_width, screen_height = screen.size
        width = min(width, screen_width)
        height = min(height, screen_height)
        return cls(
            row=max(0, (screen_height - height) // 2),
            col=max(0, (screen_width - width) // 2),
            width=width,
            height=height,
        )

    @property
    def inner_width(self) -> int:
        return max(0, self.width - 2)

    @property
    def content_rows(self) -> range:
        return range(self.row + 1, self.row + self.height - 1)

    @property
    def bottom_row(self) -> int:
        return self.row + self.height - 1


def _edge(left: str, label: str, right: str, width: int) -> str:
    """One horizontal border line, e.g. ``┌─ TITLE ─────┐``."""
    if width < 2:
        return ""
    head = f"{left}─ {label} " if label else left
    body = head + "─" * max(0, width - 1 - len(head))
    return body[: width - 1] + right


def draw_box(
    screen: Screen,
    box: Box,
    theme: TuiTheme,
    title: str = "",
    title_style: str = "",
    footer: str = "",
    footer_style: str = "",
) -> None:
    """Draw border and blank interior; title and footer are styled separately."""
    screen.write(box.row, box.col, _edge("┌", title, "┐", box.width), theme.rule)
    for row in box.content_rows:
        screen.write(row, box.col, "│", theme.rule)
        screen.fill(row, box.col + 1, box.inner_width)
        screen.write(row, box.col + box.width - 1, "│", theme.rule)
    screen.write(box.bottom_row, box.col, _edge("└", footer, "┘", box.width), theme.rule)

    # Labels sit after "┌─ ", clipped so the closing corner survives.
    label_room = max(0, box.width - 4)
    if title:
        screen.write(box.row, box.col + 3, title[:label_room], title_style or theme.rule)
    if footer:
        screen.write(box.bottom_row, box.col + 3, footer[:label_room], footer_style or theme.rule)


def _write_inside(screen: Screen, box: Box, offset: int, text: str, style: str = "") -> None:
    row = box.row + offset
    if row in box.content_rows:
        screen.write(row, box.col + 2, text[: max(0, box.width - 4)], style)


def confirm(screen: Screen, theme: TuiTheme, description: str, read_key: Callable[[], str]) -> bool:
    """Centered destructive-action dialog. Only y/Y confirms."""
    box = Box.centered(screen, CONFIRM_WIDTH, CONFIRM_HEIGHT)
    with screen.frame():
        draw_box(screen, box, theme, title="CONFIRMATION REQUIRED", title_style=theme.warning)
        _write_inside(screen, box, 2, "WARNING: This action is potentially destructive!", theme.warning)
        _write_inside(screen, box, 4, f"Action: {description}")
        _write_inside(screen, box, 6, "Continue? [y/N]: ", theme.hint)
    return is_yes(read_key())


def show_help(screen: Screen, theme: TuiTheme, read_key: Callable[[], str]) -> None:
    width, height = screen.size
    box = Box(row=3, col=5, width=max(4, width - 10), height=max(3, height - 6))
    with screen.frame():
        draw_box(screen, box, theme, title="HELP", title_style=theme.title)
        for index, line in enumerate(HELP_LINES):
            style = theme.header if line.endswith(":") else ""
            _write_inside(screen, box, 2 + index, line, style)
    read_key()


def show_message(
    screen: Screen,
    theme: TuiTheme,
    title: str,
    lines: list[str],
    read_key: Callable[[], str],
    style: str = "",
) -> None:
    """Modal message box followed by a "press any key" pause."""
    longest = max((len(line) for line in [title, ANY_KEY, *lines]), default=0)
    box = Box.centered(screen, max(CONFIRM_WIDTH, longest + 6), len(lines) + 6)
    with screen.frame():
        draw_box(screen, box, theme, title=title, title_style=style or theme.error)
        for index, line in enumerate(lines):
            _write_inside(screen, box, 2 + index, line)
        _write_inside(screen, box, len(lines) + 3, ANY_KEY, theme.hint)
    read_key()


def read_output_lines(path: Path) -> list[str]:
    """Captured output as plain display lines.

    ANSI styling is dropped, carriage returns keep only the last overwrite,
    tabs are expanded and other control characters removed.
    """
    try:
        raw = path.read_bytes()
    except OSError:
        return []

    lines = []
    for line in raw.decode("utf-8", errors="replace").split("\n"):
        line = line.rstrip("\r").rsplit("\r", 1)[-1]
        line = Text.from_ansi(line).plain.expandtabs()
        lines.append("".join(ch for ch in line if ch.isprintable()))
    if lines and lines[-1] == "":
        lines.pop()
    return lines


class ExecutionOverlay:
    """Output viewport over the actions pane while a unit runs."""

    def __init__(self, screen: Screen, theme: TuiTheme, description: str, category_width: int):
        self.screen = screen
        self.theme = theme
        self.description = description
        width, height = screen.size
        self.box = Box(
            row=4,
            col=category_width + 2,
            width=max(6, width - category_width - 4),
            height=max(4, height - 8),
        )

    @property
    def text_width(self) -> int:
        """Columns available to output text (border plus one space each side)."""
        return max(0, self.box.width - 4)

    def draw_frame(self) -> None:
        with self.screen.frame():
            draw_box(
                self.screen,
                self.box,
                self.theme,
                title=f"Executing: {self.description}",
                title_style=self.theme.success,
                footer=RUNNING_FOOTER,
                footer_style=self.theme.hint,
            )

    def render_output(self, lines: list[str]) -> None:
        """Repaint every content row with the first lines of ``lines``."""
        rows = self.box.content_rows
        head = lines[: len(rows)]
        width = self.text_width
        with self.screen.frame():
            for index, row in enumerate(rows):
                text = head[index] if index < len(head) else ""
                self.screen.write(row, self.box.col + 2, text[:width].ljust(width))

    def _clear_content(self) -> None:
        for row in self.box.content_rows:
            self.screen.fill(row, self.box.col + 1, self.box.inner_width)

    def _set_footer(self, footer: str, style: str) -> None:
        box = self.box
        self.screen.write(box.bottom_row, box.col, _edge("└", footer, "┘", box.width), self.theme.rule)
        self.screen.write(box.bottom_row, box.col + 3, footer[: max(0, box.width - 4)], style)

    def show_stopped(self) -> None:
        with self.screen.frame():
            self._clear_content()
            _write_inside(self.screen, self.box, 3, STOPPED_NOTICE, self.theme.notice)
            self._set_footer(STOPPED_FOOTER, self.theme.error)

    def show_completed(self) -> None:
        with self.screen.frame():
            self._set_footer(COMPLETED_FOOTER, self.theme.success)
