"""Cursor-addressed drawing surfaces.

The renderer and overlays only talk to a Screen: "write this text at
(row, col)", "erase to end of line", "clear". TerminalScreen turns those into
escape sequences through a Rich Console; GridScreen keeps an in-memory cell
grid so drawing code can be tested without a terminal.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, NamedTuple

from rich.console import Console
from rich.control import Control, ControlType
from rich.text import Text

DEFAULT_SIZE = (80, 24)


class Cell(NamedTuple):
    char: str
    style: str


BLANK = Cell(" ", "")


class Screen(ABC):
    """Absolute-positioned text output."""

    @property
    @abstractmethod
    def size(self) -> tuple[int, int]:
        """(width, height) in cells."""

    @abstractmethod
    def write(self, row: int, col: int, text: str, style: str = "") -> None:
        """Draw ``text`` starting at (row, col), clipped at the right edge."""

    @abstractmethod
    def clear_line(self, row: int, col: int = 0) -> None:
        """Erase from (row, col) to the end of the line."""

    @abstractmethod
    def clear(self) -> None:
        """Erase the whole screen."""

    def show_cursor(self, show: bool = True) -> None:
        """Toggle cursor visibility (no-op where not applicable)."""

    def flush(self) -> None:
        """Push buffered output to the device."""

    @contextmanager
    def frame(self) -> Iterator[None]:
        """Group the draw calls of one repaint."""
        yield
        self.flush()

    def fill(self, row: int, col: int, width: int, style: str = "") -> None:
        """Overwrite ``width`` cells with spaces."""
        if width > 0:
            self.write(row, col, " " * width, style)


class TerminalScreen(Screen):
    """Screen backed by a Rich Console writing to a real terminal."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(highlight=False)

    @property
    def size(self) -> tuple[int, int]:
        try:
            width, height = self.console.size
        except (OSError, ValueError):
            return DEFAULT_SIZE
        return (width or DEFAULT_SIZE[0], height or DEFAULT_SIZE[1])

    def write(self, row: int, col: int, text: str, style: str = "") -> None:
        width, height = self.size
        if row < 0 or row >= height or col >= width or not text:
            return
        text = text[: width - col]
        self.console.control(Control.move_to(col, row))
        self.console.print(Text(text, style=style, end=""), end="", soft_wrap=True)

    def clear_line(self, row: int, col: int = 0) -> None:
        self.console.control(Control.move_to(col, row), Control((ControlType.ERASE_IN_LINE, 0)))

    def clear(self) -> None:
        self.console.control(Control.clear(), Control.home())

    def show_cursor(self, show: bool = True) -> None:
        self.console.show_cursor(show)

    def flush(self) -> None:
        try:
            self.console.file.flush()
        except OSError:
            pass

    @contextmanager
    def frame(self) -> Iterator[None]:
        # Console's buffer context emits everything in one write on exit.
        with self.console:
            yield
        self.flush()


class GridScreen(Screen):
    """In-memory screen: a grid of (char, style) cells plus a log of writes."""

    def __init__(self, width: int = DEFAULT_SIZE[0], height: int = DEFAULT_SIZE[1]):
        self.width = width
        self.height = height
        self.cells: list[list[Cell]] = []
        self.writes: list[tuple[int, int, str, str]] = []
        self.cursor_visible = True
        self.clear()

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def write(self, row: int, col: int, text: str, style: str = "") -> None:
        if row < 0 or row >= self.height:
            return
        self.writes.append((row, col, text, style))
        for offset, char in enumerate(text):
            x = col + offset
            if x >= self.width:
                break
            if x >= 0:
                self.cells[row][x] = Cell(char, style)

    def clear_line(self, row: int, col: int = 0) -> None:
        if 0 <= row < self.height:
            for x in range(max(col, 0), self.width):
                self.cells[row][x] = BLANK

    def clear(self) -> None:
        self.cells = [[BLANK] * self.width for _ in range(self.height)]

    def show_cursor(self, show: bool = True) -> None:
        self.cursor_visible = show

    def line(self, row: int) -> str:
        """Plain text of one row, trailing blanks stripped."""
        return "".join(cell.char for cell in self.cells[row]).rstrip()

    def lines(self) -> list[str]:
        return [self.line(row) for row in range(self.height)]

    def style_at(self, row: int, col: int) -> str:
        return self.cells[row][col].style

    def snapshot(self) -> tuple[tuple[Cell, ...], ...]:
        """Hashable copy of every cell, for frame comparisons."""
        return tuple(tuple(row) for row in self.cells)

    def rows_written(self) -> set[int]:
        return {row for row, _, _, _ in self.writes}

    def reset_log(self) -> None:
        self.writes.clear()
