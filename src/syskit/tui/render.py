"""Two-pane menu renderer with full and incremental repaint.

Screen layout (rows are 0-indexed, W is the category pane width):

    0        title
    1        author | repository | theme
    2        ==========================
    3        CATEGORIES      │ ACTIONS
    5..H-4   category rows   │ action rows (from column W+2)
    H-3      ==========================
    H-2      preview of the highlighted action (from column W+7)
    H-1      status line

An incremental repaint touches only the regions ``diff()`` reports for the
previous and current RenderState; it must leave the screen exactly as a full
redraw of the same state would.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import NamedTuple

from .. import __author__, __repository__, __version__
from ..types import Action, Pane
from .screen import Screen
from .state import MenuState
from .theme import TuiTheme, get_theme

TITLE_ROW = 0
BYLINE_ROW = 1
TOP_RULE_ROW = 2
HEADER_ROW = 3
LIST_TOP = 5

NAV_HINT = "←→ panes, ↑↓ select, Enter run, / search, * favorite, ? help, q quit"


@dataclass(frozen=True)
class Layout:
    """Screen geometry for one terminal size and category width."""

    width: int
    height: int
    category_width: int

    @property
    def actions_col(self) -> int:
        return self.category_width + 2

    @property
    def preview_col(self) -> int:
        return self.category_width + 7

    @property
    def list_bottom(self) -> int:
        """Last row usable by list entries."""
        return self.height - 4

    @property
    def visible_rows(self) -> int:
        return max(0, self.list_bottom - LIST_TOP + 1)

    @property
    def bottom_rule_row(self) -> int:
        return self.height - 3

    @property
    def preview_row(self) -> int:
        return self.height - 2

    @property
    def status_row(self) -> int:
        return self.height - 1


@dataclass(frozen=True)
class RenderState:
    """Snapshot of the state fields that decide what needs repainting."""

    selected_category: int
    selected_action: int
    active_pane: Pane
    list_generation: int = 0
    search_mode: bool = False
    search_term: str = ""

    @classmethod
    def capture(cls, state: MenuState) -> "RenderState":
        return cls(
            selected_category=state.selected_category,
            selected_action=state.selected_action,
            active_pane=state.active_pane,
            list_generation=state.list_generation,
            search_mode=state.search_mode,
            search_term=state.search_term,
        )


class Region(Enum):
    HEADERS = auto()
    CATEGORY_ROW = auto()
    ACTIONS_PANE = auto()
    ACTION_ROW = auto()
    PREVIEW = auto()
    STATUS = auto()


class DirtyRegion(NamedTuple):
    region: Region
    index: int | None = None


def diff(prev: RenderState, curr: RenderState) -> list[DirtyRegion]:
    """Regions to repaint to get from ``prev`` to ``curr``, in paint order."""
    dirty: list[DirtyRegion] = []

    def add(region: Region, index: int | None = None) -> None:
        entry = DirtyRegion(region, index)
        if entry not in dirty:
            dirty.append(entry)

    category_changed = prev.selected_category != curr.selected_category
    list_changed = category_changed or prev.list_generation != curr.list_generation

    if category_changed:
        add(Region.CATEGORY_ROW, prev.selected_category)
        add(Region.CATEGORY_ROW, curr.selected_category)
    if list_changed:
        add(Region.ACTIONS_PANE)
        add(Region.PREVIEW)
        add(Region.STATUS)
    elif prev.selected_action != curr.selected_action:
        add(Region.ACTION_ROW, prev.selected_action)
        add(Region.ACTION_ROW, curr.selected_action)
        add(Region.PREVIEW)

    if prev.active_pane != curr.active_pane:
        add(Region.HEADERS)
        add(Region.CATEGORY_ROW, curr.selected_category)
        if not list_changed:
            add(Region.ACTION_ROW, curr.selected_action)
        add(Region.PREVIEW)

    if prev.search_mode != curr.search_mode or prev.search_term != curr.search_term:
        add(Region.STATUS)
    return dirty


class Renderer:
    """Draws a MenuState onto a Screen.

    Reads only the state it is given. The first frame, and any frame after
    ``invalidate()`` or a terminal resize, is a full redraw.
    """

    def __init__(self, screen: Screen):
        self.screen = screen
        self._previous: RenderState | None = None
        self._previous_size: tuple[int, int] | None = None

    def invalidate(self) -> None:
        """Force the next render to be a full redraw."""
        self._previous = None

    def layout(self, state: MenuState) -> Layout:
        width, height = self.screen.size
        return Layout(width=width, height=height, category_width=state.category_width)

    def render(self, state: MenuState) -> list[DirtyRegion] | None:
        """Repaint for ``state``; returns the regions painted, or None after a full redraw."""
        size = self.screen.size
        current = RenderState.capture(state)
        painted: list[DirtyRegion] | None
        if self._previous is None or size != self._previous_size:
            self.full(state)
            painted = None
        else:
            painted = self.incremental(self._previous, state)
        self._previous = current
        self._previous_size = size
        return painted

    # ── repaint strategies ────────────────────────────────────────────────

    def full(self, state: MenuState) -> None:
        layout = self.layout(state)
        theme = get_theme(state.config.theme)
        with self.screen.frame():
            self.screen.clear()
            self._draw_chrome(state, layout, theme)
            self._draw_headers(state, layout, theme)
            for index in range(len(state.categories)):
                self._draw_category_row(state, layout, theme, index)
            self._draw_actions_pane(state, layout, theme)
            self._draw_status(state, layout, theme)
            self._draw_preview(state, layout, theme)

    def incremental(self, prev: RenderState, state: MenuState) -> list[DirtyRegion]:
        regions = diff(prev, RenderState.capture(state))
        if not regions:
            return regions
        layout = self.layout(state)
        theme = get_theme(state.config.theme)
        with self.screen.frame():
            for entry in regions:
                self._paint(entry, state, layout, theme)
        return regions

    def _paint(self, entry: DirtyRegion, state: MenuState, layout: Layout, theme: TuiTheme) -> None:
        region = entry.region
        if region is Region.HEADERS:
            self._draw_headers(state, layout, theme)
        elif region is Region.CATEGORY_ROW:
            self._draw_category_row(state, layout, theme, entry.index)
        elif region is Region.ACTIONS_PANE:
            self._draw_actions_pane(state, layout, theme)
        elif region is Region.ACTION_ROW:
            self._draw_action_row(state, layout, theme, entry.index)
        elif region is Region.PREVIEW:
            self._draw_preview(state, layout, theme)
        elif region is Region.STATUS:
            self._draw_status(state, layout, theme)

    # ── pieces ────────────────────────────────────────────────────────────

    def _draw_chrome(self, state: MenuState, layout: Layout, theme: TuiTheme) -> None:
        screen = self.screen
        title = f"syskit v{__version__}"
        byline = f"{__author__} | {__repository__} | Theme: {state.config.theme.value}"
        screen.write(TITLE_ROW, max(0, (layout.width - len(title)) // 2), title, theme.title)
        screen.write(BYLINE_ROW, max(0, (layout.width - len(byline)) // 2), byline, theme.muted)

        rule = "=" * layout.width
        screen.write(TOP_RULE_ROW, 0, rule, theme.rule)
        screen.write(layout.bottom_rule_row, 0, rule, theme.rule)
        for row in range(HEADER_ROW + 1, layout.bottom_rule_row):
            screen.write(row, layout.category_width, "│", theme.rule)

    def _draw_headers(self, state: MenuState, layout: Layout, theme: TuiTheme) -> None:
        screen = self.screen
        on_categories = state.active_pane is Pane.CATEGORIES
        screen.fill(HEADER_ROW, 0, layout.category_width)
        screen.write(HEADER_ROW, 0, "CATEGORIES", theme.header_focus if on_categories else theme.header)
        screen.write(HEADER_ROW, layout.category_width, "│", theme.rule)
        screen.write(HEADER_ROW, layout.category_width + 1, " ")
        screen.write(HEADER_ROW, layout.actions_col, "ACTIONS", theme.header if on_categories else theme.header_focus)

    def _draw_category_row(self, state: MenuState, layout: Layout, theme: TuiTheme, index: int | None) -> None:
        if index is None or not 0 <= index < len(state.categories):
            return
        row = LIST_TOP + index
        if row > layout.list_bottom:
            return

        inner = max(0, layout.category_width - 2)
        label = state.categories[index].label[:inner].ljust(inner)
        if index == state.selected_category:
            style = theme.row_focus if state.active_pane is Pane.CATEGORIES else theme.category_current
            self.screen.write(row, 0, f"> {label}", style)
        else:
            self.screen.write(row, 0, f"  {label}", theme.category)

    def _draw_actions_pane(self, state: MenuState, layout: Layout, theme: TuiTheme) -> None:
        for index in range(layout.visible_rows):
            self._draw_action_row(state, layout, theme, index)

    def _draw_action_row(self, state: MenuState, layout: Layout, theme: TuiTheme, index: int | None) -> None:
        if index is None or index < 0:
            return
        row = LIST_TOP + index
        if row > layout.list_bottom:
            return

        col = layout.actions_col
        self.screen.clear_line(row, col)
        actions = state.visible_actions
        if index >= len(actions):
            return

        action = actions[index]
        self.screen.write(row, col, "!" if action.destructive else " ", theme.warning)
        self.screen.write(row, col + 1, "★" if state.is_favorite(action) else " ", theme.favorite)

        text = self._action_text(state, action)
        if index == state.selected_action:
            style = theme.row_focus if state.active_pane is Pane.ACTIONS else theme.action_current
            self.screen.write(row, col + 2, " ")
            self.screen.write(row, col + 3, f"> {text}", style)
        else:
            self.screen.write(row, col + 2, f"   {text}", theme.action)

    @staticmethod
    def _action_text(state: MenuState, action: Action) -> str:
        if state.search_mode:
            return f"[{action.category.display_name}] {action.description}"
        return action.description

    def _draw_preview(self, state: MenuState, layout: Layout, theme: TuiTheme) -> None:
        self.screen.clear_line(layout.preview_row, layout.preview_col)
        if state.active_pane is not Pane.ACTIONS:
            return
        action = state.highlighted_action
        if action is None or not action.long_description:
            return
        available = max(0, layout.width - layout.preview_col - 2)
        self.screen.write(layout.preview_row, layout.preview_col, action.long_description[:available], theme.muted)

    def _draw_status(self, state: MenuState, layout: Layout, theme: TuiTheme) -> None:
        row = layout.status_row
        self.screen.clear_line(row, 0)
        if state.search_mode:
            segments = [
                ("Search: ", theme.muted),
                (state.search_term, theme.hint),
                (f" | Results: {len(state.search_results)} | Esc to exit", theme.muted),
            ]
        else:
            category = state.current_category
            segments = [
                ("Navigation: ", theme.muted),
                (NAV_HINT, theme.hint),
                (" | ", theme.muted),
                (category.storage_key if category else "", theme.accent),
            ]

        col = 0
        for text, style in segments:
            if text:
                self.screen.write(row, col, text, style)
                col += len(text)
