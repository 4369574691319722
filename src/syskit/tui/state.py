"""Menu state and the navigation state machine.

MenuState owns everything the renderer needs to draw a frame. Navigator
applies key presses to it, talking to the catalog store when a category
changes, a favorite is toggled or a search is recomputed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable

from .. import config as config_mod
from ..catalog import CatalogStore
from ..types import FAVORITES_KEY, Action, Category, Config, Pane
from .keys import (
    is_arrow,
    is_backspace,
    is_down,
    is_enter,
    is_escape,
    is_exit,
    is_left,
    is_printable,
    is_right,
    is_up,
)

MIN_CATEGORY_WIDTH = 16
CATEGORY_PADDING = 4


class Effect(Enum):
    """What the input loop should do after a key was handled."""

    NONE = auto()
    REDRAW = auto()
    EXECUTE = auto()
    HELP = auto()
    QUIT = auto()


def compute_category_width(categories: list[Category], override: int = 0) -> int:
    """Width of the category pane: longest name + 4, at least 16, unless overridden."""
    if override > 0:
        return override
    longest = max((len(c.display_name) for c in categories), default=0)
    return max(MIN_CATEGORY_WIDTH, longest + CATEGORY_PADDING)


def _clamp(index: int, length: int) -> int:
    if length <= 0:
        return 0
    return max(0, min(index, length - 1))


@dataclass
class MenuState:
    """Everything one frame depends on."""

    categories: list[Category]
    config: Config = field(default_factory=Config)
    actions: list[Action] = field(default_factory=list)
    favorites: list[str] = field(default_factory=list)
    category_width: int = MIN_CATEGORY_WIDTH
    active_pane: Pane = Pane.CATEGORIES
    selected_category: int = 0
    selected_action: int = 0
    search_mode: bool = False
    search_term: str = ""
    search_results: list[Action] = field(default_factory=list)
    scroll_offset: int = 0
    # Bumped whenever the visible action list is replaced.
    list_generation: int = 0
    pane_before_search: Pane = Pane.CATEGORIES

    @property
    def current_category(self) -> Category | None:
        if 0 <= self.selected_category < len(self.categories):
            return self.categories[self.selected_category]
        return None

    @property
    def visible_actions(self) -> list[Action]:
        return self.search_results if self.search_mode else self.actions

    @property
    def highlighted_action(self) -> Action | None:
        actions = self.visible_actions
        if 0 <= self.selected_action < len(actions):
            return actions[self.selected_action]
        return None

    def is_favorite(self, action: Action) -> bool:
        return str(action.ref) in self.favorites


class Navigator:
    """Applies keys to a MenuState."""

    def __init__(
        self,
        store: CatalogStore,
        state: MenuState,
        save_config: Callable[[Config], None] = config_mod.save_config,
    ):
        self.store = store
        self.state = state
        self._save_config = save_config

    @classmethod
    def create(cls, store: CatalogStore, cfg: Config, **kwargs) -> "Navigator":
        """Load the catalog and build the initial state (first category selected)."""
        categories = store.load_categories()
        state = MenuState(
            categories=categories,
            config=cfg,
            favorites=store.load_favorites(),
            category_width=compute_category_width(categories, cfg.category_width_override),
        )
        nav = cls(store, state, **kwargs)
        if categories:
            nav.select_category(0)
        return nav

    # ── dispatch ──────────────────────────────────────────────────────────

    def handle_key(self, key: str) -> Effect:
        if self.state.search_mode:
            return self._handle_search_key(key)
        return self._handle_normal_key(key)

    def _handle_normal_key(self, key: str) -> Effect:
        state = self.state
        if is_exit(key):
            return Effect.QUIT
        if is_up(key):
            self.move(-1)
        elif is_down(key):
            self.move(1)
        elif is_left(key):
            self.focus_categories()
        elif is_right(key):
            self.focus_actions()
        elif is_enter(key):
            if state.active_pane is Pane.ACTIONS and state.highlighted_action is not None:
                return Effect.EXECUTE
        elif key == "*":
            if state.active_pane is Pane.ACTIONS and self.toggle_favorite():
                return Effect.REDRAW
        elif key == "/":
            self.enter_search()
        elif key == "?":
            return Effect.HELP
        elif key in ("t", "T"):
            self.cycle_theme()
            return Effect.REDRAW
        return Effect.NONE

    def _handle_search_key(self, key: str) -> Effect:
        if is_arrow(key):
            if is_up(key):
                self.move(-1)
            elif is_down(key):
                self.move(1)
            return Effect.NONE
        if is_escape(key):
            self.exit_search()
            return Effect.REDRAW
        if is_backspace(key):
            self.search_backspace()
        elif is_enter(key):
            if self.state.highlighted_action is not None:
                return Effect.EXECUTE
        elif is_printable(key):
            self.search_type(key)
        return Effect.NONE

    # ── normal mode ───────────────────────────────────────────────────────

    def move(self, delta: int) -> None:
        """Move the focused pane's selection by ``delta``, clamped to the list."""
        state = self.state
        if state.active_pane is Pane.CATEGORIES and not state.search_mode:
            target = _clamp(state.selected_category + delta, len(state.categories))
            if target != state.selected_category:
                self.select_category(target)
        else:
            state.selected_action = _clamp(state.selected_action + delta, len(state.visible_actions))

    def select_category(self, index: int) -> None:
        """Select a category and load its actions fresh."""
        state = self.state
        state.selected_category = _clamp(index, len(state.categories))
        category = state.current_category
        state.actions = self.store.load_actions(category) if category else []
        state.selected_action = 0
        state.scroll_offset = 0
        state.list_generation += 1

    def focus_categories(self) -> None:
        self.state.active_pane = Pane.CATEGORIES

    def focus_actions(self) -> None:
        """Move focus to the action list, only if it has something in it."""
        if self.state.visible_actions:
            self.state.active_pane = Pane.ACTIONS

    def toggle_favorite(self) -> bool:
        """Toggle the highlighted action in favorites. Returns False if nothing is highlighted."""
        state = self.state
        action = state.highlighted_action
        if action is None:
            return False

        self.store.toggle_favorite(action.ref)
        state.favorites = self.store.load_favorites()
        category = state.current_category
        if category is not None and category.storage_key == FAVORITES_KEY and not state.search_mode:
            self._reload_current_category()
        return True

    def cycle_theme(self) -> None:
        cfg = self.state.config
        cfg.theme = cfg.theme.next()
        self._save_config(cfg)

    def after_execution(self) -> None:
        """Refresh derived lists that an execution may have changed (Recent)."""
        state = self.state
        state.favorites = self.store.load_favorites()
        category = state.current_category
        if category is not None and category.is_synthetic and not state.search_mode:
            self._reload_current_category()

    def _reload_current_category(self) -> None:
        state = self.state
        category = state.current_category
        state.actions = self.store.load_actions(category) if category else []
        state.selected_action = _clamp(state.selected_action, len(state.actions))
        state.list_generation += 1
        if not state.actions:
            state.active_pane = Pane.CATEGORIES

    # ── search mode ───────────────────────────────────────────────────────

    def enter_search(self) -> None:
        state = self.state
        state.pane_before_search = state.active_pane
        state.search_mode = True
        state.search_term = ""
        state.search_results = []
        state.selected_action = 0
        state.active_pane = Pane.ACTIONS
        state.list_generation += 1

    def exit_search(self) -> None:
        """Leave search mode, discarding results, back to normal browsing."""
        state = self.state
        state.search_mode = False
        state.search_term = ""
        state.search_results = []
        state.selected_action = 0
        state.active_pane = state.pane_before_search
        if not state.actions:
            state.active_pane = Pane.CATEGORIES
        state.list_generation += 1

    def search_type(self, char: str) -> None:
        self.state.search_term += char
        self._recompute_search()

    def search_backspace(self) -> None:
        if self.state.search_term:
            self.state.search_term = self.state.search_term[:-1]
            self._recompute_search()

    def _recompute_search(self) -> None:
        state = self.state
        state.search_results = self.store.search(state.search_term)
        state.selected_action = 0
        state.list_generation += 1
