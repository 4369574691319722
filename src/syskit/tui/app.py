"""The input loop: read a key, update state, repaint, maybe execute."""

from __future__ import annotations

import logging
from typing import Callable

import readchar

from ..catalog import CatalogStore
from ..types import Config
from .overlay import show_help, show_message
from .render import Renderer
from .screen import Screen, TerminalScreen
from .state import Effect, Navigator
from .supervisor import ProcessSupervisor
from .theme import get_theme

logger = logging.getLogger(__name__)


class MenuApp:
    """Owns the screen for the lifetime of the menu."""

    def __init__(
        self,
        store: CatalogStore,
        config: Config,
        screen: Screen | None = None,
        read_key: Callable[[], str] = readchar.readkey,
        supervisor: ProcessSupervisor | None = None,
    ):
        self.screen = screen or TerminalScreen()
        self.read_key = read_key
        self.navigator = Navigator.create(store, config)
        self.renderer = Renderer(self.screen)
        self.supervisor = supervisor or ProcessSupervisor(self.screen, store, config, read_key=read_key)

    @property
    def state(self):
        return self.navigator.state

    def run(self) -> None:
        self.screen.show_cursor(False)
        try:
            while True:
                self.renderer.render(self.state)
                effect = self.navigator.handle_key(self.read_key())
                if effect is Effect.QUIT:
                    break
                if effect is Effect.HELP:
                    show_help(self.screen, get_theme(self.state.config.theme), self.read_key)
                    self.renderer.invalidate()
                elif effect is Effect.EXECUTE:
                    self.execute_highlighted()
                elif effect is Effect.REDRAW:
                    self.renderer.invalidate()
        finally:
            with self.screen.frame():
                self.screen.clear()
            self.screen.show_cursor(True)

    def execute_highlighted(self) -> None:
        """Run the highlighted action; the menu survives whatever happens."""
        action = self.state.highlighted_action
        if action is None:
            return
        try:
            self.supervisor.execute(action, self.state.category_width)
        except Exception as e:
            logger.exception("Execution of %s failed", action.ref)
            show_message(
                self.screen,
                get_theme(self.state.config.theme),
                "EXECUTION FAILED",
                [f"Action: {action.description}", str(e)],
                self.read_key,
            )
        self.navigator.after_execution()
        self.renderer.invalidate()
