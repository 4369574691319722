"""Full-screen two-pane menu."""

from __future__ import annotations

from ..catalog import CatalogStore
from ..config import load_config


def run_menu() -> None:
    """Load config and catalog, then run the menu until the user quits."""
    from .app import MenuApp

    MenuApp(CatalogStore(), load_config()).run()


__all__ = ["run_menu"]
