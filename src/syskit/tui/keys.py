"""Keyboard input helpers for the menu.

Keys arrive from ``readchar.readkey()`` as whole strings, so arrow keys are
already decoded escape sequences (``ESC [ A/B/C/D``).
"""

from __future__ import annotations

import readchar


def is_enter(key: str) -> bool:
    """Check if key is Enter/Return."""
    return key in (readchar.key.ENTER, "\r", "\n")


def is_escape(key: str) -> bool:
    """Check if key is Escape (handles terminal variations).

    A bare Escape may be read together with the next key press; real
    sequences (arrows, Home, Delete, F-keys) start with ``ESC [`` or ``ESC O``.
    """
    if key in (readchar.key.ESC, "\x1b", "\x1b\x1b"):
        return True
    return len(key) == 2 and key[0] == "\x1b" and key[1] not in "[O"


def is_exit(key: str) -> bool:
    """Check if key is the quit key."""
    return key in ("q", "Q")


def is_up(key: str) -> bool:
    """Check if key is up arrow or vim 'k'."""
    return key.lower() == "k" or key == readchar.key.UP


def is_down(key: str) -> bool:
    """Check if key is down arrow or vim 'j'."""
    return key.lower() == "j" or key == readchar.key.DOWN


def is_left(key: str) -> bool:
    return key == readchar.key.LEFT


def is_right(key: str) -> bool:
    return key == readchar.key.RIGHT


def is_arrow(key: str) -> bool:
    return key in (readchar.key.UP, readchar.key.DOWN, readchar.key.LEFT, readchar.key.RIGHT)


def is_backspace(key: str) -> bool:
    """Check if key is backspace (handles terminal variations)."""
    return key in (readchar.key.BACKSPACE, "\x7f", "\b")


def is_printable(key: str) -> bool:
    """Check if key is a single printable character (search input)."""
    return len(key) == 1 and key.isprintable()


def is_yes(key: str) -> bool:
    return key in ("y", "Y")
