"""Raw terminal mode and exit-time terminal restore."""

from __future__ import annotations

import logging
import os
import sys
import termios
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)

# Reset attributes, show cursor.
RESET_SEQUENCE = "\x1b[0m\x1b[?25h"


def _stdin_fd() -> int | None:
    try:
        return sys.stdin.fileno()
    except (AttributeError, OSError, ValueError):
        return None


@contextmanager
def raw_mode(fd: int | None = None) -> Iterator[int | None]:
    """Turn off echo and canonical mode on ``fd`` (default stdin) for the block.

    Reads return after a single byte (VMIN=1, VTIME=0). The saved attributes
    are put back on every exit path. If ``fd`` is not a terminal the block
    still runs, unchanged.
    """
    if fd is None:
        fd = _stdin_fd()

    saved = None
    if fd is not None:
        try:
            saved = termios.tcgetattr(fd)
            raw = termios.tcgetattr(fd)
            raw[3] &= ~(termios.ECHO | termios.ICANON)
            raw[6][termios.VMIN] = 1
            raw[6][termios.VTIME] = 0
            termios.tcsetattr(fd, termios.TCSADRAIN, raw)
        except (termios.error, OSError) as e:
            logger.debug("Raw mode unavailable on fd %s: %s", fd, e)
            saved = None

    try:
        yield fd
    finally:
        if saved is not None:
            try:
                termios.tcsetattr(fd, termios.TCSADRAIN, saved)
            except (termios.error, OSError) as e:
                logger.warning("Failed to restore terminal attributes: %s", e)


def read_byte(fd: int) -> bytes:
    """Block for one byte from ``fd``; b"" at end of input."""
    return os.read(fd, 1)


class TerminalState:
    """Terminal attributes captured at startup, put back at exit."""

    def __init__(self, fd: int | None = None):
        self.fd = _stdin_fd() if fd is None else fd
        self.saved = None
        if self.fd is not None:
            try:
                self.saved = termios.tcgetattr(self.fd)
            except (termios.error, OSError):
                self.saved = None

    def restore(self) -> None:
        """Restore termios attributes, reset styling and show the cursor."""
        if self.saved is not None:
            try:
                termios.tcsetattr(self.fd, termios.TCSADRAIN, self.saved)
            except (termios.error, OSError) as e:
                logger.debug("Terminal restore failed: %s", e)
        try:
            sys.stdout.write(RESET_SEQUENCE)
            sys.stdout.flush()
        except (OSError, ValueError):
            pass
