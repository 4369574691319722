"""Runs one action under the execution overlay.

Per invocation: Idle -> dependency check -> Blocked | Confirming | Running
-> Stopped | Completed -> Idle. The unit runs as its own process group with
stdout and stderr captured into a temporary file that the overlay repaints.
"""

from __future__ import annotations

import logging
import os
import shutil
import signal
import subprocess
import tempfile
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator

import readchar

from .. import config as config_mod
from ..catalog import CatalogStore
from ..types import Action, Config
from .keys import is_enter
from .overlay import ExecutionOverlay, confirm, read_output_lines, show_message
from .screen import Screen
from .terminal import raw_mode, read_byte
from .theme import get_theme

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.1


class ExecutionState(str, Enum):
    IDLE = "idle"
    BLOCKED = "blocked"
    CONFIRMING = "confirming"
    RUNNING = "running"
    STOPPED = "stopped"
    COMPLETED = "completed"


@dataclass
class ExecutionResult:
    state: ExecutionState
    missing: tuple[str, ...] = ()
    log_path: Path | None = None


class CancelToken:
    """Cancellation flag set from the SIGINT handler.

    ``wait()`` doubles as the supervisor's poll sleep. Setting the flag takes
    no lock, so it is safe from inside a signal handler.
    """

    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` unless already cancelled; return the flag."""
        if not self._cancelled:
            time.sleep(timeout)
        return self._cancelled


@contextmanager
def interrupt_cancels(token: CancelToken) -> Iterator[CancelToken]:
    """Route SIGINT to ``token`` for the duration of the block.

    Signal handlers can only be installed from the main thread; elsewhere the
    block runs with the existing disposition.
    """
    if threading.current_thread() is not threading.main_thread():
        yield token
        return

    def _handler(signum, frame):
        token.cancel()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous if previous is not None else signal.SIG_DFL)


def missing_dependencies(action: Action) -> tuple[str, ...]:
    """Dependency command names not found on PATH."""
    return tuple(dep for dep in action.dependencies if shutil.which(dep) is None)


class ProcessSupervisor:
    """Dependency check, confirmation, run, overlay and dismissal for one action."""

    def __init__(
        self,
        screen: Screen,
        store: CatalogStore,
        config: Config,
        read_key: Callable[[], str] = readchar.readkey,
        stdin_fd: int | None = None,
        read_byte: Callable[[int], bytes] = read_byte,
        poll_interval: float = POLL_INTERVAL,
        logs_dir: Path | None = None,
    ):
        self.screen = screen
        self.store = store
        self.config = config
        self.read_key = read_key
        self.stdin_fd = stdin_fd
        self.read_byte = read_byte
        self.poll_interval = poll_interval
        self.logs_dir = logs_dir

    def execute(self, action: Action, category_width: int, token: CancelToken | None = None) -> ExecutionResult:
        theme = get_theme(self.config.theme)

        missing = missing_dependencies(action)
        if missing:
            logger.info("Blocked %s, missing dependencies: %s", action.ref, ", ".join(missing))
            lines = [f"Action: {action.description}", "Missing dependencies:"]
            lines.extend(f"  - {name}" for name in missing)
            show_message(self.screen, theme, "DEPENDENCIES MISSING", lines, self.read_key)
            return ExecutionResult(ExecutionState.BLOCKED, missing=missing)

        if action.destructive and self.config.confirmation_enabled:
            if not confirm(self.screen, theme, action.description, self.read_key):
                logger.debug("Declined %s", action.ref)
                return ExecutionResult(ExecutionState.IDLE)

        self.store.add_recent(action.ref)
        logger.info("Running %s", action.ref)

        token = token or CancelToken()
        overlay = ExecutionOverlay(self.screen, theme, action.description, category_width)
        overlay.draw_frame()

        fd, name = tempfile.mkstemp(prefix="syskit-", suffix=".out")
        buffer = Path(name)
        log_path = None
        try:
            with interrupt_cancels(token):
                with os.fdopen(fd, "wb") as out:
                    proc = self._spawn(action, out)
                state = self._supervise(proc, overlay, buffer, token)
                if self.config.auto_save_logs:
                    log_path = self._save_log(action, buffer)
                self._wait_for_dismissal()
        finally:
            buffer.unlink(missing_ok=True)

        logger.info("Finished %s: %s", action.ref, state.value)
        return ExecutionResult(state, log_path=log_path)

    def _spawn(self, action: Action, out) -> subprocess.Popen:
        env = dict(os.environ, PYTHONUNBUFFERED="1")
        return subprocess.Popen(
            action.entry_point,
            stdin=subprocess.DEVNULL,
            stdout=out,
            stderr=subprocess.STDOUT,
            start_new_session=True,
            env=env,
        )

    def _supervise(
        self,
        proc: subprocess.Popen,
        overlay: ExecutionOverlay,
        buffer: Path,
        token: CancelToken,
    ) -> ExecutionState:
        try:
            while proc.poll() is None:
                overlay.render_output(read_output_lines(buffer))
                if token.wait(self.poll_interval):
                    self._stop(proc)
                    overlay.show_stopped()
                    return ExecutionState.STOPPED
            overlay.render_output(read_output_lines(buffer))
            overlay.show_completed()
            return ExecutionState.COMPLETED
        finally:
            if proc.poll() is None:
                self._stop(proc)

    @staticmethod
    def _stop(proc: subprocess.Popen) -> None:
        """SIGTERM the child's process group and wait for it."""
        try:
            os.killpg(proc.pid, signal.SIGTERM)
        except ProcessLookupError:
            pass
        proc.wait()

    def _save_log(self, action: Action, buffer: Path) -> Path | None:
        logs_dir = self.logs_dir or config_mod.get_logs_dir()
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        target = logs_dir / f"{action.category.storage_key}_{action.source_file.stem}_{stamp}.log"
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(buffer, target)
        except OSError as e:
            logger.warning("Could not save execution log %s: %s", target, e)
            return None
        return target

    def _wait_for_dismissal(self) -> None:
        """Block until Enter (or end of input) with echo and line mode off."""
        with raw_mode(self.stdin_fd) as fd:
            if fd is None:
                while not is_enter(self.read_key()):
                    pass
                return
            while True:
                byte = self.read_byte(fd)
                if byte in (b"", b"\r", b"\n"):
                    return
