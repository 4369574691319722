"""Tests for the process supervisor, using real child processes."""

import os
import signal
import tempfile
import termios
import threading
from pathlib import Path

import pytest

from syskit.tui import supervisor as supervisor_mod
from syskit.tui.screen import GridScreen
from syskit.tui.supervisor import (
    CancelToken,
    ExecutionState,
    ProcessSupervisor,
    interrupt_cancels,
    missing_dependencies,
)
from syskit.types import Config

SRC_DIR = Path(__file__).resolve().parents[1] / "src"

# Overlay text column for an 80-column screen with a 16-column category pane.
TEXT_COLS = slice(20, 76)


@pytest.fixture(autouse=True)
def child_env(monkeypatch, tmp_path):
    """Children import syskit from the source tree; temp buffers go to tmp_path."""
    existing = os.environ.get("PYTHONPATH")
    monkeypatch.setenv("PYTHONPATH", str(SRC_DIR) + (os.pathsep + existing if existing else ""))
    buffers = tmp_path / "buffers"
    buffers.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(buffers))
    return buffers


@pytest.fixture
def pty_fd():
    master, slave = os.openpty()
    yield slave
    os.close(master)
    os.close(slave)


class Keys:
    """Scripted key reader."""

    def __init__(self, *keys):
        self.keys = list(keys)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.keys.pop(0) if self.keys else "\r"


def make_supervisor(store, pty_fd, config=None, keys=None, screen=None):
    return ProcessSupervisor(
        screen or GridScreen(80, 24),
        store,
        config or Config(),
        read_key=keys or Keys(),
        stdin_fd=pty_fd,
        read_byte=lambda fd: b"\n",
        poll_interval=0.02,
    )


def first_action(store, category="System"):
    return store.load_actions(store.category_named(category))[0]


def overlay_text(screen):
    return [line[TEXT_COLS].strip() for line in screen.lines()]


class TestDependencyCheck:
    def test_missing_dependencies(self, store, write_unit):
        write_unit("system", "x", dependencies=["sh", "definitely-not-a-command-xyz"])
        assert missing_dependencies(first_action(store)) == ("definitely-not-a-command-xyz",)

    def test_blocked_runs_nothing(self, store, write_unit, pty_fd, monkeypatch):
        write_unit("system", "x", "Needs tools", dependencies=["definitely-not-a-command-xyz"])
        monkeypatch.setattr(supervisor_mod.subprocess, "Popen", _no_spawn)
        keys = Keys("x")
        screen = GridScreen(80, 24)

        result = make_supervisor(store, pty_fd, keys=keys, screen=screen).execute(first_action(store), 16)

        assert result.state is ExecutionState.BLOCKED
        assert result.missing == ("definitely-not-a-command-xyz",)
        assert keys.calls == 1
        assert store.load_recent() == []
        assert any("definitely-not-a-command-xyz" in line for line in screen.lines())


def _no_spawn(*args, **kwargs):
    raise AssertionError("no process should be started")


class TestConfirmation:
    def test_decline_has_no_side_effects(self, store, write_unit, pty_fd, monkeypatch, child_env):
        write_unit("system", "wipe", "Wipe Everything", destructive=True)
        monkeypatch.setattr(supervisor_mod.subprocess, "Popen", _no_spawn)

        result = make_supervisor(store, pty_fd, keys=Keys("n")).execute(first_action(store), 16)

        assert result.state is ExecutionState.IDLE
        assert store.load_recent() == []
        assert list(child_env.iterdir()) == []

    def test_only_y_confirms(self, store, write_unit, pty_fd, monkeypatch):
        write_unit("system", "wipe", "Wipe Everything", destructive=True)
        monkeypatch.setattr(supervisor_mod.subprocess, "Popen", _no_spawn)
        for answer in ("N", "\r", "x", "\x1b"):
            result = make_supervisor(store, pty_fd, keys=Keys(answer)).execute(first_action(store), 16)
            assert result.state is ExecutionState.IDLE

    def test_confirmed_destructive_runs(self, store, write_unit, pty_fd):
        write_unit("system", "wipe", "Wipe Everything", destructive=True)
        result = make_supervisor(store, pty_fd, keys=Keys("Y")).execute(first_action(store), 16)
        assert result.state is ExecutionState.COMPLETED

    def test_confirmation_disabled_skips_dialog(self, store, write_unit, pty_fd):
        write_unit("system", "wipe", "Wipe Everything", destructive=True)
        keys = Keys()
        cfg = Config(confirmation_enabled=False)
        result = make_supervisor(store, pty_fd, config=cfg, keys=keys).execute(first_action(store), 16)
        assert result.state is ExecutionState.COMPLETED
        assert keys.calls == 0


class TestRun:
    def test_show_info_completes(self, store, write_unit, pty_fd, child_env):
        write_unit("system", "show_info", "Show System Information")
        screen = GridScreen(80, 24)

        result = make_supervisor(store, pty_fd, screen=screen).execute(first_action(store), 16)

        assert result.state is ExecutionState.COMPLETED
        assert store.load_recent() == ["System|show_info"]
        text = overlay_text(screen)
        assert "OK" in text
        assert any("Action: show_info.py" in line for line in text)
        assert "COMPLETED - Press [Enter] to close" in screen.line(19)
        assert "Executing: Show System Information" in screen.line(4)
        assert list(child_env.iterdir()) == []

    def test_output_log_saved(self, store, write_unit, pty_fd, config_dir):
        write_unit("system", "show_info", "Show System Information")
        result = make_supervisor(store, pty_fd).execute(first_action(store), 16)

        assert result.log_path is not None
        assert result.log_path.parent == config_dir / "logs"
        assert result.log_path.name.startswith("system_show_info_")
        assert "OK" in result.log_path.read_text()

    def test_log_not_saved_when_disabled(self, store, write_unit, pty_fd):
        write_unit("system", "show_info")
        cfg = Config(auto_save_logs=False)
        assert make_supervisor(store, pty_fd, config=cfg).execute(first_action(store), 16).log_path is None

    def test_crash_is_indistinguishable_from_success(self, store, write_unit, pty_fd):
        write_unit("system", "boom", "Boom", body="    raise RuntimeError('kaput')")
        screen = GridScreen(80, 40)
        result = make_supervisor(store, pty_fd, screen=screen).execute(first_action(store), 16)
        assert result.state is ExecutionState.COMPLETED
        assert any("RuntimeError: kaput" in line for line in overlay_text(screen))

    def test_shows_head_of_long_output(self, store, write_unit, pty_fd):
        write_unit("system", "chatty", "Chatty", body="    for i in range(100):\n        print(f'line {i}')")
        screen = GridScreen(80, 24)
        make_supervisor(store, pty_fd, screen=screen).execute(first_action(store), 16)
        text = overlay_text(screen)
        assert "line 0" in text
        assert "line 99" not in text

    def test_shell_unit(self, store, menu_dir, pty_fd):
        (menu_dir / "system" / "hello.sh").write_text(
            '#!/bin/bash\nDESCRIPTION="Say hello"\n\nrun() {\n    echo "hello from bash"\n}\n'
        )
        screen = GridScreen(80, 24)
        result = make_supervisor(store, pty_fd, screen=screen).execute(first_action(store), 16)
        assert result.state is ExecutionState.COMPLETED
        assert "hello from bash" in overlay_text(screen)


class TestCancellation:
    def test_sigint_stops_child_and_restores_terminal(self, store, write_unit, pty_fd):
        write_unit(
            "system",
            "slow",
            "Slow",
            body="    import time\n    print('started', flush=True)\n    time.sleep(60)",
        )
        before_attrs = termios.tcgetattr(pty_fd)
        before_handler = signal.getsignal(signal.SIGINT)
        screen = GridScreen(80, 24)

        timer = threading.Timer(0.5, os.kill, (os.getpid(), signal.SIGINT))
        timer.start()
        try:
            result = make_supervisor(store, pty_fd, screen=screen).execute(first_action(store), 16)
        finally:
            timer.cancel()

        assert result.state is ExecutionState.STOPPED
        assert store.load_recent() == ["System|slow"]
        assert "*** EXECUTION STOPPED BY USER ***" in overlay_text(screen)
        assert "STOPPED - Press [Enter] to close" in screen.line(19)
        assert termios.tcgetattr(pty_fd) == before_attrs
        assert signal.getsignal(signal.SIGINT) is before_handler

    def test_pre_cancelled_token_stops_immediately(self, store, write_unit, pty_fd):
        write_unit("system", "slow", "Slow", body="    import time\n    time.sleep(60)")
        token = CancelToken()
        token.cancel()
        result = make_supervisor(store, pty_fd).execute(first_action(store), 16, token=token)
        assert result.state is ExecutionState.STOPPED


class TestInterruptCancels:
    def test_routes_sigint_and_restores(self):
        before = signal.getsignal(signal.SIGINT)
        token = CancelToken()
        with interrupt_cancels(token):
            os.kill(os.getpid(), signal.SIGINT)
            token.wait(0.2)
        assert token.cancelled
        assert signal.getsignal(signal.SIGINT) is before

    def test_noop_outside_main_thread(self):
        seen = []

        def worker():
            with interrupt_cancels(CancelToken()) as token:
                seen.append(token.cancelled)

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()
        assert seen == [False]

    def test_wait_returns_immediately_when_cancelled(self):
        token = CancelToken()
        assert token.wait(0) is False
        token.cancel()
        assert token.wait(60) is True
