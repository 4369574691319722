"""Tests for raw mode and terminal restore, on a pseudo-terminal."""

import os
import termios

import pytest

from syskit.tui.terminal import RESET_SEQUENCE, TerminalState, raw_mode


@pytest.fixture
def pty():
    master, slave = os.openpty()
    yield master, slave
    os.close(master)
    os.close(slave)


def test_raw_mode_disables_echo_and_line_mode(pty):
    _, slave = pty
    before = termios.tcgetattr(slave)
    assert before[3] & termios.ECHO

    with raw_mode(slave) as fd:
        assert fd == slave
        attrs = termios.tcgetattr(slave)
        assert not attrs[3] & termios.ECHO
        assert not attrs[3] & termios.ICANON

    assert termios.tcgetattr(slave) == before


def test_raw_mode_restores_on_error(pty):
    _, slave = pty
    before = termios.tcgetattr(slave)
    with pytest.raises(RuntimeError):
        with raw_mode(slave):
            raise RuntimeError("boom")
    assert termios.tcgetattr(slave) == before


def test_raw_mode_reads_single_bytes(pty):
    master, slave = pty
    with raw_mode(slave):
        os.write(master, b"ab")
        assert os.read(slave, 1) == b"a"


def test_raw_mode_tolerates_non_tty(tmp_path):
    with open(tmp_path / "plain", "w") as f:
        with raw_mode(f.fileno()) as fd:
            assert fd == f.fileno()


def test_terminal_state_restore(pty, capsys):
    _, slave = pty
    state = TerminalState(slave)
    before = termios.tcgetattr(slave)

    attrs = termios.tcgetattr(slave)
    attrs[3] &= ~termios.ECHO
    termios.tcsetattr(slave, termios.TCSANOW, attrs)

    state.restore()
    assert termios.tcgetattr(slave) == before
    assert RESET_SEQUENCE in capsys.readouterr().out
