"""Tests for overlay drawing and output cleanup."""

from syskit.tui.overlay import (
    Box,
    ExecutionOverlay,
    confirm,
    draw_box,
    read_output_lines,
    show_help,
    show_message,
)
from syskit.tui.screen import GridScreen
from syskit.tui.theme import get_theme
from syskit.types import Theme

THEME = get_theme(Theme.DARK)


def test_draw_box():
    screen = GridScreen(30, 6)
    draw_box(screen, Box(1, 2, 20, 4), THEME, title="HI", footer="BYE")
    assert screen.line(1) == "  ┌─ HI " + "─" * 13 + "┐"
    assert screen.line(2) == "  │" + " " * 18 + "│"
    assert screen.line(4) == "  └─ BYE " + "─" * 12 + "┘"


def test_long_title_keeps_corner():
    screen = GridScreen(30, 6)
    draw_box(screen, Box(0, 0, 12, 3), THEME, title="A very long title")
    assert screen.line(0).endswith("┐")
    assert len(screen.line(0)) == 12


class TestConfirm:
    def test_centered_dialog(self):
        screen = GridScreen(80, 24)
        assert confirm(screen, THEME, "Clean System Disk Space", lambda: "y") is True
        lines = screen.lines()
        assert lines[8][10:].startswith("┌─ CONFIRMATION REQUIRED")
        assert "WARNING: This action is potentially destructive!" in lines[10]
        assert "Action: Clean System Disk Space" in lines[12]
        assert "Continue? [y/N]:" in lines[14]

    def test_anything_but_y_declines(self):
        for key in ("n", "N", "\r", " ", "yes"):
            assert confirm(GridScreen(80, 24), THEME, "x", lambda key=key: key) is False


def test_help_and_message_wait_for_a_key():
    calls = []
    screen = GridScreen(80, 24)
    show_help(screen, THEME, lambda: calls.append("help") or "x")
    assert any("Toggle favorite" in line for line in screen.lines())

    show_message(screen, THEME, "DEPENDENCIES MISSING", ["  - curl"], lambda: calls.append("msg") or "x")
    text = "\n".join(screen.lines())
    assert "DEPENDENCIES MISSING" in text
    assert "Press any key to continue..." in text
    assert calls == ["help", "msg"]


class TestExecutionOverlay:
    def test_geometry_and_frame(self):
        screen = GridScreen(80, 24)
        overlay = ExecutionOverlay(screen, THEME, "Show Info", 16)
        assert (overlay.box.row, overlay.box.col, overlay.box.width, overlay.box.height) == (4, 18, 60, 16)

        overlay.draw_frame()
        assert "Executing: Show Info" in screen.line(4)
        assert "[Ctrl-C] Stop [Enter] Close" in screen.line(19)

    def test_render_pads_stale_text(self):
        screen = GridScreen(80, 24)
        overlay = ExecutionOverlay(screen, THEME, "x", 16)
        overlay.draw_frame()
        overlay.render_output(["a much longer first line of output"])
        overlay.render_output(["short"])
        assert screen.line(5)[20:].rstrip(" │") == "short"
        assert screen.line(5).endswith("│")

    def test_render_clips_to_inner_width(self):
        screen = GridScreen(80, 24)
        overlay = ExecutionOverlay(screen, THEME, "x", 16)
        overlay.draw_frame()
        overlay.render_output(["x" * 200])
        assert screen.line(5)[77] == "│"
        assert screen.line(5)[20:76] == "x" * 56

    def test_shows_first_lines_and_blanks_the_rest(self):
        screen = GridScreen(80, 24)
        overlay = ExecutionOverlay(screen, THEME, "x", 16)
        overlay.draw_frame()
        overlay.render_output([f"line {i}" for i in range(100)])
        assert screen.line(5)[20:].rstrip(" │") == "line 0"
        assert screen.line(18)[20:].rstrip(" │") == "line 13"

        overlay.render_output(["only"])
        assert screen.line(6)[20:].rstrip(" │") == ""

    def test_stopped_and_completed_footers(self):
        screen = GridScreen(80, 24)
        overlay = ExecutionOverlay(screen, THEME, "x", 16)
        overlay.draw_frame()
        overlay.render_output(["some output"])
        overlay.show_stopped()
        assert "some output" not in "\n".join(screen.lines())
        assert "*** EXECUTION STOPPED BY USER ***" in screen.line(7)
        assert "STOPPED - Press [Enter] to close" in screen.line(19)
        assert screen.style_at(19, 21) == THEME.error

        overlay.show_completed()
        assert "COMPLETED - Press [Enter] to close" in screen.line(19)


def test_read_output_lines_cleans_control_sequences(tmp_path):
    path = tmp_path / "out"
    path.write_bytes(b"\x1b[32mgreen\x1b[0m\nprogress 10%\rprogress 100%\ncol1\tcol2\nbell\x07\n")
    assert read_output_lines(path) == ["green", "progress 100%", "col1    col2", "bell"]


def test_read_output_lines_missing_file(tmp_path):
    assert read_output_lines(tmp_path / "gone") == []
