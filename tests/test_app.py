"""Tests for the input loop."""

import readchar

from syskit.tui.app import MenuApp
from syskit.tui.screen import GridScreen
from syskit.tui.supervisor import ExecutionResult, ExecutionState


class ScriptedKeys:
    def __init__(self, *keys):
        self.keys = list(keys)

    def __call__(self):
        return self.keys.pop(0) if self.keys else "q"


class FakeSupervisor:
    def __init__(self, store, error=None):
        self.store = store
        self.error = error
        self.executed = []

    def execute(self, action, category_width):
        self.executed.append((action.description, category_width))
        if self.error:
            raise self.error
        self.store.add_recent(action.ref)
        return ExecutionResult(ExecutionState.COMPLETED)


def make_app(store, cfg, keys, supervisor=None, screen=None):
    return MenuApp(
        store,
        cfg,
        screen=screen or GridScreen(80, 24),
        read_key=keys,
        supervisor=supervisor,
    )


def test_quit_clears_screen_and_restores_cursor(store, write_unit, cfg):
    write_unit("system", "show_info", "Show System Information")
    screen = GridScreen(80, 24)
    app = make_app(store, cfg, ScriptedKeys("q"), screen=screen)
    app.run()
    assert screen.cursor_visible
    assert screen.lines() == [""] * 24


def test_enter_runs_highlighted_action(store, write_unit, cfg):
    write_unit("system", "show_info", "Show System Information")
    supervisor = FakeSupervisor(store)
    app = make_app(store, cfg, ScriptedKeys(readchar.key.RIGHT, "\r", "q"), supervisor=supervisor)
    app.run()
    assert supervisor.executed == [("Show System Information", 16)]
    assert store.load_recent() == ["System|show_info"]


def test_recent_view_refreshes_after_execution(store, write_unit, cfg):
    write_unit("system", "show_info", "Show System Information")
    supervisor = FakeSupervisor(store)
    down, right = readchar.key.DOWN, readchar.key.RIGHT
    # Run from System, then browse to Recent and run it again from there.
    keys = ScriptedKeys(right, "\r", readchar.key.LEFT, down, down, down, right, "\r", "q")
    app = make_app(store, cfg, keys, supervisor=supervisor)
    app.run()

    assert app.state.current_category.display_name == "Recent"
    assert [a.description for a in app.state.actions] == ["Show System Information"]
    assert len(supervisor.executed) == 2


def test_execution_error_is_shown_not_raised(store, write_unit, cfg):
    write_unit("system", "show_info", "Show System Information")
    supervisor = FakeSupervisor(store, error=OSError("cannot spawn"))
    screen = GridScreen(80, 24)
    seen = []

    def keys():
        seen.append(list(screen.lines()))
        return script.pop(0) if script else "q"

    script = [readchar.key.RIGHT, "\r", "x"]
    app = make_app(store, cfg, keys, supervisor=supervisor, screen=screen)
    app.run()

    # The key read after Enter is the "press any key" pause of the error box.
    error_frame = "\n".join(seen[2])
    assert "EXECUTION FAILED" in error_frame
    assert "cannot spawn" in error_frame


def test_help_overlay_then_full_redraw(store, write_unit, cfg):
    write_unit("system", "show_info", "Show System Information")
    screen = GridScreen(80, 24)
    seen = []

    def keys():
        seen.append(list(screen.lines()))
        return script.pop(0) if script else "q"

    script = ["?", "x"]
    make_app(store, cfg, keys, screen=screen).run()
    assert any("Toggle favorite" in line for line in seen[1])
    assert seen[2][3].startswith("CATEGORIES")
    assert not any("Toggle favorite" in line for line in seen[2])
