"""Child-process entry point that runs one unit's ``run`` body.

Invoked by the process supervisor as ``python -m syskit.runner <unit file>``
with stdout/stderr redirected to the overlay's output buffer.
"""

from __future__ import annotations

import argparse
import runpy
import subprocess
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Callable

NO_RUN_MESSAGE = "Error: No 'run' function found"

SHELL_WRAPPER = 'source "$1" || exit 1; if declare -F run >/dev/null; then run; else echo "$2"; exit 1; fi'


def entry_command(unit_file: Path) -> list[str]:
    """Build the command line that runs ``unit_file`` in a child process."""
    return [sys.executable, "-m", "syskit.runner", str(unit_file)]


def _run_python_unit(path: Path) -> int:
    namespace = runpy.run_path(str(path), run_name="__syskit_unit__")
    run = namespace.get("run")
    if not callable(run):
        print(NO_RUN_MESSAGE)
        return 1
    run()
    return 0


def _run_shell_unit(path: Path) -> int:
    sys.stdout.flush()
    result = subprocess.run(["bash", "-c", SHELL_WRAPPER, "syskit-unit", str(path), NO_RUN_MESSAGE])
    return result.returncode


ENTRY_POINTS: dict[str, Callable[[Path], int]] = {
    ".py": _run_python_unit,
    ".sh": _run_shell_unit,
}


def run_unit(path: Path) -> int:
    """Run a unit between start/completion banners and return its exit code."""
    print(f"=== Execution started at {datetime.now().ctime()} ===")
    print(f"Action: {path.name}")
    print("======================================")
    print(flush=True)

    runner = ENTRY_POINTS.get(path.suffix.lower())
    if runner is None:
        print(f"Error: unsupported unit type: {path.name}")
        return 1

    try:
        code = runner(path)
    except SystemExit as e:
        if e.code is None:
            code = 0
        else:
            code = e.code if isinstance(e.code, int) else 1
    except Exception:
        traceback.print_exc()
        code = 1

    sys.stderr.flush()
    print()
    print("======================================")
    print(f"=== Execution completed at {datetime.now().ctime()} ===", flush=True)
    return code


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="syskit-runner", description="Run a syskit unit file")
    parser.add_argument("unit", type=Path, help="Path to the unit file")
    args = parser.parse_args(argv)

    sys.stdout.reconfigure(line_buffering=True)
    return run_unit(args.unit)


if __name__ == "__main__":
    sys.exit(main())
