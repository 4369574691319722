"""CLI interface for syskit."""

from __future__ import annotations

import argparse
import atexit
import logging
import os
import shutil
import sys
import tarfile
from datetime import datetime
from pathlib import Path

import questionary
from questionary import Style
from rich.console import Console

from . import __version__, config
from .tui import run_menu
from .tui.terminal import TerminalState

console = Console(highlight=False)

# Custom style for questionary
custom_style = Style(
    [
        ("qmark", "fg:cyan bold"),
        ("question", "fg:white bold"),
        ("answer", "fg:cyan"),
        ("pointer", "fg:cyan bold"),
        ("highlighted", "fg:cyan bold"),
        ("selected", "fg:green"),
        ("instruction", "fg:gray"),
    ]
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging() -> None:
    """Log to logs/syskit.log; the terminal belongs to the menu."""
    level = logging.DEBUG if os.environ.get("SYSKIT_DEBUG") else logging.WARNING
    root = logging.getLogger("syskit")
    root.setLevel(level)
    try:
        config.get_logs_dir().mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(config.get_log_path(), encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)


def backup_config(target_dir: Path | None = None) -> Path:
    """Archive cfg/ into ~/syskit-config-backup-<timestamp>.tar.gz."""
    target_dir = target_dir or Path.home()
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    archive = target_dir / f"syskit-config-backup-{stamp}.tar.gz"
    with tarfile.open(archive, "w:gz") as tar:
        tar.add(config.get_cfg_dir(), arcname="cfg")
    return archive


def cmd_uninstall() -> int:
    """Remove the syskit config directory after confirmation."""
    config_dir = config.get_config_dir()
    if not config_dir.exists():
        console.print(f"[dim]Nothing to remove: {config_dir} does not exist.[/dim]")
        return 0

    console.print(f"[bold]This removes[/bold] [cyan]{config_dir}[/cyan] (menus, favorites, settings, logs).")
    if not questionary.confirm("Uninstall syskit?", default=False, style=custom_style).ask():
        console.print("[dim]Cancelled.[/dim]")
        return 0

    if config.get_cfg_dir().exists() and questionary.confirm(
        "Back up settings before removing?",
        default=True,
        style=custom_style,
    ).ask():
        archive = backup_config()
        console.print(f"[green]✓[/green] Settings backed up to {archive}")

    shutil.rmtree(config_dir)
    console.print(f"[green]✓[/green] Removed {config_dir}")
    console.print("[dim]To remove the program itself:[/dim] [cyan]pipx uninstall syskit[/cyan]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="syskit",
        description="Terminal menu for categorized system administration actions.",
    )
    parser.add_argument("--version", action="version", version=f"syskit {__version__}")
    parser.add_argument("--uninstall", action="store_true", help="Remove syskit configuration and menus")
    return parser


def main(argv: list[str] | None = None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        if args.uninstall:
            sys.exit(cmd_uninstall())

        setup_logging()
        config.ensure_dirs()
        atexit.register(TerminalState().restore)
        run_menu()
    except KeyboardInterrupt:
        print()
        sys.exit(130)
