"""Pytest fixtures for syskit tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from syskit.catalog import CatalogStore
from syskit.types import Config


@pytest.fixture(autouse=True)
def xdg_config_home(tmp_path, monkeypatch):
    """Point every config path at a temp directory."""
    home = tmp_path / "xdg"
    home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home))
    return home


@pytest.fixture
def config_dir(xdg_config_home):
    return xdg_config_home / "syskit"


@pytest.fixture
def menu_dir(config_dir):
    """A menu tree with a manifest for System and Applications (no units yet)."""
    menu = config_dir / "menu"
    menu.mkdir(parents=True)
    (menu / "categories.yaml").write_text(
        "categories:\n"
        "  - name: System\n"
        "    key: system\n"
        "  - name: Applications\n"
        "    key: applications\n"
    )
    (menu / "system").mkdir()
    (menu / "applications").mkdir()
    return menu


@pytest.fixture
def write_unit(menu_dir):
    """Factory: write a Python unit file into a category directory."""

    def _write(
        category: str,
        name: str,
        description: str = "Some action",
        destructive: bool = False,
        dependencies: list[str] | None = None,
        long_description: str = "",
        body: str = "    print('OK')",
    ) -> Path:
        path = menu_dir / category / f"{name}.py"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            f"DESCRIPTION = {description!r}\n"
            f"DESTRUCTIVE = {destructive!r}\n"
            f"DEPENDENCIES = {list(dependencies or [])!r}\n"
            f"LONG_DESCRIPTION = {long_description!r}\n"
            "\n"
            "\n"
            "def run():\n"
            f"{body}\n"
        )
        return path

    return _write


@pytest.fixture
def store(menu_dir):
    return CatalogStore(menu_dir=menu_dir)


@pytest.fixture
def cfg():
    return Config()
