"""Configuration management for syskit."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from .types import Config, Theme

logger = logging.getLogger(__name__)

CONFIG_KEYS = (
    "current_theme",
    "category_width_override",
    "confirmation_enabled",
    "auto_save_logs",
)

_TRUE = ("true", "yes", "1", "on")
_FALSE = ("false", "no", "0", "off")


class ConfigError(ValueError):
    """Raised when the config file cannot be parsed."""


def get_config_dir() -> Path:
    """Get the syskit root directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(xdg_config) / "syskit"


def get_menu_dir() -> Path:
    """Get the directory holding the category manifest and unit files."""
    return get_config_dir() / "menu"


def get_manifest_path() -> Path:
    """Get the path to the category manifest."""
    return get_menu_dir() / "categories.yaml"


def get_cfg_dir() -> Path:
    """Get the directory for small persisted lists and settings."""
    return get_config_dir() / "cfg"


def get_config_path() -> Path:
    """Get the path to the key=value settings file."""
    return get_cfg_dir() / "config"


def get_favorites_path() -> Path:
    return get_cfg_dir() / "favorites"


def get_recent_path() -> Path:
    return get_cfg_dir() / "recent"


def get_logs_dir() -> Path:
    """Get the directory for saved execution logs."""
    return get_config_dir() / "logs"


def get_log_path() -> Path:
    """Get the path to the debug log file."""
    return get_logs_dir() / "syskit.log"


def ensure_dirs() -> None:
    """Ensure the cfg and logs directories exist."""
    get_cfg_dir().mkdir(parents=True, exist_ok=True)
    get_logs_dir().mkdir(parents=True, exist_ok=True)


def atomic_write_text(path: Path, content: str) -> None:
    """Replace a file's content in one step via a sibling temp file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = None
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        os.write(fd, content.encode("utf-8"))
        os.close(fd)
        fd = None
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError:
        if fd is not None:
            os.close(fd)
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def _parse_bool(key: str, value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"{key}: expected a boolean, got {value!r}")


def parse_config(text: str) -> Config:
    """Parse ``key=value`` lines into a Config.

    Blank lines and ``#`` comments are ignored, as are unknown keys.
    Values may be wrapped in double quotes.

    Raises:
        ConfigError: On a malformed line or an invalid value.
    """
    cfg = Config()
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            raise ConfigError(f"line {lineno}: expected key=value, got {raw!r}")
        key = key.strip()
        value = value.strip().strip('"')

        if key == "current_theme":
            try:
                cfg.theme = Theme(value)
            except ValueError:
                raise ConfigError(f"line {lineno}: unknown theme {value!r}") from None
        elif key == "category_width_override":
            try:
                cfg.category_width_override = max(0, int(value))
            except ValueError:
                raise ConfigError(f"line {lineno}: expected an integer, got {value!r}") from None
        elif key == "confirmation_enabled":
            cfg.confirmation_enabled = _parse_bool(key, value)
        elif key == "auto_save_logs":
            cfg.auto_save_logs = _parse_bool(key, value)
    return cfg


def format_config(cfg: Config) -> str:
    """Serialize a Config as ``key=value`` lines."""
    values = {
        "current_theme": cfg.theme.value,
        "category_width_override": str(cfg.category_width_override),
        "confirmation_enabled": "true" if cfg.confirmation_enabled else "false",
        "auto_save_logs": "true" if cfg.auto_save_logs else "false",
    }
    lines = ["# syskit configuration"]
    lines.extend(f"{key}={values[key]}" for key in CONFIG_KEYS)
    return "\n".join(lines) + "\n"


def load_config() -> Config:
    """Load settings, creating the file with defaults on first run.

    A corrupt file is replaced with defaults.
    """
    path = get_config_path()
    try:
        text = path.read_text()
    except FileNotFoundError:
        cfg = Config()
        save_config(cfg)
        return cfg
    except OSError as e:
        logger.warning("Cannot read %s: %s", path, e)
        return Config()

    try:
        return parse_config(text)
    except ConfigError as e:
        logger.warning("Corrupt config %s (%s); restoring defaults", path, e)
        cfg = Config()
        save_config(cfg)
        return cfg


def save_config(cfg: Config) -> None:
    """Persist settings."""
    atomic_write_text(get_config_path(), format_config(cfg))
