"""Parse action metadata from unit files without executing them.

Supports two formats:
- Python units: top-level literal assignments, read with ``ast``.
      DESCRIPTION = "Show System Information"
      DEPENDENCIES = ["uname", "hostname"]
- Shell units: top-level ``NAME=value`` / ``NAME=(a b c)`` lines, read with ``shlex``.
      DESCRIPTION="Show System Information"
      DEPENDENCIES=("uname" "hostname")

Only DESCRIPTION, DESTRUCTIVE, DEPENDENCIES and LONG_DESCRIPTION are read.
"""

from __future__ import annotations

import ast
import re
import shlex
from pathlib import Path
from typing import Any

from .types import UnitMeta

UNIT_SUFFIXES = (".py", ".sh")

_FIELDS = ("DESCRIPTION", "DESTRUCTIVE", "DEPENDENCIES", "LONG_DESCRIPTION")

# Matches: NAME=value at column 0 (indented lines belong to function bodies)
_SHELL_ASSIGN_RE = re.compile(r"^(DESCRIPTION|DESTRUCTIVE|DEPENDENCIES|LONG_DESCRIPTION)=(.*)$")


class UnitParseError(ValueError):
    """Raised when a unit file's metadata cannot be read."""


def is_unit_file(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in UNIT_SUFFIXES


def parse_unit_meta(path: Path) -> UnitMeta:
    """Parse metadata bindings from a unit file.

    Returns UnitMeta with an empty description when DESCRIPTION is absent;
    callers treat such units as not loadable.

    Raises:
        UnitParseError: If the file is unreadable, malformed, or binds a field
            to a value of the wrong type.
    """
    try:
        text = path.read_text(errors="replace")
    except OSError as e:
        raise UnitParseError(f"{path}: {e}") from e

    suffix = path.suffix.lower()
    if suffix == ".py":
        values = _parse_python_bindings(text)
    elif suffix == ".sh":
        values = _parse_shell_bindings(text)
    else:
        raise UnitParseError(f"{path}: unsupported unit type {suffix!r}")

    try:
        return _build_meta(values)
    except UnitParseError as e:
        raise UnitParseError(f"{path}: {e}") from None


def _parse_python_bindings(text: str) -> dict[str, Any]:
    """Evaluate literal top-level assignments to the metadata names."""
    try:
        tree = ast.parse(text)
    except SyntaxError as e:
        raise UnitParseError(f"syntax error on line {e.lineno}: {e.msg}") from None

    values: dict[str, Any] = {}
    for node in tree.body:
        if isinstance(node, ast.Assign) and len(node.targets) == 1:
            target, value_node = node.targets[0], node.value
        elif isinstance(node, ast.AnnAssign) and node.value is not None:
            target, value_node = node.target, node.value
        else:
            continue

        if not isinstance(target, ast.Name) or target.id not in _FIELDS:
            continue
        try:
            values[target.id] = ast.literal_eval(value_node)
        except ValueError:
            raise UnitParseError(f"{target.id} must be a literal value") from None
    return values


def _array_tokens(raw: str) -> list[str]:
    lexer = shlex.shlex(raw, posix=True, punctuation_chars="()")
    lexer.whitespace_split = True
    tokens: list[str] = []
    for token in lexer:
        # Runs of punctuation come back as one token, e.g. "()".
        if token and set(token) <= {"(", ")"}:
            tokens.extend(token)
        else:
            tokens.append(token)
    return tokens


def _parse_shell_bindings(text: str) -> dict[str, Any]:
    """Read NAME=value and NAME=( ... ) lines; arrays and quoted values may span lines."""
    values: dict[str, Any] = {}
    lines = iter(text.splitlines())

    for line in lines:
        m = _SHELL_ASSIGN_RE.match(line.rstrip())
        if not m:
            continue
        name, raw = m.group(1), m.group(2).strip()

        try:
            if raw.startswith("("):
                tokens = _array_tokens(raw)
                while ")" not in tokens:
                    try:
                        raw += "\n" + next(lines)
                    except StopIteration:
                        raise UnitParseError(f"{name}: unterminated array") from None
                    tokens = _array_tokens(raw)
                values[name] = tokens[1 : tokens.index(")")]
            else:
                while True:
                    try:
                        words = shlex.split(raw, comments=True)
                        break
                    except ValueError:
                        # Quoted strings may continue onto following lines.
                        try:
                            raw += "\n" + next(lines)
                        except StopIteration:
                            raise UnitParseError(f"{name}: unterminated quoted value") from None
                values[name] = " ".join(words)
        except UnitParseError:
            raise
        except ValueError as e:
            raise UnitParseError(f"{name}: {e}") from None
    return values


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise UnitParseError(f"{name} must be a boolean, got {value!r}")


def _as_str(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise UnitParseError(f"{name} must be a string, got {type(value).__name__}")
    return value


def clean_text(value: str) -> str:
    """Fold a metadata string onto one printable line."""
    return "".join(ch for ch in " ".join(value.split()) if ch.isprintable())


def _build_meta(values: dict[str, Any]) -> UnitMeta:
    meta = UnitMeta()
    if "DESCRIPTION" in values:
        meta.description = clean_text(_as_str("DESCRIPTION", values["DESCRIPTION"]))
    if "DESTRUCTIVE" in values:
        meta.destructive = _as_bool("DESTRUCTIVE", values["DESTRUCTIVE"])
    if "DEPENDENCIES" in values:
        deps = values["DEPENDENCIES"]
        if isinstance(deps, str):
            deps = deps.split()
        if not isinstance(deps, (list, tuple)) or not all(isinstance(d, str) for d in deps):
            raise UnitParseError("DEPENDENCIES must be a list of command names")
        meta.dependencies = [d for d in deps if d]
    if "LONG_DESCRIPTION" in values:
        meta.long_description = clean_text(_as_str("LONG_DESCRIPTION", values["LONG_DESCRIPTION"]))
    return meta
