"""Catalog store: categories, actions, favorites and recent actions.

Categories come from ``menu/categories.yaml``; each real category maps to a
directory of unit files. Favorites and Recent are flat files of serialized
action references (``<category>|<unit>``), one per line.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from . import config
from .scaffold import write_scaffold
from .types import (
    FAVORITES_KEY,
    RECENT_KEY,
    SYNTHETIC_KEYS,
    Action,
    ActionRef,
    Category,
)
from .unit_meta import UNIT_SUFFIXES, UnitParseError, clean_text, is_unit_file, parse_unit_meta

logger = logging.getLogger(__name__)

RECENT_LIMIT = 10

FAVORITES = Category(display_name="Favorites", storage_key=FAVORITES_KEY)
RECENT = Category(display_name="Recent", storage_key=RECENT_KEY)


class CatalogStore:
    """Loads categories and actions from the menu tree and persists small lists."""

    def __init__(
        self,
        menu_dir: Path | None = None,
        favorites_path: Path | None = None,
        recent_path: Path | None = None,
    ):
        self.menu_dir = menu_dir or config.get_menu_dir()
        self.manifest_path = self.menu_dir / config.get_manifest_path().name
        self.favorites_path = favorites_path or config.get_favorites_path()
        self.recent_path = recent_path or config.get_recent_path()
        self._categories: list[Category] | None = None

    # ── categories ────────────────────────────────────────────────────────

    def load_categories(self) -> list[Category]:
        """Read the manifest (scaffolding the tree first if it is missing).

        Favorites and Recent are always appended last.
        """
        if not self.menu_dir.is_dir() or not self.manifest_path.is_file():
            write_scaffold(self.menu_dir)

        categories = self._read_manifest()
        categories.extend([FAVORITES, RECENT])
        self._categories = categories
        return list(categories)

    @property
    def categories(self) -> list[Category]:
        if self._categories is None:
            return self.load_categories()
        return list(self._categories)

    def _read_manifest(self) -> list[Category]:
        try:
            data = yaml.safe_load(self.manifest_path.read_text())
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Cannot read category manifest %s: %s", self.manifest_path, e)
            return []

        if isinstance(data, dict):
            data = data.get("categories")
        if not isinstance(data, list):
            logger.warning("Category manifest %s has no category list", self.manifest_path)
            return []

        categories: list[Category] = []
        seen: set[str] = set()
        for entry in data:
            if not isinstance(entry, dict):
                logger.debug("Skipping manifest entry %r: not a mapping", entry)
                continue
            name = clean_text(str(entry.get("name") or ""))
            key = str(entry.get("key") or "").strip()
            if not name or not key or "/" in key or key.startswith("."):
                logger.debug("Skipping manifest entry %r: needs a name and a plain key", entry)
                continue
            if key in SYNTHETIC_KEYS or name in seen:
                continue
            seen.add(name)
            categories.append(Category(display_name=name, storage_key=key))
        return categories

    def category_named(self, name: str) -> Category | None:
        for category in self.categories:
            if category.display_name == name:
                return category
        return None

    # ── actions ───────────────────────────────────────────────────────────

    def load_actions(self, category: Category) -> list[Action]:
        """Load a category's actions fresh from disk.

        Unit files that fail to parse, or lack a DESCRIPTION, are skipped.
        A missing category directory yields an empty list.
        """
        if category.storage_key == FAVORITES_KEY:
            return self._resolve_refs(self.load_favorites())
        if category.storage_key == RECENT_KEY:
            return self._resolve_refs(self.load_recent())

        directory = self.menu_dir / category.storage_key
        if not directory.is_dir():
            return []

        actions: list[Action] = []
        for path in sorted(directory.iterdir()):
            if not is_unit_file(path):
                continue
            action = self._load_unit(path, category)
            if action is not None:
                actions.append(action)
        return actions

    def _load_unit(self, path: Path, category: Category) -> Action | None:
        try:
            meta = parse_unit_meta(path)
        except UnitParseError as e:
            logger.debug(f"Skipping {path}: {e}")
            return None

        if not meta.description:
            logger.debug(f"Skipping {path}: no DESCRIPTION")
            return None

        return Action(
            description=meta.description,
            source_file=path,
            category=category,
            destructive=meta.destructive,
            dependencies=tuple(meta.dependencies),
            long_description=meta.long_description,
        )

    def resolve(self, ref: ActionRef) -> Action | None:
        """Look up the action a reference points to, or None if it is gone."""
        category = self.category_named(ref.category)
        if category is None or category.is_synthetic:
            return None

        directory = self.menu_dir / category.storage_key
        for suffix in UNIT_SUFFIXES:
            path = directory / f"{ref.unit}{suffix}"
            if is_unit_file(path):
                return self._load_unit(path, category)
        return None

    def _resolve_refs(self, refs: list[str]) -> list[Action]:
        actions: list[Action] = []
        for raw in refs:
            try:
                ref = ActionRef.parse(raw)
            except ValueError as e:
                logger.debug(f"Skipping stored reference: {e}")
                continue
            action = self.resolve(ref)
            if action is not None:
                actions.append(action)
        return actions

    def search(self, term: str) -> list[Action]:
        """Actions from every real category whose description contains ``term``.

        Case-sensitive. An empty term matches nothing.
        """
        if not term:
            return []
        results: list[Action] = []
        for category in self.categories:
            if category.is_synthetic:
                continue
            results.extend(a for a in self.load_actions(category) if term in a.description)
        return results

    # ── favorites & recent ────────────────────────────────────────────────

    def load_favorites(self) -> list[str]:
        return _read_list(self.favorites_path)

    def load_recent(self) -> list[str]:
        return _read_list(self.recent_path)[:RECENT_LIMIT]

    def toggle_favorite(self, ref: ActionRef) -> bool:
        """Remove ``ref`` from favorites if present, else append it.

        Returns:
            True if the action is a favorite afterwards.
        """
        key = str(ref)
        favorites = self.load_favorites()
        if key in favorites:
            favorites.remove(key)
            added = False
        else:
            favorites.append(key)
            added = True
        _write_list(self.favorites_path, favorites)
        return added

    def add_recent(self, ref: ActionRef) -> list[str]:
        """Move ``ref`` to the front of the recent list (capped at RECENT_LIMIT)."""
        key = str(ref)
        recent = [key] + [r for r in self.load_recent() if r != key]
        recent = recent[:RECENT_LIMIT]
        _write_list(self.recent_path, recent)
        return recent


def _read_list(path: Path) -> list[str]:
    """Read non-empty lines, dropping duplicates but keeping first-seen order."""
    try:
        text = path.read_text()
    except FileNotFoundError:
        return []
    except OSError as e:
        logger.warning("Cannot read %s: %s", path, e)
        return []

    items: list[str] = []
    for line in text.splitlines():
        line = line.strip()
        if line and line not in items:
            items.append(line)
    return items


def _write_list(path: Path, items: list[str]) -> None:
    config.atomic_write_text(path, "".join(f"{item}\n" for item in items))
