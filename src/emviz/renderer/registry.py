# MIT License (see LICENSE)
"""
Typed registry of overlay drawables.

Each overlay category owns the drawables it put on the surface, so a clear
is a direct lookup instead of a scan over the whole display list. Entries
may carry a key (a charge id) for per-charge removal and highlighting.
"""
from __future__ import annotations
from collections import defaultdict
from enum import Enum
from typing import Hashable

from .surface import Drawable


class OverlayCategory(Enum):
    FIELD_VECTOR = "fieldVector"
    MAGNETIC_FIELD_SYMBOL = "magneticFieldSymbol"
    FORCE_VECTOR = "electricForceVector"
    FORCE_LABEL = "forceLabel"
    MAGNETIC_FORCE = "magneticForceVector"
    VELOCITY = "velocityVector"


class OverlayRegistry:
    """
    Mapping from overlay category to the drawables it currently owns.

    Example:
        registry.register(OverlayCategory.VELOCITY, arrow, key=charge.id)
        for d in registry.take(OverlayCategory.VELOCITY):
            surface.remove(d)
    """

    def __init__(self) -> None:
        self._items: dict[OverlayCategory, list[Drawable]] = defaultdict(list)
        self._keyed: dict[OverlayCategory, dict[Hashable, list[Drawable]]] = defaultdict(dict)

    def register(self, category: OverlayCategory, drawable: Drawable, key: Hashable | None = None) -> None:
        self._items[category].append(drawable)
        if key is not None:
            self._keyed[category].setdefault(key, []).append(drawable)

    def items(self, category: OverlayCategory) -> list[Drawable]:
        return list(self._items.get(category, ()))

    def lookup(self, category: OverlayCategory, key: Hashable) -> list[Drawable]:
        return list(self._keyed.get(category, {}).get(key, ()))

    def keyed(self, category: OverlayCategory) -> dict[Hashable, list[Drawable]]:
        """Snapshot of key -> drawables for a category."""
        return {k: list(v) for k, v in self._keyed.get(category, {}).items()}

    def count(self, category: OverlayCategory) -> int:
        return len(self._items.get(category, ()))

    def take(self, category: OverlayCategory) -> list[Drawable]:
        """Remove and return every drawable of a category."""
        self._keyed.pop(category, None)
        return self._items.pop(category, [])

    def discard(self, category: OverlayCategory, key: Hashable) -> list[Drawable]:
        """Remove and return the drawables registered under key."""
        removed = self._keyed.get(category, {}).pop(key, [])
        if removed:
            ids = {id(d) for d in removed}
            self._items[category] = [d for d in self._items[category] if id(d) not in ids]
        return removed
