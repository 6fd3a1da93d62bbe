# MIT License (see LICENSE)
"""
Object pool for vector drawables.

Force overlays are rebuilt every frame. Recycling the vector objects
instead of allocating new ones keeps per-frame garbage flat.
"""
from __future__ import annotations
import logging
from typing import Callable

from .surface import Drawable

logger = logging.getLogger(__name__)


class VectorPool:
    """
    Bounded LIFO pool of vector drawables.

    acquire() never blocks: an empty pool falls back to the factory.
    release() drops the drawable once the pool holds `capacity` items.

    Attributes:
        capacity: Maximum number of pooled drawables.
        created: Drawables built by the factory.
        reused: Drawables handed out from the pool.
    """

    def __init__(self, factory: Callable[[], Drawable], capacity: int = 100):
        self._factory = factory
        self._free: list[Drawable] = []
        self.capacity = capacity
        self.created = 0
        self.reused = 0

    def __len__(self) -> int:
        return len(self._free)

    def acquire(self) -> Drawable:
        """Pop a cleared drawable, or create one if the pool is empty."""
        if self._free:
            d = self._free.pop()
            d.clear()
            self.reused += 1
            return d
        self.created += 1
        return self._factory()

    def release(self, drawable: Drawable) -> bool:
        """Return a drawable to the pool. Returns False if it was dropped."""
        if len(self._free) >= self.capacity:
            logger.debug("pool full (%d), dropping %s drawable", self.capacity, drawable.kind)
            return False
        self._free.append(drawable)
        return True
