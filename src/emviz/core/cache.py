# MIT License (see LICENSE)
"""
Memoization layer in front of the field and force calculators.

Every frame re-evaluates O(charges × grid points) field contributions and
O(charges²) pairwise forces, although most charges have not moved. The
caches here bucket results by pixel-rounded inputs:

- ResultCache: a bounded dict that is emptied in full once it grows past
  its ceiling. Entries are never evicted individually (no LRU).
- CachedCalculator: drop-in replacement for the pure calculator functions
  that consults a field cache and a force cache.

Cache transparency: each entry also stores the exact inputs it was computed
from. A bucket hit whose exact inputs differ counts as a miss and the
bucket is overwritten, so enabling, disabling or warming the caches never
changes a result. A charge dragged across a pixel keeps reusing one bucket,
which keeps the caches small during interaction. Non-finite inputs have
no pixel bucket and are computed directly.
"""
from __future__ import annotations
import logging
import math
from typing import Any, Hashable

import numpy as np

from ..config import VizConfig
from ..constants import K_COULOMB
from ..types import Charge, PartialForce
from ..util import pixel_round
from .fields import electric_field_at, coulomb_force_between

logger = logging.getLogger(__name__)


class ResultCache:
    """
    Bounded memo table with whole-table invalidation on overflow.

    Attributes:
        limit: Maximum number of entries; one more triggers clear().
        name: Label used in log messages.
        hits, misses, clears: Usage counters (never reset by clear()).
    """

    def __init__(self, limit: int, name: str = "cache"):
        if limit < 1:
            raise ValueError(f"cache limit must be at least 1, got {limit}")
        self.limit = limit
        self.name = name
        self._entries: dict[Hashable, tuple[Any, Any]] = {}
        self.hits = 0
        self.misses = 0
        self.clears = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def get(self, key: Hashable, inputs: Any = None) -> Any | None:
        """
        Return the cached value for key, or None on a miss.

        When `inputs` is given, the entry only counts as a hit if it was
        stored with equal inputs.
        """
        entry = self._entries.get(key)
        if entry is None or (inputs is not None and entry[0] != inputs):
            self.misses += 1
            return None
        self.hits += 1
        return entry[1]

    def put(self, key: Hashable, value: Any, inputs: Any = None) -> None:
        """Store a value, clearing the whole table if the ceiling is exceeded."""
        self._entries[key] = (inputs, value)
        if len(self._entries) > self.limit:
            self.clear()

    def clear(self) -> None:
        """Drop every entry."""
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("clearing %s (%d entries)", self.name, len(self._entries))
        self._entries.clear()
        self.clears += 1

    def stats(self) -> dict[str, int]:
        """Counters for profiling output."""
        return {
            "size": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "clears": self.clears,
        }


def _finite(*values) -> bool:
    """True when every value is a finite number (pixel buckets need integers)."""
    return all(math.isfinite(v) for v in values)


def field_cache_key(charge_pos, magnitude: float, point, is_positive: bool) -> tuple:
    """Bucket key: pixel-rounded charge position and point, exact magnitude and polarity."""
    return (
        pixel_round(charge_pos[0]),
        pixel_round(charge_pos[1]),
        magnitude,
        pixel_round(point[0]),
        pixel_round(point[1]),
        is_positive,
    )


def force_cache_key(a: Charge, b: Charge) -> tuple:
    """Bucket key for the force on `a` from `b`. Order matters."""
    return (
        a.id,
        b.id,
        pixel_round(a.position[0]),
        pixel_round(a.position[1]),
        pixel_round(b.position[0]),
        pixel_round(b.position[1]),
        a.magnitude,
        b.magnitude,
        a.polarity.value,
        b.polarity.value,
    )


class CachedCalculator:
    """
    Field and force calculator with optional memoization.

    Exposes the same operations as emviz.core.fields, minus the `k`
    argument which is fixed per instance. Passing None for a cache disables
    memoization of that quantity.

    Example:
        calc = CachedCalculator.from_config(config)
        e = calc.electric_field_at((100, 100), 5.0, (164, 100), True)
    """

    def __init__(
        self,
        field_cache: ResultCache | None = None,
        force_cache: ResultCache | None = None,
        k: float = K_COULOMB,
    ):
        self.field_cache = field_cache
        self.force_cache = force_cache
        self.k = k

    @classmethod
    def from_config(cls, config: VizConfig) -> "CachedCalculator":
        """Calculator with both caches sized from the config."""
        return cls(
            field_cache=ResultCache(config.field_cache_limit, name="field cache"),
            force_cache=ResultCache(config.force_cache_limit, name="force cache"),
            k=config.coulomb_k,
        )

    @classmethod
    def uncached(cls, k: float = K_COULOMB) -> "CachedCalculator":
        """Calculator that always computes directly."""
        return cls(None, None, k)

    def electric_field_at(self, charge_pos, magnitude: float, point, is_positive: bool) -> np.ndarray:
        """Cached electric_field_at. Returns a fresh array on every call."""
        cache = self.field_cache
        if cache is None or not _finite(charge_pos[0], charge_pos[1], point[0], point[1], magnitude):
            return electric_field_at(charge_pos, magnitude, point, is_positive, self.k)

        key = field_cache_key(charge_pos, magnitude, point, is_positive)
        inputs = (float(charge_pos[0]), float(charge_pos[1]), float(point[0]), float(point[1]))
        hit = cache.get(key, inputs)
        if hit is not None:
            return hit.copy()

        result = electric_field_at(charge_pos, magnitude, point, is_positive, self.k)
        cache.put(key, result, inputs)
        return result.copy()

    def coulomb_force_between(self, a: Charge, b: Charge) -> PartialForce | None:
        """Cached coulomb_force_between. Absent (None) results are not stored."""
        cache = self.force_cache
        if cache is None or not _finite(a.position[0], a.position[1], b.position[0], b.position[1],
                                        a.magnitude, b.magnitude):
            return coulomb_force_between(a, b, self.k)

        key = force_cache_key(a, b)
        inputs = (float(a.position[0]), float(a.position[1]), float(b.position[0]), float(b.position[1]))
        hit = cache.get(key, inputs)
        if hit is not None:
            return PartialForce(hit.magnitude, hit.direction.copy(), hit.source_id)

        result = coulomb_force_between(a, b, self.k)
        if result is not None:
            cache.put(key, result, inputs)
            return PartialForce(result.magnitude, result.direction.copy(), result.source_id)
        return None

    def clear(self) -> None:
        """Empty both caches."""
        if self.field_cache is not None:
            self.field_cache.clear()
        if self.force_cache is not None:
            self.force_cache.clear()
