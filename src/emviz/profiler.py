# MIT License (see LICENSE)
"""
Frame timing for the overlay loop.

Measures how long each phase of a frame takes (animation tick, field
overlay, force overlay, magnetic overlays) so the cost of the caches and
the object pool can be checked against the frame budget.

Example:
    profiler = Profiler()
    with profiler.section("field"):
        renderer.draw_electric_field(charges, calc)
    print(profiler.stats.summary())
"""
from __future__ import annotations
import time
from dataclasses import dataclass, field

FRAME_BUDGET_S = 1.0 / 60.0


@dataclass
class ProfileStats:
    """
    Timing samples per named section.

    Stores raw durations in seconds and reports count, mean, max and how
    many samples went over the 60 fps frame budget.
    """
    samples: dict[str, list[float]] = field(default_factory=dict)

    def add(self, name: str, dt: float) -> None:
        self.samples.setdefault(name, []).append(dt)

    def last(self, name: str) -> float | None:
        """Most recent duration of a section, in seconds."""
        times = self.samples.get(name)
        return times[-1] if times else None

    def summary(self) -> dict[str, dict[str, float]]:
        """
        Statistics for all sections.

        Returns:
            Dict mapping section name to:
            - 'n': sample count
            - 'mean_ms': average time in milliseconds
            - 'max_ms': maximum time in milliseconds
            - 'over_budget': samples slower than one 60 fps frame
        """
        out = {}
        for name, times in self.samples.items():
            n = len(times)
            out[name] = {
                "n": n,
                "mean_ms": 1e3 * (sum(times) / n),
                "max_ms": 1e3 * max(times),
                "over_budget": sum(1 for t in times if t > FRAME_BUDGET_S),
            }
        return out

    def reset(self) -> None:
        self.samples.clear()


class Profiler:
    """
    Context-manager based section timer.

    Usage:
        profiler = Profiler()
        with profiler.section("forces"):
            renderer.draw_electric_forces(charges, calc)
        profiler.stats.summary()["forces"]["mean_ms"]
    """

    def __init__(self) -> None:
        self.stats = ProfileStats()

    def section(self, name: str):
        """
        Return a context manager that times the enclosed code.

        Args:
            name: Identifier for this timed section.
        """
        profiler = self

        class _Section:
            def __enter__(self):
                self.t0 = time.perf_counter()

            def __exit__(self, exc_type, exc, tb):
                profiler.stats.add(name, time.perf_counter() - self.t0)

        return _Section()
