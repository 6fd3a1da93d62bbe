"""
Microbenchmark: time per overlay frame vs number of charges.
Run:
  python benchmarks/bench_frames.py
"""
import time
import numpy as np
from emviz.scene import ChargeScene
from emviz.renderer import NullSurface, VectorOverlayRenderer
from emviz.profiler import Profiler

def run(n: int, frames: int = 120, cached: bool = True):
    prof = Profiler()
    scene = ChargeScene(width=1280, height=720, seed=12345, profiler=prof)
    if not cached:
        scene.calculator.field_cache = None
        scene.calculator.force_cache = None
    scene.set_show_forces(True)
    renderer = VectorOverlayRenderer(NullSurface(1280, 720), scene.config)

    rng = np.random.default_rng(12345)
    for _ in range(n):
        polarity = "positive" if rng.random() < 0.5 else "negative"
        scene.add_charge(float(rng.integers(1, 10)), polarity)

    # warmup
    for _ in range(5):
        scene.mark_dirty()
        scene.frame(renderer)

    # static layout: every frame is a full redraw, so the caches carry the load
    t0 = time.perf_counter()
    for _ in range(frames):
        scene.mark_dirty()
        scene.frame(renderer)
    t1 = time.perf_counter()

    per_frame = (t1 - t0) / frames
    return per_frame, prof.stats.summary(), scene.calculator

if __name__ == "__main__":
    for n in [2, 5, 10, 25, 50]:
        for cached in (True, False):
            per_frame, summary, calc = run(n, cached=cached)
            tag = "cached  " if cached else "uncached"
            print(f"N={n:3d} {tag} frame={1e3*per_frame:8.3f} ms  fps={1/per_frame:8.1f}")
            for k in ["field", "forces"]:
                if k in summary:
                    print(" ", k, summary[k])
            if calc.field_cache is not None:
                print("  field cache", calc.field_cache.stats())
        print()
