"""
Microbenchmark: naive vs cell neighbor strategy, time per step vs N.
Run:
  python benchmarks/bench_neighbors.py
"""
import time

from particle_sim import EngineConfig, SimulationEngine
from particle_sim.profiler import Profiler


def run(n: int, strategy: str, steps: int = 20):
    prof = Profiler()
    config = EngineConfig(
        particle_count=n,
        box=(10.0, 10.0, 10.0),
        cutoff=2.0,
        neighbor_strategy=strategy,
        make_sun=False,
        circular_orbits=False,
    )
    engine = SimulationEngine(config, profiler=prof)
    engine.seed_random(12345)  # determinism (no randomness elsewhere)

    # warmup
    engine.run(2)
    prof.reset()

    t0 = time.perf_counter()
    engine.run(steps)
    t1 = time.perf_counter()
    return (t1 - t0) / steps, prof.stats.summary()


if __name__ == "__main__":
    for n in [100, 250, 500, 1000, 2000]:
        for strategy in ["naive", "cell"]:
            per_step, summary = run(n, strategy)
            print(f"N={n:5d}  {strategy:5s}  step={1e3 * per_step:8.3f} ms  steps/s={1 / per_step:8.1f}")
            for k in ["neighbors", "forces", "integrate", "boundary"]:
                if k in summary:
                    print("   ", k, {key: round(val, 3) for key, val in summary[k].items()})
        print()
