# examples/sun_and_planets.py
import logging

from particle_sim import EngineConfig, SimulationEngine

logging.basicConfig(level=logging.INFO)

config = EngineConfig(
    particle_count=30,
    box=(5.0, 5.0, 5.0),
    dt=0.01,
    periodic=False,
    sun_mass=500.0,
    make_sun=True,
    circular_orbits=True,
)
engine = SimulationEngine(config)
engine.seed_random(42)

for step in range(1, 501):
    engine.step()
    if step % 100 == 0:
        d = engine.diagnostics()
        print(f"t={d.time:6.2f}  E={d.total_energy:12.4f}  T={d.temperature:8.3f}  "
              f"|P|={sum(p * p for p in d.momentum) ** 0.5:.3e}  escaped={int(engine.state.escaped.sum())}")
        result = engine.check_stability()
        if result is not None:
            print(result.level, result.message)
