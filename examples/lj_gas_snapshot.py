# examples/lj_gas_snapshot.py
import numpy as np

from particle_sim import EngineConfig, SimulationEngine, save_snapshot, load_snapshot

# Neutral Lennard-Jones gas in a periodic box, held at constant temperature
config = EngineConfig(
    particle_count=64,
    box=(2.0, 2.0, 2.0),
    dt=0.002,
    cutoff=1.5,
    delta=0.8,
    gravity=False,
    coulomb=False,
    periodic=True,
    make_sun=False,
    thermostat=True,
    target_temperature=1.0,
    neighbor_strategy="cell",
)
engine = SimulationEngine(config)

# Particles on a jittered cubic lattice, small random velocities
rng = np.random.default_rng(0)
side = 4
grid = (np.arange(side) + 0.5) * (4.0 / side) - 2.0
lattice = np.array(np.meshgrid(grid, grid, grid, indexing="ij")).reshape(3, -1).T
engine.seed(
    positions=(lattice + 0.05 * rng.standard_normal(lattice.shape)).reshape(-1),
    velocities=0.5 * rng.standard_normal(3 * 64),
    masses=np.ones(64),
    charges=np.zeros(64),
)

engine.run(500)
print("t:", engine.time, "T:", engine.diagnostics().temperature)

save_snapshot(engine.snapshot(), "lj_gas.json")
resumed = SimulationEngine.hydrate(load_snapshot("lj_gas.json"))
resumed.run(500)
print("resumed t:", resumed.time, "T:", resumed.diagnostics().temperature)
