# MIT License (see LICENSE)
"""
particle_sim - An N-body particle simulation engine.

Particles in a 3D box interact through softened gravity, Lennard-Jones and
Coulomb forces. Pairs come from a pluggable neighbor strategy (all-pairs or
cell list), and time advances with velocity Verlet or semi-implicit Euler.
Boundaries either wrap periodically or flag escaping particles.

Main entry points:
    - EngineConfig: Immutable run configuration.
    - SimulationEngine: Stepping, diagnostics, snapshot and restore.
    - SimulationState: The flat per-particle buffers.

Submodules:
    - neighbor: Pair enumeration strategies.
    - core: Forces, integrators, boundaries, orbit helper, diagnostics.
    - io: Versioned snapshots and JSON files.
    - seeding: Random initial conditions.

Example:
    from particle_sim import EngineConfig, SimulationEngine

    engine = SimulationEngine(EngineConfig(particle_count=50))
    engine.seed_random(42)
    engine.run(100)
    print(engine.diagnostics().total_energy)
"""
from .config import EngineConfig
from .engine import SimulationEngine, exclude_escaped
from .errors import ConfigurationError, SeedError, SnapshotVersionError
from .state import SimulationState, SeedBuffers, create_state
from .io import EngineSnapshot, save_snapshot, load_snapshot
from .util import compute_softening_length
from .core.orbit import compute_circular_orbit_velocity

__all__ = [
    # Engine
    "EngineConfig",
    "SimulationEngine",
    "exclude_escaped",
    # State
    "SimulationState",
    "SeedBuffers",
    "create_state",
    # Snapshots
    "EngineSnapshot",
    "save_snapshot",
    "load_snapshot",
    # Helpers
    "compute_softening_length",
    "compute_circular_orbit_velocity",
    # Errors
    "ConfigurationError",
    "SeedError",
    "SnapshotVersionError",
]
