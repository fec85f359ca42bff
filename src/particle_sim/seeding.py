# MIT License (see LICENSE)
"""
Random initial conditions.

All randomness comes from a caller-supplied numpy Generator, so a fixed
seed reproduces the same buffers:

    rng = np.random.default_rng(42)
    engine.seed(random_seed_buffers(config, rng))
"""
from __future__ import annotations
from typing import Sequence

import numpy as np

from .config import EngineConfig
from .core.orbit import compute_circular_orbit_velocity
from .state import SeedBuffers

MASS_RANGE: tuple[float, float] = (16.0, 20.0)
CHARGE_OPTIONS: tuple[float, ...] = (-3.0, -2.0, -1.0, 0.0, 1.0, 2.0, 3.0)


def generate_masses_charges(
    n: int,
    rng: np.random.Generator,
    mass_range: tuple[float, float] = MASS_RANGE,
    charge_options: Sequence[float] = CHARGE_OPTIONS,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Masses uniform in mass_range and charges drawn uniformly from charge_options.

    An empty charge_options gives all-zero charges.
    """
    lo, hi = mass_range
    masses = rng.uniform(lo, max(lo, hi), size=n)
    if len(charge_options):
        charges = rng.choice(np.asarray(charge_options, dtype=np.float64), size=n)
    else:
        charges = np.zeros(n, dtype=np.float64)
    return masses, charges


def generate_positions(n: int, box: Sequence[float], rng: np.random.Generator) -> np.ndarray:
    """Positions uniform in [-h, h] per axis, as an (n, 3) array."""
    h = np.asarray(box, dtype=np.float64)
    return rng.uniform(-1.0, 1.0, size=(n, 3)) * h


def circular_orbit_velocities(positions: np.ndarray, central_mass: float, G: float) -> np.ndarray:
    """Circular-orbit velocity around the origin for every row of positions."""
    out = np.zeros_like(positions)
    for k, p in enumerate(positions):
        out[k] = compute_circular_orbit_velocity(p, central_mass, G)
    return out


def random_seed_buffers(config: EngineConfig, rng: np.random.Generator) -> SeedBuffers:
    """
    Seed buffers for config.particle_count particles.

    With make_sun set, particle 0 is a "sun": at the origin, at rest, with
    mass sun_mass and no charge. With circular_orbits also set, every other
    particle starts on a circular orbit around it; otherwise all particles
    start at rest.
    """
    n = config.particle_count
    pos = generate_positions(n, config.box, rng)
    masses, charges = generate_masses_charges(n, rng)
    vel = np.zeros((n, 3), dtype=np.float64)

    if config.make_sun:
        pos[0] = 0.0
        masses[0] = config.sun_mass
        charges[0] = 0.0
        if config.circular_orbits and n > 1:
            vel[1:] = circular_orbit_velocities(pos[1:], config.sun_mass, config.G)

    return SeedBuffers(
        positions=pos.reshape(-1),
        velocities=vel.reshape(-1),
        masses=masses,
        charges=charges,
    )
