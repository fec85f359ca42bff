# MIT License (see LICENSE)
"""
Default physical constants and numeric thresholds.

The simulation runs in scaled "demo" units rather than SI: the constants
below are tuned so that a handful of particles in a box of half-width 5
produce visible orbits and clustering at dt = 0.01.
"""
from __future__ import annotations

# Gravitational constant (scaled units).
G_DEFAULT: float = 0.08

# Coulomb constant (scaled units). Like charges repel.
K_DEFAULT: float = 0.1

# Lennard-Jones well depth (epsilon) and zero-crossing distance (DELTA, i.e. sigma).
EPSILON_DEFAULT: float = 1.0
DELTA_DEFAULT: float = 0.02

# Boltzmann-like constant used only for the temperature diagnostic.
KB_DEFAULT: float = 6.02

# Softening length = factor * cbrt(box volume / N).
# Gravity uses a slightly larger factor than the short-range interactions.
GRAVITY_SOFTENING_FACTOR: float = 0.15
COULOMB_SOFTENING_FACTOR: float = 0.10
LJ_SOFTENING_FACTOR: float = 0.10

# Circular-orbit helper: below these radii the result is degenerate.
ORBIT_MIN_RADIUS: float = 1e-8
ORBIT_MIN_PLANAR_RADIUS: float = 1e-10

# A particle moving faster than escape_speed within this fraction of a box
# face is flagged as escaped (non-periodic boundaries only).
ESCAPE_BOUNDARY_FRACTION: float = 0.9

# Only snapshot layout understood by io.snapshot.
SNAPSHOT_VERSION: int = 1
