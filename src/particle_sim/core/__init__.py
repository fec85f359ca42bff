# MIT License (see LICENSE)
"""
Core physics components.

This subpackage provides:
    - Force accumulators: gravity, Lennard-Jones, Coulomb.
    - Integrators: velocity Verlet, semi-implicit Euler.
    - Boundary policies: periodic wrap, escape flagging.
    - Orbit helper: circular-orbit initial velocities.
    - Diagnostics, stability monitor and velocity-rescaling thermostat.

Typical usage:
    from particle_sim.core import GravityForce, VelocityVerlet

    gravity = GravityForce(G=0.08, softening=0.1)
    gravity.accumulate(pairs, state, state.forces)
"""
from .forces import (
    ForceAccumulator,
    GravityForce,
    LennardJonesForce,
    CoulombForce,
    apply_pair_forces,
    build_force_accumulators,
)
from .integrators import Integrator, VelocityVerlet, SemiImplicitEuler, make_integrator
from .boundary import Boundary, PeriodicBoundary, EscapeBoundary, make_boundary
from .orbit import compute_circular_orbit_velocity
from .diagnostics import Diagnostics, compute_diagnostics, kinetic_energy, linear_momentum, temperature
from .stability import StabilityMonitor, StabilityResult
from .thermostat import rescale_velocities

__all__ = [
    # Forces
    "ForceAccumulator",
    "GravityForce",
    "LennardJonesForce",
    "CoulombForce",
    "apply_pair_forces",
    "build_force_accumulators",
    # Integrators
    "Integrator",
    "VelocityVerlet",
    "SemiImplicitEuler",
    "make_integrator",
    # Boundaries
    "Boundary",
    "PeriodicBoundary",
    "EscapeBoundary",
    "make_boundary",
    # Orbit
    "compute_circular_orbit_velocity",
    # Diagnostics
    "Diagnostics",
    "compute_diagnostics",
    "kinetic_energy",
    "linear_momentum",
    "temperature",
    "StabilityMonitor",
    "StabilityResult",
    "rescale_velocities",
]
