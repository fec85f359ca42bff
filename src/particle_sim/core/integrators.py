# MIT License (see LICENSE)
"""
Time integrators for the particle system.

Both integrators solve
    dx/dt = v,    dv/dt = F / m
on the flat 3N buffers, vectorized over all particles. state.forces must
hold F(x(t)) on entry.

Available integrators:
- VelocityVerlet: symplectic, second order, two force evaluations per step.
- SemiImplicitEuler: symplectic first order, one force evaluation per step.

Integrators move positions and velocities only. Advancing state.time is
the engine's job.

Reference:
    Velocity Verlet: https://en.wikipedia.org/wiki/Verlet_integration#Velocity_Verlet
    Semi-implicit Euler: https://en.wikipedia.org/wiki/Semi-implicit_Euler_method
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable

import numpy as np

from ..config import canonicalize_integrator
from ..state import SimulationState

# Recomputes state.forces from the current state.positions.
ForceCallback = Callable[[SimulationState], None]


def _inverse_mass(state: SimulationState) -> np.ndarray:
    """1/m repeated per axis, matching the 3N layout."""
    return np.repeat(1.0 / state.masses, 3)


class Integrator(ABC):
    """Advances positions and velocities by one timestep."""
    name: str = ""
    force_evaluations: int = 1

    @abstractmethod
    def step(self, state: SimulationState, dt: float, recompute_forces: ForceCallback) -> None:
        """
        Advance state by dt in-place.

        Args:
            state: Simulation state; forces must be current on entry.
            dt: Timestep.
            recompute_forces: Called when the scheme needs forces at new positions.
        """


class VelocityVerlet(Integrator):
    """
    Velocity Verlet (kick-drift-kick).

        v(t + dt/2) = v(t) + 0.5 a(t) dt
        x(t + dt)   = x(t) + v(t + dt/2) dt
        a(t + dt)   = F(x(t + dt)) / m            <- recompute_forces
        v(t + dt)   = v(t + dt/2) + 0.5 a(t + dt) dt

    Leaves state.forces holding F(x(t + dt)).
    """
    name = "velocityVerlet"
    force_evaluations = 2

    def step(self, state: SimulationState, dt: float, recompute_forces: ForceCallback) -> None:
        inv_m = _inverse_mass(state)
        half = 0.5 * dt
        state.velocities += half * state.forces * inv_m
        state.positions += dt * state.velocities
        recompute_forces(state)
        state.velocities += half * state.forces * inv_m


class SemiImplicitEuler(Integrator):
    """
    Symplectic Euler: velocity first, then position with the new velocity.

        v(t + dt) = v(t) + a(t) dt
        x(t + dt) = x(t) + v(t + dt) dt
    """
    name = "euler"

    def step(self, state: SimulationState, dt: float, recompute_forces: ForceCallback) -> None:
        inv_m = _inverse_mass(state)
        state.velocities += dt * state.forces * inv_m
        state.positions += dt * state.velocities


def make_integrator(name) -> Integrator:
    """Integrator for name; unrecognized names give velocity Verlet."""
    if canonicalize_integrator(name) == "euler":
        return SemiImplicitEuler()
    return VelocityVerlet()
