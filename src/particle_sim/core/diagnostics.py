# MIT License (see LICENSE)
"""
Conserved quantities and summary statistics of a simulation state.

Used to verify correctness and to watch for instability. Without a
thermostat and with periodic wrapping off, total momentum should stay
constant to rounding and total energy should stay close to its initial
value under velocity Verlet.
"""
from __future__ import annotations
from dataclasses import dataclass, field

import numpy as np

from ..neighbor.base import PairList
from ..state import SimulationState
from .forces import ForceAccumulator


def kinetic_energy(state: SimulationState) -> float:
    """
    Total kinetic energy.

    T = Σ 0.5 * m_i * |v_i|²
    """
    v = state.velocities.reshape(-1, 3)
    return float(0.5 * np.sum(state.masses * np.sum(v * v, axis=1)))


def linear_momentum(state: SimulationState) -> np.ndarray:
    """
    Total linear momentum.

    P = Σ m_i * v_i

    Returns:
        Momentum vector [Px, Py, Pz].
    """
    v = state.velocities.reshape(-1, 3)
    return np.sum(state.masses[:, None] * v, axis=0)


def temperature(kinetic: float, n: int, kB: float) -> float:
    """
    Kinetic temperature with the centre-of-mass degrees of freedom removed.

    T = 2 KE / (kB * (3N - 3)); 0 for fewer than two particles.
    """
    dof = 3 * n - 3
    if dof <= 0:
        return 0.0
    return 2.0 * kinetic / (kB * dof)


@dataclass
class Diagnostics:
    """
    Snapshot of energy-like quantities at one instant.

    Attributes:
        time: Simulated time.
        kinetic: Total kinetic energy.
        potential: Potential energy per active interaction name.
        total_potential: Sum of potential.
        total_energy: kinetic + total_potential.
        temperature: Kinetic temperature.
        max_speed: Largest particle speed.
        max_force: Largest per-particle force magnitude.
        momentum: Total momentum vector.
    """
    time: float
    kinetic: float
    potential: dict[str, float] = field(default_factory=dict)
    total_potential: float = 0.0
    total_energy: float = 0.0
    temperature: float = 0.0
    max_speed: float = 0.0
    max_force: float = 0.0
    momentum: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def is_finite(self) -> bool:
        """False if any energy, speed, force or momentum value is NaN or Inf."""
        scalars = [self.kinetic, self.total_potential, self.total_energy,
                   self.temperature, self.max_speed, self.max_force]
        return bool(np.all(np.isfinite(scalars)) and np.all(np.isfinite(self.momentum)))


def compute_diagnostics(
    state: SimulationState,
    pairs: PairList,
    accumulators: list[ForceAccumulator],
    kB: float,
    forces: np.ndarray | None = None,
) -> Diagnostics:
    """
    Evaluate every diagnostic for the current state.

    Args:
        state: Simulation state.
        pairs: Pair list for the current positions.
        accumulators: Active interactions; each reports its own potential.
        kB: Boltzmann-like constant for the temperature.
        forces: Flat 3N force buffer for max_force; defaults to state.forces.
    """
    ke = kinetic_energy(state)
    potential = {acc.name: acc.potential(pairs, state) for acc in accumulators}
    total_pe = float(sum(potential.values()))

    v = state.velocities.reshape(-1, 3)
    f = (state.forces if forces is None else forces).reshape(-1, 3)
    n = state.n
    max_speed = float(np.sqrt(np.max(np.sum(v * v, axis=1)))) if n else 0.0
    max_force = float(np.sqrt(np.max(np.sum(f * f, axis=1)))) if n else 0.0

    return Diagnostics(
        time=state.time,
        kinetic=ke,
        potential=potential,
        total_potential=total_pe,
        total_energy=ke + total_pe,
        temperature=temperature(ke, n, kB),
        max_speed=max_speed,
        max_force=max_force,
        momentum=linear_momentum(state),
    )
