# MIT License (see LICENSE)
"""
Pairwise force accumulators.

Each accumulator turns a PairList into one scalar coefficient per pair and
applies it along the stored displacement d = x_i - x_j:

    F_i += c * d
    F_j -= c * d

Both updates use the same product c * d, so every pair's contribution is
exactly antisymmetric and total momentum is conserved to rounding.

Interactions (s is each interaction's softening length, s² is added to r²):
- Gravity (Plummer):   U = -G m_i m_j / sqrt(r² + s²)
                       c = -G m_i m_j / (r² + s²)^(3/2)
- Coulomb:             U = K q_i q_j / sqrt(r² + s²)
                       c = +K q_i q_j / (r² + s²)^(3/2)
- Lennard-Jones 12-6:  with u = delta² / (r² + s²)
                       U = 4 eps (u⁶ - u³)
                       c = 24 eps (2 u⁶ - u³) / (r² + s²)

Forces are the exact negative gradient of the reported potentials, so a
symplectic integrator keeps the total energy bounded. A pair whose softened
r² + s² is zero (coincident particles, softening disabled) contributes
nothing instead of producing Inf/NaN.

Softening lengths follow util.compute_softening_length: s = factor * cbrt(V / N).
"""
from __future__ import annotations
from abc import ABC, abstractmethod

import numpy as np

from ..config import EngineConfig
from ..neighbor.base import PairList
from ..state import SimulationState
from ..util import compute_softening_length


def apply_pair_forces(forces: np.ndarray, pairs: PairList, coeff: np.ndarray) -> None:
    """
    Scatter equal and opposite pair forces into a flat 3N buffer.

    Args:
        forces: Flat force buffer (modified in-place).
        pairs: Pairs the coefficients belong to.
        coeff: One scalar per pair; the force on i is coeff * d.
    """
    if len(pairs) == 0:
        return
    f = coeff[:, None] * pairs.d
    f3 = forces.reshape(-1, 3)
    # np.add.at accumulates repeated indices (a particle appears in many pairs)
    np.add.at(f3, pairs.i, f)
    np.subtract.at(f3, pairs.j, f)


def _softened(r2: np.ndarray, softening: float) -> tuple[np.ndarray, np.ndarray]:
    """Return (r² + s², mask of pairs with a positive softened r²)."""
    s2 = r2 + softening * softening
    valid = s2 > 0.0
    # Placeholder denominator for masked pairs; their coefficient is zeroed.
    return np.where(valid, s2, 1.0), valid


class ForceAccumulator(ABC):
    """
    One pairwise interaction.

    Subclasses provide the per-pair force coefficient and potential energy;
    accumulate() does the symmetric scatter.
    """
    name: str = ""

    @abstractmethod
    def coefficients(self, pairs: PairList, state: SimulationState) -> np.ndarray:
        """Per-pair scalar c such that the force on i is c * d."""

    @abstractmethod
    def pair_potential(self, pairs: PairList, state: SimulationState) -> np.ndarray:
        """Per-pair potential energy."""

    def accumulate(self, pairs: PairList, state: SimulationState, forces: np.ndarray) -> None:
        """Add this interaction's forces for every pair into forces."""
        if len(pairs) == 0:
            return
        apply_pair_forces(forces, pairs, self.coefficients(pairs, state))

    def potential(self, pairs: PairList, state: SimulationState) -> float:
        """Total potential energy of this interaction over the pairs."""
        if len(pairs) == 0:
            return 0.0
        return float(np.sum(self.pair_potential(pairs, state)))


class GravityForce(ForceAccumulator):
    """
    Softened Newtonian gravity. Always attractive.

    Attributes:
        G: Gravitational constant.
        softening: Softening length s.
    """
    name = "gravity"

    def __init__(self, G: float, softening: float) -> None:
        self.G = float(G)
        self.softening = float(softening)

    def coefficients(self, pairs, state):
        s2, valid = _softened(pairs.r2, self.softening)
        m = state.masses
        c = -self.G * m[pairs.i] * m[pairs.j] / (s2 * np.sqrt(s2))
        return np.where(valid, c, 0.0)

    def pair_potential(self, pairs, state):
        s2, valid = _softened(pairs.r2, self.softening)
        m = state.masses
        u = -self.G * m[pairs.i] * m[pairs.j] / np.sqrt(s2)
        return np.where(valid, u, 0.0)


class CoulombForce(ForceAccumulator):
    """
    Softened electrostatics. Like charges repel, opposite charges attract.

    Attributes:
        K: Coulomb constant.
        softening: Softening length s.
    """
    name = "coulomb"

    def __init__(self, K: float, softening: float) -> None:
        self.K = float(K)
        self.softening = float(softening)

    def coefficients(self, pairs, state):
        s2, valid = _softened(pairs.r2, self.softening)
        q = state.charges
        c = self.K * q[pairs.i] * q[pairs.j] / (s2 * np.sqrt(s2))
        return np.where(valid, c, 0.0)

    def pair_potential(self, pairs, state):
        s2, valid = _softened(pairs.r2, self.softening)
        q = state.charges
        u = self.K * q[pairs.i] * q[pairs.j] / np.sqrt(s2)
        return np.where(valid, u, 0.0)


class LennardJonesForce(ForceAccumulator):
    """
    Softened 12-6 Lennard-Jones interaction.

    Repulsive below the potential minimum, attractive beyond it, and
    truncated at the neighbor cutoff (pairs past it are never visited).

    Attributes:
        epsilon: Well depth.
        delta: Length scale (sigma).
        softening: Softening length s.
    """
    name = "lennard_jones"

    def __init__(self, epsilon: float, delta: float, softening: float) -> None:
        self.epsilon = float(epsilon)
        self.delta = float(delta)
        self.softening = float(softening)

    def _powers(self, pairs: PairList) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        s2, valid = _softened(pairs.r2, self.softening)
        u = (self.delta * self.delta) / s2
        u3 = u * u * u
        return s2, valid, u3, u3 * u3

    def coefficients(self, pairs, state):
        s2, valid, u3, u6 = self._powers(pairs)
        c = 24.0 * self.epsilon * (2.0 * u6 - u3) / s2
        return np.where(valid, c, 0.0)

    def pair_potential(self, pairs, state):
        _, valid, u3, u6 = self._powers(pairs)
        return np.where(valid, 4.0 * self.epsilon * (u6 - u3), 0.0)


def build_force_accumulators(config: EngineConfig) -> list[ForceAccumulator]:
    """
    Accumulators for the interactions enabled in config, in a fixed order
    (gravity, Lennard-Jones, Coulomb). Disabled interactions are absent.
    """
    n, box = config.particle_count, config.box
    out: list[ForceAccumulator] = []
    if config.gravity:
        out.append(GravityForce(
            config.G, compute_softening_length(n, box, config.gravity_softening)))
    if config.lennard_jones:
        out.append(LennardJonesForce(
            config.epsilon, config.delta, compute_softening_length(n, box, config.lj_softening)))
    if config.coulomb:
        out.append(CoulombForce(
            config.K, compute_softening_length(n, box, config.coulomb_softening)))
    return out
