# MIT License (see LICENSE)
"""
Flat per-particle buffers for one simulation instance.

Layout:
    positions, velocities, forces: float64, length 3N, interleaved x, y, z
        (particle i at offsets 3i, 3i+1, 3i+2).
    masses, charges: float64, length N.
    escaped: uint8, length N (1 = particle has left the box).

The particle count is fixed when the state is created. Changing N means
building a new state; buffers are never resized in place.

Per-particle vector access uses (N, 3) views:
    pos = state.positions.reshape(-1, 3)   # shares memory with the buffer
"""
from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from .errors import SeedError


@dataclass(eq=False)
class SimulationState:
    """
    Mutable aggregate holding every per-particle buffer plus the clock.

    Attributes:
        positions: Flat 3N position buffer.
        velocities: Flat 3N velocity buffer.
        forces: Flat 3N force accumulation target. Zeroed by the engine
            before each force evaluation.
        masses: Per-particle masses.
        charges: Per-particle charges.
        escaped: Per-particle 0/1 escape flags.
        time: Simulated time. Advanced only by the engine.
    """
    positions: np.ndarray
    velocities: np.ndarray
    forces: np.ndarray
    masses: np.ndarray
    charges: np.ndarray
    escaped: np.ndarray
    time: float = 0.0

    @property
    def n(self) -> int:
        """Particle count N."""
        return int(self.masses.shape[0])

    def zero_forces(self) -> None:
        self.forces.fill(0.0)

    def copy(self) -> "SimulationState":
        """Deep copy of every buffer (used for per-interaction force breakdowns)."""
        return SimulationState(
            positions=self.positions.copy(),
            velocities=self.velocities.copy(),
            forces=self.forces.copy(),
            masses=self.masses.copy(),
            charges=self.charges.copy(),
            escaped=self.escaped.copy(),
            time=self.time,
        )


def create_state(n: int) -> SimulationState:
    """Zero-filled state for n particles."""
    return SimulationState(
        positions=np.zeros(3 * n, dtype=np.float64),
        velocities=np.zeros(3 * n, dtype=np.float64),
        forces=np.zeros(3 * n, dtype=np.float64),
        masses=np.zeros(n, dtype=np.float64),
        charges=np.zeros(n, dtype=np.float64),
        escaped=np.zeros(n, dtype=np.uint8),
    )


@dataclass
class SeedBuffers:
    """
    Externally supplied initial conditions.

    Any field left as None keeps the state's current contents.
    """
    positions: np.ndarray | None = None
    velocities: np.ndarray | None = None
    masses: np.ndarray | None = None
    charges: np.ndarray | None = None
    escaped: np.ndarray | None = None


def _checked(name: str, raw, length: int) -> np.ndarray:
    arr = np.asarray(raw, dtype=np.float64).reshape(-1)
    if arr.shape[0] != length:
        raise SeedError(f"{name} must have length {length}, got {arr.shape[0]}")
    if not np.all(np.isfinite(arr)):
        raise SeedError(f"{name} contains non-finite values")
    return arr


def seed_state(state: SimulationState, buffers: SeedBuffers) -> None:
    """
    Overwrite state buffers from externally supplied arrays.

    Every provided buffer is validated before anything is written, so a
    failed seed leaves the state untouched.

    Raises:
        SeedError: On a length mismatch, non-finite values, non-positive
            masses, or escape flags other than 0/1.
    """
    n = state.n
    staged: dict[str, np.ndarray] = {}
    if buffers.positions is not None:
        staged["positions"] = _checked("positions", buffers.positions, 3 * n)
    if buffers.velocities is not None:
        staged["velocities"] = _checked("velocities", buffers.velocities, 3 * n)
    if buffers.masses is not None:
        masses = _checked("masses", buffers.masses, n)
        if np.any(masses <= 0.0):
            bad = int(np.flatnonzero(masses <= 0.0)[0])
            raise SeedError(f"masses must be positive, particle {bad} has mass {masses[bad]}")
        staged["masses"] = masses
    if buffers.charges is not None:
        staged["charges"] = _checked("charges", buffers.charges, n)
    if buffers.escaped is not None:
        flags = _checked("escaped", buffers.escaped, n)
        if np.any((flags != 0.0) & (flags != 1.0)):
            raise SeedError("escaped flags must be 0 or 1")
        staged["escaped"] = flags.astype(np.uint8)

    for name, arr in staged.items():
        getattr(state, name)[:] = arr
