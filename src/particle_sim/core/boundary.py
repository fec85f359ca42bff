# MIT License (see LICENSE)
"""
Box boundary policies applied after each integration step.

The box spans [-h, h] on each axis (h = half extent).

- PeriodicBoundary wraps any coordinate that left the box back in modulo
  the full width 2h. Velocities are untouched. Pair separations are not
  minimum-imaged: particles near opposite faces do not interact across
  the boundary.
- EscapeBoundary never moves particles. It sets escaped[i] = 1 when a
  particle is outside the box, or is near a face (within 10% of it) while
  moving faster than the escape speed. Flags are sticky: nothing in the
  core clears them, and flagged particles keep their buffer slot.
"""
from __future__ import annotations
import logging
from abc import ABC, abstractmethod

import numpy as np

from ..config import EngineConfig
from ..constants import ESCAPE_BOUNDARY_FRACTION
from ..state import SimulationState

logger = logging.getLogger(__name__)


class Boundary(ABC):
    @abstractmethod
    def apply(self, state: SimulationState) -> int:
        """Apply the policy in-place; return how many particles it affected."""


class PeriodicBoundary(Boundary):
    """Wrap coordinates across opposite faces."""

    def __init__(self, box: tuple[float, float, float]) -> None:
        self.half = np.asarray(box, dtype=np.float64)

    def apply(self, state: SimulationState) -> int:
        pos = state.positions.reshape(-1, 3)
        h = self.half
        outside = np.abs(pos) > h
        if not outside.any():
            return 0
        wrapped = np.mod(pos + h, 2.0 * h) - h
        pos[outside] = wrapped[outside]
        count = int(np.count_nonzero(outside.any(axis=1)))
        logger.debug("periodic wrap: %d particles", count)
        return count


class EscapeBoundary(Boundary):
    """
    Flag particles that left the box or are about to.

    Attributes:
        half: Box half extents.
        escape_speed: Speed above which a particle near a face is flagged.
    """

    def __init__(self, box: tuple[float, float, float], escape_speed: float) -> None:
        self.half = np.asarray(box, dtype=np.float64)
        self.escape_speed = float(escape_speed)

    def apply(self, state: SimulationState) -> int:
        pos = state.positions.reshape(-1, 3)
        vel = state.velocities.reshape(-1, 3)
        h = self.half
        apos = np.abs(pos)
        outside = np.any(apos > h, axis=1)
        near_face = np.any(apos >= ESCAPE_BOUNDARY_FRACTION * h, axis=1)
        speed = np.sqrt(np.sum(vel * vel, axis=1))
        fast = speed > self.escape_speed

        newly = (outside | (near_face & fast)) & (state.escaped == 0)
        idx = np.flatnonzero(newly)
        if idx.size:
            state.escaped[idx] = 1
            for i in idx.tolist():
                logger.info("particle %d escaped (speed %.4g)", i, speed[i])
        return int(idx.size)


def make_boundary(config: EngineConfig) -> Boundary:
    if config.periodic:
        return PeriodicBoundary(config.box)
    return EscapeBoundary(config.box, config.escape_speed)
