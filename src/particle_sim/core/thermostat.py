# MIT License (see LICENSE)
"""
Velocity-rescaling thermostat.
"""
from __future__ import annotations
import math

from ..state import SimulationState
from .diagnostics import kinetic_energy, temperature


def rescale_velocities(state: SimulationState, target: float, kB: float) -> float:
    """
    Scale every velocity by sqrt(target / T) so the kinetic temperature hits target.

    Does nothing when the current temperature is zero or not finite.

    Returns:
        The scale factor applied (1.0 when nothing was done).
    """
    t = temperature(kinetic_energy(state), state.n, kB)
    if not math.isfinite(t) or t <= 0.0:
        return 1.0
    scale = math.sqrt(target / t)
    state.velocities *= scale
    return scale
