# MIT License (see LICENSE)
"""
Circular-orbit initial velocities around a central mass at the origin.
"""
from __future__ import annotations
import math

import numpy as np

from ..constants import ORBIT_MIN_RADIUS, ORBIT_MIN_PLANAR_RADIUS
from ..util import f64, norm, unit


def compute_circular_orbit_velocity(position, central_mass: float, G: float) -> np.ndarray:
    """
    Velocity for a circular orbit of radius |position| around the origin.

    The direction is the XY-plane tangent, the radius vector's (x, y)
    rotated by +90 degrees: (-y, x) / |(x, y)|. A particle on (or within
    1e-10 of) the Z axis gets the +X direction instead. The magnitude is
    sqrt(G M / r).

    Args:
        position: Particle position (x, y, z).
        central_mass: Mass M at the origin.
        G: Gravitational constant.

    Returns:
        Velocity vector (3,). Zero when r < 1e-8, r is not finite, or G M <= 0.

    Example:
        compute_circular_orbit_velocity((2.0, 3.0, 0.0), 500.0, 0.08)
    """
    p = f64(position)[:3]
    r = norm(p)
    if not math.isfinite(r) or r < ORBIT_MIN_RADIUS:
        return np.zeros(3, dtype=np.float64)

    tangent = unit(np.array([-p[1], p[0], 0.0]), eps=ORBIT_MIN_PLANAR_RADIUS)
    if not tangent.any():
        tangent = np.array([1.0, 0.0, 0.0])

    gm = G * central_mass
    if not math.isfinite(gm) or gm <= 0.0:
        return np.zeros(3, dtype=np.float64)
    return math.sqrt(gm / r) * tangent
