# MIT License (see LICENSE)
"""
Utility functions for vector math and numeric operations.

Provides small 3D vector helpers, the softening-length rule shared by the
inverse-square interactions, and canonicalization of free-text options.
Vectors are numpy arrays of shape (3,); flat particle buffers are reshaped
to (N, 3) views by callers.
"""
from __future__ import annotations
import logging
import math
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)


def f64(x) -> np.ndarray:
    """
    Convert any array-like to a float64 numpy array.

    Used throughout the codebase to ensure consistent numeric precision
    and allow tuple/list inputs for positions, velocities and buffers.
    """
    return np.array(x, dtype=np.float64)


def norm2(v: np.ndarray) -> float:
    """Squared magnitude of a 3D vector. Avoids sqrt for performance."""
    return float(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def norm(v: np.ndarray) -> float:
    """Magnitude (length) of a 3D vector."""
    return float(np.sqrt(norm2(v)))


def unit(v: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    """
    Return a unit (normalized) vector in the same direction as v.

    Returns zero vector if |v| < eps to avoid division by zero.
    """
    n = norm(v)
    if not math.isfinite(n) or n < eps:
        return np.zeros(3, dtype=np.float64)
    return f64(v) / n


def box_volume(box: Sequence[float]) -> float:
    """Full volume of a box given its half extents (hx, hy, hz)."""
    return (2.0 * box[0]) * (2.0 * box[1]) * (2.0 * box[2])


def compute_softening_length(particle_count: int, box: Sequence[float], factor: float = 0.15) -> float:
    """
    Softening length proportional to the mean inter-particle spacing.

        s = factor * cbrt(volume / N)

    where volume is the full box volume (8 * hx * hy * hz). A particle count
    below one is treated as one so an empty box still yields a finite length.

    Example:
        compute_softening_length(1000, (10, 10, 10), 0.15)  # 0.3
    """
    n = max(1, int(particle_count))
    spacing = float(np.cbrt(box_volume(box) / n))
    return factor * spacing


def canonicalize_option(raw, allowed: Sequence[str], fallback: str) -> str:
    """
    Map a free-text option onto one of the allowed spellings.

    Matching is case-insensitive and ignores surrounding whitespace.
    Anything unrecognized (including non-strings) returns the fallback.
    """
    if isinstance(raw, str):
        key = raw.strip().lower()
        for option in allowed:
            if option.lower() == key:
                return option
    if raw is not None:
        logger.warning("unrecognized option %r (expected one of %s); using %r",
                       raw, ", ".join(allowed), fallback)
    return fallback
