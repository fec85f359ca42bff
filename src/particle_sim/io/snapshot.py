# MIT License (see LICENSE)
"""
Versioned engine snapshots and their JSON form.

A snapshot holds everything needed to rebuild an equivalent engine: the
config plus time and the per-particle buffers. Forces are not stored; the
engine recomputes them at the start of every step.

JSON Schema Overview:
---------------------
{
  "version": 1,                  # Required. Only version 1 is understood.
  "config": {                    # EngineConfig.to_dict()
    "particle_count": int,       # Required
    "box": [hx, hy, hz],
    "dt": float,
    ...                          # Remaining EngineConfig fields, all optional
  },
  "time": float,                 # Default: 0
  "positions": [float] * 3N,     # Required
  "velocities": [float] * 3N,    # Required
  "masses": [float] * N,         # Required
  "charges": [float] * N,        # Required
  "escaped": [0 | 1] * N         # Optional, default all 0
}

Unknown versions are rejected with SnapshotVersionError. There is no
best-effort reading of other layouts.
"""
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np

from ..config import EngineConfig
from ..constants import SNAPSHOT_VERSION
from ..errors import SnapshotVersionError
from ..state import SeedBuffers

if TYPE_CHECKING:
    from ..engine import SimulationEngine

logger =logging.getLogger(__name__)

_REQUIRED_BUFFERS = ("positions", "velocities", "masses", "charges")


def check_version(version: Any) -> int:
    """
    Validate a snapshot version tag.

    Raises:
        SnapshotVersionError: If version is missing (None), not an integer,
            or not a supported version.
    """
    if version is None:
        raise SnapshotVersionError("snapshot has no version tag")
    if isinstance(version, bool) or not isinstance(version, int):
        raise SnapshotVersionError(f"snapshot version must be an integer, got {version!r}")
    if version != SNAPSHOT_VERSION:
        raise SnapshotVersionError(
            f"unsupported snapshot version {version} (supported: {SNAPSHOT_VERSION})")
    return version


@dataclass(eq=False)
class EngineSnapshot:
    """
    Self-describing capture of one engine.

    Attributes:
        config: Engine configuration at capture time.
        time: Simulated time.
        positions, velocities: Flat 3N buffers.
        masses, charges: Length-N buffers.
        escaped: Length-N 0/1 flags.
        version: Layout tag.
    """
    config: EngineConfig
    time: float
    positions: np.ndarray
    velocities: np.ndarray
    masses: np.ndarray
    charges: np.ndarray
    escaped: np.ndarray | None = None
    version: int = field(default=SNAPSHOT_VERSION)

    def __post_init__(self) -> None:
        if self.escaped is None:
            self.escaped = np.zeros(len(self.masses), dtype=np.uint8)

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible dict (see module docstring)."""
        return {
            "version": self.version,
            "config": self.config.to_dict(),
            "time": float(self.time),
            "positions": np.asarray(self.positions, dtype=np.float64).tolist(),
            "velocities": np.asarray(self.velocities, dtype=np.float64).tolist(),
            "masses": np.asarray(self.masses, dtype=np.float64).tolist(),
            "charges": np.asarray(self.charges, dtype=np.float64).tolist(),
            "escaped": np.asarray(self.escaped, dtype=np.int64).tolist(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineSnapshot":
        """
        Parse a dict produced by to_dict().

        The version is checked before anything else is read.

        Raises:
            SnapshotVersionError: Missing or unsupported version.
            ValueError: Missing config or buffers.
        """
        version = check_version(data.get("version"))
        if "config" not in data:
            raise ValueError("snapshot is missing 'config'")
        missing = [k for k in _REQUIRED_BUFFERS if k not in data]
        if missing:
            raise ValueError(f"snapshot is missing buffers: {', '.join(missing)}")

        escaped = data.get("escaped")
        return cls(
            version=version,
            config=EngineConfig.from_dict(data["config"]),
            time=float(data.get("time", 0.0)),
            positions=np.asarray(data["positions"], dtype=np.float64),
            velocities=np.asarray(data["velocities"], dtype=np.float64),
            masses=np.asarray(data["masses"], dtype=np.float64),
            charges=np.asarray(data["charges"], dtype=np.float64),
            escaped=None if escaped is None else np.asarray(escaped, dtype=np.uint8),
        )


def snapshot(engine: "SimulationEngine") -> EngineSnapshot:
    """Copy the engine's config, time and buffers into a new snapshot."""
    s = engine.get_state()
    snap = EngineSnapshot(
        config=engine.get_config(),
        time=s.time,
        positions=s.positions.copy(),
        velocities=s.velocities.copy(),
        masses=s.masses.copy(),
        charges=s.charges.copy(),
        escaped=s.escaped.copy(),
    )
    logger.debug("snapshot captured: N=%d t=%g", s.n, s.time)
    return snap


def hydrate(snap: EngineSnapshot | dict[str, Any], engine_cls=None, **engine_kwargs) -> "SimulationEngine":
    """
    Build a new engine from a snapshot (or its dict form).

    Args:
        snap: EngineSnapshot or a dict in the JSON layout.
        engine_cls: Engine class to build, SimulationEngine by default.
        **engine_kwargs: Passed to the engine constructor (particle_filter, profiler).

    Raises:
        SnapshotVersionError: Unsupported version.
        SeedError: Buffers inconsistent with the config's particle count,
            non-finite values or non-positive masses.
    """
    # Import locally to avoid a circular import (engine imports this module lazily too)
    from ..engine import SimulationEngine

    if engine_cls is None:
        engine_cls = SimulationEngine
    if isinstance(snap, dict):
        snap = EngineSnapshot.from_dict(snap)
    else:
        check_version(snap.version)

    engine = engine_cls(snap.config, **engine_kwargs)
    engine.seed(SeedBuffers(
        positions=snap.positions,
        velocities=snap.velocities,
        masses=snap.masses,
        charges=snap.charges,
        escaped=snap.escaped,
    ))
    engine.set_time(snap.time)
    logger.debug("engine hydrated: N=%d t=%g", snap.config.particle_count, snap.time)
    return engine


def save_snapshot(snap: EngineSnapshot, path: str) -> None:
    """
    Write a snapshot to a JSON file.

    Args:
        snap: Snapshot to write.
        path: Output file path (overwritten if it exists).
    """
    # Serialize first so an unencodable snapshot leaves the file untouched.
    text = json.dumps(snap.to_dict(), indent=2)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def load_snapshot_raw(path: str) -> dict[str, Any]:
    """Read a snapshot JSON file without validating or converting it."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_snapshot(path: str) -> EngineSnapshot:
    """
    Read and validate a snapshot JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        SnapshotVersionError: Missing or unsupported version.
    """
    return EngineSnapshot.from_dict(load_snapshot_raw(path))
