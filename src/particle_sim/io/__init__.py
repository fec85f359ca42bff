# MIT License (see LICENSE)
"""
Snapshot capture, restore and JSON persistence.

This subpackage provides:
    - EngineSnapshot: versioned capture of config, time and buffers.
    - snapshot / hydrate: engine -> snapshot -> equivalent engine.
    - save_snapshot / load_snapshot: JSON files.

Typical usage:
    from particle_sim.io import save_snapshot, load_snapshot, hydrate

    save_snapshot(engine.snapshot(), "run.json")
    engine = hydrate(load_snapshot("run.json"))
"""
from .snapshot import (
    EngineSnapshot,
    check_version,
    snapshot,
    hydrate,
    save_snapshot,
    load_snapshot,
    load_snapshot_raw,
)

__all__ = [
    "EngineSnapshot",
    "check_version",
    "snapshot",
    "hydrate",
    "save_snapshot",
    "load_snapshot",
    "load_snapshot_raw",
]
