# MIT License (see LICENSE)
"""
Exception types raised at validation boundaries.

All of them subclass ValueError, so callers that only care about "bad input"
can keep catching ValueError.
"""
from __future__ import annotations


class ConfigurationError(ValueError):
    """Structurally invalid engine configuration or physically meaningless state."""


class SeedError(ConfigurationError):
    """Seed buffers with the wrong length, non-finite values or non-positive masses."""


class SnapshotVersionError(ValueError):
    """Snapshot carries a missing or unrecognized version tag."""
