# MIT License (see LICENSE)
"""
Neighbor strategies: candidate pair enumeration within a cutoff.

This subpackage provides:
    - NaiveNeighborStrategy: all-pairs baseline.
    - CellNeighborStrategy: spatial hash grid, same pair set as naive.
    - make_neighbor_strategy: build a strategy from a (free-text) name.

Typical usage:
    from particle_sim.neighbor import make_neighbor_strategy

    strategy = make_neighbor_strategy("cell")
    strategy.rebuild(state, cutoff)
    pairs = strategy.pairs(state, cutoff)
"""
from ..config import canonicalize_neighbor_strategy
from .base import NeighborStrategy, NaiveNeighborStrategy, PairList, PairHandler, pair_geometry
from .cell import CellNeighborStrategy


def make_neighbor_strategy(name) -> NeighborStrategy:
    """Build the strategy for name; unrecognized names give the cell strategy."""
    if canonicalize_neighbor_strategy(name) == "naive":
        return NaiveNeighborStrategy()
    return CellNeighborStrategy()


__all__ = [
    "NeighborStrategy",
    "NaiveNeighborStrategy",
    "CellNeighborStrategy",
    "PairList",
    "PairHandler",
    "pair_geometry",
    "make_neighbor_strategy",
]
