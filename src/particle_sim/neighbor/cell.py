# MIT License (see LICENSE)
"""
Cell-list neighbor search using spatial hashing.

Space is partitioned into a uniform 3D grid of cubic cells whose edge is
(just over) the cutoff radius. Every particle lands in exactly one cell, so
any pair within the cutoff lives either in the same cell or in two cells
that touch. Candidates are taken from each cell paired with itself and with
13 of its 26 neighbors (the "half shell"), which visits every adjacent cell
pair exactly once.

Candidates then go through the same distance test as the naive strategy,
so the resulting pair set is identical to the all-pairs result.

Key concepts:
- Cell keys are integer tuples floor((x - origin) / cell), stored in a dict
  of lists. The origin is the per-axis minimum over finite positions at the
  rebuild, so a cluster far from (0, 0, 0) still gets exact keys. Keys stay
  reliable while the finite positions span less than about 1e7 cells.
- Particles with non-finite coordinates are left out of the grid.
- The grid reflects positions at the last rebuild(); the engine rebuilds
  before every force evaluation because rebuild_every_step is True.
"""
from __future__ import annotations
import itertools
import logging
from collections import defaultdict

import numpy as np

from ..state import SimulationState
from .base import NeighborStrategy, PairList, filter_active, pair_geometry

logger = logging.getLogger(__name__)

# Keeps a pair at exactly the cutoff in adjacent cells despite rounding in x / cell.
_CELL_PAD = 1.0 + 1e-9

# Offsets lexicographically greater than (0, 0, 0): 13 of the 26 neighbors.
_HALF_SHELL: tuple[tuple[int, int, int], ...] = tuple(
    off for off in itertools.product((-1, 0, 1), repeat=3) if off > (0, 0, 0)
)


class CellNeighborStrategy(NeighborStrategy):
    """
    Spatial hash grid for cutoff-limited pair search.

    Example:
        strategy = CellNeighborStrategy()
        strategy.rebuild(state, cutoff=2.5)
        pairs = strategy.pairs(state, cutoff=2.5)
    """
    name = "cell"
    rebuild_every_step = True

    def __init__(self) -> None:
        self._grid: dict[tuple[int, int, int], list[int]] | None = None
        self._cell: float | None = None
        self._n: int | None = None

    @property
    def cell_count(self) -> int:
        """Number of occupied cells at the last rebuild (0 before any rebuild)."""
        return 0 if self._grid is None else len(self._grid)

    def rebuild(self, state: SimulationState, cutoff: float) -> None:
        """
        Re-bin every finite particle into its grid cell.

        Args:
            state: Current simulation state.
            cutoff: Interaction cutoff radius; the cell edge is derived from it.
        """
        pos = state.positions.reshape(-1, 3)
        cell = float(cutoff) * _CELL_PAD
        finite = np.all(np.isfinite(pos), axis=1)
        idx = np.flatnonzero(finite)
        origin = pos[idx].min(axis=0) if idx.shape[0] else np.zeros(3)
        keys = np.floor((pos[idx] - origin) / cell).astype(np.int64)

        grid: dict[tuple[int, int, int], list[int]] = defaultdict(list)
        for p, key in zip(idx.tolist(), map(tuple, keys.tolist())):
            grid[key].append(p)

        self._grid = dict(grid)
        self._cell = cell
        self._n = pos.shape[0]
        logger.debug("cell grid rebuilt: %d particles in %d cells (edge %.4g)",
                     idx.shape[0], self.cell_count, cell)

    def _candidates(self) -> tuple[np.ndarray, np.ndarray]:
        grid = self._grid
        a_parts: list[np.ndarray] = []
        b_parts: list[np.ndarray] = []
        for key, members in grid.items():
            m = np.asarray(members, dtype=np.int64)
            if m.shape[0] > 1:
                ia, ib = np.triu_indices(m.shape[0], k=1)
                a_parts.append(m[ia])
                b_parts.append(m[ib])
            kx, ky, kz = key
            for ox, oy, oz in _HALF_SHELL:
                other = grid.get((kx + ox, ky + oy, kz + oz))
                if other is None:
                    continue
                o = np.asarray(other, dtype=np.int64)
                a_parts.append(np.repeat(m, o.shape[0]))
                b_parts.append(np.tile(o, m.shape[0]))

        if not a_parts:
            empty = np.zeros(0, dtype=np.int64)
            return empty, empty
        a = np.concatenate(a_parts)
        b = np.concatenate(b_parts)
        return np.minimum(a, b), np.maximum(a, b)

    def pairs(self, state: SimulationState, cutoff: float, active: np.ndarray | None = None) -> PairList:
        """
        Pairs within the cutoff, drawn from same-cell and adjacent-cell candidates.

        Rebuilds first if the grid is missing, was built for a different
        cutoff, or for a different particle count.
        """
        if (
            self._grid is None
            or self._cell != float(cutoff) * _CELL_PAD
            or self._n != state.n
        ):
            self.rebuild(state, cutoff)

        i, j = self._candidates()
        if i.shape[0] == 0:
            return PairList.empty()

        pos = state.positions.reshape(-1, 3)
        pairs = pair_geometry(pos, i, j, cutoff)
        order = np.lexsort((pairs.j, pairs.i))
        return filter_active(pairs.select(order), active)
