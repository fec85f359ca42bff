# MIT License (see LICENSE)
"""
Pair enumeration within a cutoff radius.

A neighbor strategy turns the current positions into the list of unordered
pairs (i, j), i < j, with squared separation r² <= cutoff². Each pair carries
its displacement d = position[i] - position[j] and r², so force kernels never
recompute geometry.

Pairs are returned as flat arrays (a PairList) rather than a callback per
pair so that every enabled interaction can run vectorized over the same
enumeration. for_each_pair() offers the per-pair handler form for callers
that want it.

Non-finite positions never produce a pair: NaN compares false against the
cutoff and an infinite displacement is always outside it.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

import numpy as np

from ..state import SimulationState

PairHandler = Callable[[int, int, float, float, float, float], None]


@dataclass
class PairList:
    """
    Candidate pairs for one force evaluation.

    Attributes:
        i, j: Particle indices (int64), i < j elementwise, sorted by (i, j).
        d: Displacements position[i] - position[j], shape (M, 3).
        r2: Squared separations, shape (M,).
    """
    i: np.ndarray
    j: np.ndarray
    d: np.ndarray
    r2: np.ndarray

    def __len__(self) -> int:
        return int(self.i.shape[0])

    @classmethod
    def empty(cls) -> "PairList":
        return cls(
            i=np.zeros(0, dtype=np.int64),
            j=np.zeros(0, dtype=np.int64),
            d=np.zeros((0, 3), dtype=np.float64),
            r2=np.zeros(0, dtype=np.float64),
        )

    def select(self, mask: np.ndarray) -> "PairList":
        """Subset of pairs where mask is True."""
        return PairList(i=self.i[mask], j=self.j[mask], d=self.d[mask], r2=self.r2[mask])

    def as_set(self) -> set[tuple[int, int]]:
        """Index pairs as a set of tuples (mostly for tests and debugging)."""
        return set(zip(self.i.tolist(), self.j.tolist()))


def pair_geometry(pos: np.ndarray, i: np.ndarray, j: np.ndarray, cutoff: float) -> PairList:
    """
    Displacements and r² for candidate index pairs, filtered to the cutoff.

    Every strategy goes through this function, so identical candidates give
    bit-identical r² and the same inclusion decision at the cutoff boundary.

    Args:
        pos: Positions as an (N, 3) array.
        i, j: Candidate index arrays with i < j.
        cutoff: Interaction cutoff radius.
    """
    d = pos[i] - pos[j]
    dx, dy, dz = d[:, 0], d[:, 1], d[:, 2]
    r2 = dx * dx + dy * dy + dz * dz
    keep = r2 <= cutoff * cutoff
    return PairList(i=i[keep], j=j[keep], d=d[keep], r2=r2[keep])


def filter_active(pairs: PairList, active: np.ndarray | None) -> PairList:
    """Drop pairs where either particle is inactive. None keeps everything."""
    if active is None or len(pairs) == 0:
        return pairs
    return pairs.select(active[pairs.i] & active[pairs.j])


class NeighborStrategy(ABC):
    """
    Interface for pair enumeration strategies.

    Attributes:
        name: Canonical strategy name ("naive", "cell").
        rebuild_every_step: Whether the engine must call rebuild() before
            every force evaluation.
    """
    name: str = ""
    rebuild_every_step: bool = False

    def rebuild(self, state: SimulationState, cutoff: float) -> None:
        """Refresh any spatial structure from current positions. Default: no-op."""

    @abstractmethod
    def pairs(self, state: SimulationState, cutoff: float, active: np.ndarray | None = None) -> PairList:
        """
        All pairs (i < j) with r² <= cutoff², sorted by (i, j).

        Args:
            state: Current simulation state.
            cutoff: Interaction cutoff radius.
            active: Optional boolean mask of length N; a pair is kept only
                when both of its particles are active.
        """

    def for_each_pair(
        self,
        state: SimulationState,
        cutoff: float,
        handler: PairHandler,
        active: np.ndarray | None = None,
    ) -> None:
        """Invoke handler(i, j, dx, dy, dz, r2) once per pair."""
        pl = self.pairs(state, cutoff, active)
        for k in range(len(pl)):
            dx, dy, dz = pl.d[k]
            handler(int(pl.i[k]), int(pl.j[k]), float(dx), float(dy), float(dz), float(pl.r2[k]))


class NaiveNeighborStrategy(NeighborStrategy):
    """
    All-pairs baseline, O(N²).

    Stateless, so rebuild() is a no-op. Each row i is vectorized over j > i.
    """
    name = "naive"
    rebuild_every_step = False

    def pairs(self, state: SimulationState, cutoff: float, active: np.ndarray | None = None) -> PairList:
        pos = state.positions.reshape(-1, 3)
        n = pos.shape[0]
        if n < 2:
            return PairList.empty()

        chunks: list[PairList] = []
        for i in range(n - 1):
            j = np.arange(i + 1, n, dtype=np.int64)
            row = pair_geometry(pos, np.full(j.shape[0], i, dtype=np.int64), j, cutoff)
            if len(row):
                chunks.append(row)
        if not chunks:
            return PairList.empty()

        pairs = PairList(
            i=np.concatenate([c.i for c in chunks]),
            j=np.concatenate([c.j for c in chunks]),
            d=np.concatenate([c.d for c in chunks]),
            r2=np.concatenate([c.r2 for c in chunks]),
        )
        return filter_active(pairs, active)
