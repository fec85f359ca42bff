import numpy as np
import pytest

from particle_sim.neighbor import (
    CellNeighborStrategy,
    NaiveNeighborStrategy,
    make_neighbor_strategy,
)
from particle_sim.state import create_state


def _state_with(positions):
    pos = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    s = create_state(pos.shape[0])
    s.positions[:] = pos.reshape(-1)
    s.masses[:] = 1.0
    return s


def _brute_force(pos, cutoff):
    out = set()
    n = len(pos)
    for i in range(n):
        for j in range(i + 1, n):
            d = pos[i] - pos[j]
            if d[0] * d[0] + d[1] * d[1] + d[2] * d[2] <= cutoff * cutoff:
                out.add((i, j))
    return out


def _assert_same_pairs(state, cutoff):
    naive = NaiveNeighborStrategy().pairs(state, cutoff)
    cell_strategy = CellNeighborStrategy()
    cell_strategy.rebuild(state, cutoff)
    cell = cell_strategy.pairs(state, cutoff)

    assert np.array_equal(naive.i, cell.i)
    assert np.array_equal(naive.j, cell.j)
    assert np.array_equal(naive.d, cell.d)
    assert np.array_equal(naive.r2, cell.r2)
    return naive


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_cell_matches_naive_uniform(seed):
    rng = np.random.default_rng(seed)
    pos = rng.uniform(-10.0, 10.0, size=(300, 3))
    pairs = _assert_same_pairs(_state_with(pos), cutoff=2.0)
    assert len(pairs) > 0
    assert pairs.as_set() == _brute_force(pos, 2.0)


def test_cell_matches_naive_clustered():
    """Dense blobs put many particles in few cells plus a sparse background."""
    rng = np.random.default_rng(7)
    centers = np.array([[-3.0, -3.0, 0.0], [2.5, 1.0, -1.0], [0.0, 4.0, 4.0]])
    blobs = [c + 0.3 * rng.standard_normal((60, 3)) for c in centers]
    background = rng.uniform(-6.0, 6.0, size=(40, 3))
    pos = np.vstack(blobs + [background])
    _assert_same_pairs(_state_with(pos), cutoff=0.75)


def test_cell_matches_naive_far_from_origin():
    """A cluster near 2**30 with cell-sized spacing keeps every adjacent pair."""
    base = float(2 ** 30)
    chain = [[base + 0.25 * k, base, base] for k in range(8)]
    s = _state_with(chain)
    pairs = _assert_same_pairs(s, cutoff=0.25)
    assert pairs.as_set() == {(k, k + 1) for k in range(7)}

    rng = np.random.default_rng(11)
    pos = 1e9 + rng.uniform(-3.0, 3.0, size=(200, 3))
    pairs = _assert_same_pairs(_state_with(pos), cutoff=1.0)
    assert pairs.as_set() == _brute_force(pos, 1.0)


def test_cutoff_larger_than_everything():
    rng = np.random.default_rng(3)
    pos = rng.uniform(-1.0, 1.0, size=(25, 3))
    pairs = _assert_same_pairs(_state_with(pos), cutoff=10.0)
    assert len(pairs) == 25 * 24 // 2


def test_pair_exactly_at_cutoff_is_included():
    s = _state_with([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [-0.5, 0.0, 0.0], [3.0, 0.0, 0.0]])
    pairs = _assert_same_pairs(s, cutoff=1.0)
    assert pairs.as_set() == {(0, 1), (0, 2)}


def test_displacement_sign_and_r2():
    s = _state_with([[1.0, 2.0, 3.0], [0.5, 2.0, 1.0]])
    pairs = NaiveNeighborStrategy().pairs(s, cutoff=5.0)
    assert pairs.as_set() == {(0, 1)}
    assert np.allclose(pairs.d[0], [0.5, 0.0, 2.0])
    assert pairs.r2[0] == pytest.approx(4.25)


def test_for_each_pair_handler_arguments():
    s = _state_with([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 2.0, 0.0]])
    calls = []
    CellNeighborStrategy().for_each_pair(s, 1.5, lambda *args: calls.append(args))
    assert calls == [(0, 1, -1.0, 0.0, 0.0, 1.0)]


def test_non_finite_positions_never_pair():
    s = _state_with([[0.0, 0.0, 0.0], [np.nan, 0.0, 0.0], [np.inf, 0.0, 0.0], [0.1, 0.0, 0.0]])
    pairs = _assert_same_pairs(s, cutoff=1.0)
    assert pairs.as_set() == {(0, 3)}


def test_active_mask_drops_inactive_particles():
    s = _state_with([[0.0, 0.0, 0.0], [0.1, 0.0, 0.0], [0.2, 0.0, 0.0]])
    active = np.array([True, False, True])
    for strategy in (NaiveNeighborStrategy(), CellNeighborStrategy()):
        assert strategy.pairs(s, 1.0, active).as_set() == {(0, 2)}


def test_single_particle_has_no_pairs():
    s = _state_with([[0.0, 0.0, 0.0]])
    assert len(NaiveNeighborStrategy().pairs(s, 1.0)) == 0
    assert len(CellNeighborStrategy().pairs(s, 1.0)) == 0


def test_cell_pairs_rebuild_when_cutoff_changes():
    s = _state_with([[0.0, 0.0, 0.0], [1.5, 0.0, 0.0]])
    strategy = CellNeighborStrategy()
    assert strategy.cell_count == 0
    strategy.rebuild(s, 1.0)
    assert strategy.cell_count == 2
    assert len(strategy.pairs(s, 1.0)) == 0
    assert strategy.pairs(s, 2.0).as_set() == {(0, 1)}


def test_rebuild_flags_and_factory():
    assert NaiveNeighborStrategy.rebuild_every_step is False
    assert CellNeighborStrategy.rebuild_every_step is True
    assert isinstance(make_neighbor_strategy("NAIVE"), NaiveNeighborStrategy)
    assert isinstance(make_neighbor_strategy("cell"), CellNeighborStrategy)
    assert isinstance(make_neighbor_strategy("kd-tree"), CellNeighborStrategy)
