import numpy as np
import pytest

from particle_sim.errors import SeedError
from particle_sim.state import SeedBuffers, create_state, seed_state


def test_create_state_is_zero_filled_and_sized():
    s = create_state(4)
    assert s.n == 4
    assert s.positions.shape == (12,) and s.velocities.shape == (12,) and s.forces.shape == (12,)
    assert s.masses.shape == (4,) and s.charges.shape == (4,) and s.escaped.shape == (4,)
    assert s.escaped.dtype == np.uint8
    assert s.time == 0.0
    assert not s.positions.any() and not s.masses.any()


def test_reshape_view_shares_memory():
    s = create_state(2)
    s.positions.reshape(-1, 3)[1, 2] = 7.0
    assert s.positions[5] == 7.0


def test_seed_overwrites_buffers():
    s = create_state(2)
    seed_state(s, SeedBuffers(
        positions=[0, 0, 0, 1, 2, 3],
        velocities=np.ones(6),
        masses=[1.0, 2.0],
        charges=[-1.0, 1.0],
    ))
    assert np.array_equal(s.positions, [0, 0, 0, 1, 2, 3])
    assert np.array_equal(s.masses, [1.0, 2.0])
    assert np.array_equal(s.charges, [-1.0, 1.0])


def test_partial_seed_keeps_other_buffers():
    s = create_state(2)
    seed_state(s, SeedBuffers(masses=[3.0, 4.0]))
    seed_state(s, SeedBuffers(positions=np.arange(6.0)))
    assert np.array_equal(s.masses, [3.0, 4.0])
    assert np.array_equal(s.positions, np.arange(6.0))


@pytest.mark.parametrize("buffers", [
    SeedBuffers(positions=np.zeros(5)),
    SeedBuffers(velocities=np.zeros(9)),
    SeedBuffers(masses=[1.0]),
    SeedBuffers(charges=[1.0, 2.0, 3.0]),
    SeedBuffers(masses=[1.0, 0.0]),
    SeedBuffers(masses=[1.0, -2.0]),
    SeedBuffers(positions=[0, 0, 0, np.nan, 0, 0]),
    SeedBuffers(velocities=[0, 0, np.inf, 0, 0, 0]),
    SeedBuffers(escaped=[0, 2]),
])
def test_invalid_seed_raises(buffers):
    with pytest.raises(SeedError):
        seed_state(create_state(2), buffers)


def test_failed_seed_leaves_state_untouched():
    """Positions are valid but masses are not: nothing may be written."""
    s = create_state(2)
    with pytest.raises(SeedError):
        seed_state(s, SeedBuffers(positions=np.ones(6), masses=[1.0, -1.0]))
    assert not s.positions.any()
    assert not s.masses.any()


def test_copy_is_deep():
    s = create_state(1)
    c = s.copy()
    c.positions[0] = 1.0
    assert s.positions[0] == 0.0
