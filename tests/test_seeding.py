import numpy as np
import pytest

from particle_sim.config import EngineConfig
from particle_sim.seeding import (
    CHARGE_OPTIONS,
    generate_masses_charges,
    generate_positions,
    random_seed_buffers,
)


def test_positions_inside_box():
    rng = np.random.default_rng(0)
    pos = generate_positions(500, (1.0, 2.0, 3.0), rng)
    assert pos.shape == (500, 3)
    assert np.all(np.abs(pos) <= [1.0, 2.0, 3.0])


def test_masses_and_charges_ranges():
    rng = np.random.default_rng(1)
    m, q = generate_masses_charges(1000, rng)
    assert np.all((m >= 16.0) & (m <= 20.0))
    assert set(np.unique(q)) <= set(CHARGE_OPTIONS)
    assert len(np.unique(q)) == 7


def test_empty_charge_options_give_neutral_particles():
    _, q = generate_masses_charges(10, np.random.default_rng(2), charge_options=())
    assert not q.any()


def test_sun_and_circular_orbits():
    cfg = EngineConfig(particle_count=8, sun_mass=300.0, G=0.5)
    buffers = random_seed_buffers(cfg, np.random.default_rng(3))
    pos = buffers.positions.reshape(-1, 3)
    vel = buffers.velocities.reshape(-1, 3)

    assert np.array_equal(pos[0], [0.0, 0.0, 0.0])
    assert np.array_equal(vel[0], [0.0, 0.0, 0.0])
    assert buffers.masses[0] == 300.0
    assert buffers.charges[0] == 0.0

    for p, v in zip(pos[1:], vel[1:]):
        r = np.linalg.norm(p)
        assert abs(np.dot(p, v)) < 1e-9
        assert np.linalg.norm(v) == pytest.approx(np.sqrt(0.5 * 300.0 / r))


def test_no_sun_means_particles_at_rest():
    cfg = EngineConfig(particle_count=5, make_sun=False)
    buffers = random_seed_buffers(cfg, np.random.default_rng(4))
    assert not buffers.velocities.any()
    assert np.all(buffers.masses >= 16.0)


def test_sun_without_orbits():
    cfg = EngineConfig(particle_count=5, circular_orbits=False)
    buffers = random_seed_buffers(cfg, np.random.default_rng(5))
    assert buffers.masses[0] == 500.0
    assert not buffers.velocities.any()
