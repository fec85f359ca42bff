import numpy as np
import pytest

from particle_sim.config import EngineConfig
from particle_sim.core.diagnostics import temperature
from particle_sim.engine import SimulationEngine, exclude_escaped
from particle_sim.errors import ConfigurationError, SeedError
from particle_sim.neighbor import NaiveNeighborStrategy
from particle_sim.profiler import Profiler
from particle_sim.state import SeedBuffers


def _engine(n=20, seed=0, profiler=None, **overrides):
    params = dict(particle_count=n, make_sun=False, circular_orbits=False)
    params.update(overrides)
    engine = SimulationEngine(EngineConfig(**params), profiler=profiler)
    engine.seed_random(np.random.default_rng(seed))
    return engine


def test_unseeded_engine_refuses_to_step():
    """create_state gives zero masses; stepping would divide by zero."""
    engine = SimulationEngine(EngineConfig(particle_count=3))
    with pytest.raises(ConfigurationError):
        engine.step()


def test_time_advances_by_dt_per_step():
    engine = _engine(dt=0.005)
    engine.set_time(1.0)
    engine.run(4)
    assert engine.time == pytest.approx(1.02)
    assert engine.step_count == 4


def test_set_time_rejects_non_finite():
    engine = _engine()
    with pytest.raises(ConfigurationError):
        engine.set_time(float("nan"))


def test_momentum_conserved_with_all_interactions():
    """
    Internal forces only, non-periodic box: Σ m v stays at its initial value
    (zero here) up to rounding, even for particles that leave the box.
    """
    engine = _engine(n=30, seed=5, periodic=False)
    s = engine.state
    p0 = (s.masses[:, None] * s.velocities.reshape(-1, 3)).sum(axis=0)
    engine.run(200)
    p1 = (s.masses[:, None] * s.velocities.reshape(-1, 3)).sum(axis=0)
    scale = np.sum(s.masses * np.linalg.norm(s.velocities.reshape(-1, 3), axis=1))
    assert scale > 0.0
    assert np.allclose(p1, p0, atol=1e-10 * scale)


def test_naive_and_cell_engines_evolve_identically():
    a = _engine(n=40, seed=2, neighbor_strategy="naive", cutoff=3.0)
    b = _engine(n=40, seed=2, neighbor_strategy="cell", cutoff=3.0)
    a.run(25)
    b.run(25)
    assert np.array_equal(a.state.positions, b.state.positions)
    assert np.array_equal(a.state.velocities, b.state.velocities)


def test_verlet_evaluates_forces_twice_per_step():
    prof = Profiler()
    engine = _engine(profiler=prof)
    engine.run(3)
    summary = prof.stats.summary()
    assert summary["forces"]["n"] == 6
    assert summary["neighbors"]["n"] == 6
    assert summary["integrate"]["n"] == 3
    assert summary["boundary"]["n"] == 3


def test_euler_evaluates_forces_once_per_step():
    prof = Profiler()
    engine = _engine(integrator="euler", profiler=prof)
    engine.run(3)
    assert prof.stats.summary()["forces"]["n"] == 3


def test_seed_rejects_mixed_arguments_and_bad_lengths():
    engine = _engine(n=3)
    with pytest.raises(TypeError):
        engine.seed(SeedBuffers(masses=[1.0, 1.0, 1.0]), charges=[0.0, 0.0, 0.0])
    with pytest.raises(SeedError):
        engine.seed(positions=np.zeros(8))


def test_seed_random_is_deterministic():
    a = _engine(seed=11, make_sun=True, circular_orbits=True)
    b = _engine(seed=11, make_sun=True, circular_orbits=True)
    assert np.array_equal(a.state.positions, b.state.positions)
    assert np.array_equal(a.state.velocities, b.state.velocities)
    assert a.state.masses[0] == 500.0
    assert np.array_equal(a.state.positions[:3], [0.0, 0.0, 0.0])


def test_particle_filter_excludes_escaped_from_forces():
    cfg = EngineConfig(particle_count=2, make_sun=False, periodic=False)
    engine = SimulationEngine(cfg, particle_filter=exclude_escaped)
    engine.seed(positions=[0, 0, 0, 1, 0, 0], masses=[1.0, 1.0], charges=[1.0, 1.0])
    assert len(engine.pairs()) == 1

    engine.seed(escaped=[0, 1])
    assert len(engine.pairs()) == 0
    for f in engine.force_contributions().values():
        assert not f.any()


def test_escaped_particles_interact_without_filter():
    cfg = EngineConfig(particle_count=2, make_sun=False, periodic=False)
    engine = SimulationEngine(cfg)
    engine.seed(positions=[0, 0, 0, 1, 0, 0], masses=[1.0, 1.0], escaped=[1, 1])
    assert len(engine.pairs()) == 1


def test_bad_particle_filter_shape():
    engine = _engine(n=4)
    engine.particle_filter = lambda state: np.ones(3, dtype=bool)
    with pytest.raises(ConfigurationError):
        engine.step()


def test_switch_neighbor_strategy_at_runtime():
    engine = _engine(n=30, seed=3, cutoff=2.0)
    before = engine.pairs().as_set()
    engine.set_neighbor_strategy("naive")
    assert isinstance(engine.neighbor_strategy, NaiveNeighborStrategy)
    assert engine.config.neighbor_strategy == "naive"
    assert engine.pairs().as_set() == before
    engine.run(2)
    assert engine.snapshot().config.neighbor_strategy == "naive"


def test_force_contributions_sum_to_total():
    """After a Verlet step state.forces holds F(x) at the new positions."""
    engine = _engine(n=15, seed=8, periodic=False)
    parts = engine.force_contributions()
    assert set(parts) == {"gravity", "lennard_jones", "coulomb"}
    assert not engine.state.forces.any()  # shared buffer untouched

    engine.step()
    summed = sum(engine.force_contributions().values())
    scale = np.max(np.abs(engine.state.forces))
    assert np.allclose(summed.reshape(-1), engine.state.forces, rtol=1e-10, atol=1e-12 * scale)
    largest = np.max(np.linalg.norm(summed, axis=1))
    assert engine.diagnostics().max_force == pytest.approx(largest, rel=1e-10)


def test_diagnostics_leave_force_buffer_alone():
    engine = _engine(n=15, seed=8)
    assert not engine.state.forces.any()
    d = engine.diagnostics()
    assert d.max_force > 0.0
    assert not engine.state.forces.any()

    engine.step()
    after_step = engine.state.forces.copy()
    engine.check_stability()
    assert np.array_equal(engine.state.forces, after_step)


def test_disabled_interactions_absent():
    engine = _engine(gravity=False, coulomb=False)
    assert engine.interactions == ["lennard_jones"]
    assert set(engine.diagnostics().potential) == {"lennard_jones"}


def test_thermostat_sets_target_temperature():
    engine = _engine(n=12, seed=1, make_sun=True, circular_orbits=True,
                     thermostat=True, target_temperature=50.0)
    engine.step()
    d = engine.diagnostics()
    assert d.temperature == pytest.approx(50.0, rel=1e-9)
    assert temperature(d.kinetic, 12, engine.config.kB) == pytest.approx(50.0, rel=1e-9)


def test_periodic_engine_keeps_particles_in_box():
    engine = _engine(n=20, seed=4, make_sun=True, circular_orbits=True, periodic=True)
    engine.run(100)
    pos = engine.state.positions.reshape(-1, 3)
    assert np.all(np.abs(pos) <= 5.0)
    assert not engine.state.escaped.any()


def test_check_stability_on_quiet_system():
    engine = _engine(n=5, seed=2)
    assert engine.check_stability() is None
