# MIT License (see LICENSE)
"""
The simulation engine facade.

SimulationEngine owns one SimulationState and the strategy objects chosen
by its EngineConfig. One call to step() runs:
    1. Neighbor rebuild (when the strategy asks for it) and pair enumeration.
    2. Force accumulation: zero the buffer, then each enabled interaction.
    3. Integration (velocity Verlet re-runs 1-2 at the new positions).
    4. Boundary policy (periodic wrap or escape flagging).
    5. Optional thermostat.
    6. time += dt.

Structure:
    - Build an engine from an EngineConfig.
    - Seed it (seed_random() or seed() with explicit buffers).
    - Call step() in a loop; read diagnostics() as needed.
    - snapshot() / SimulationEngine.hydrate() to save and restore.
"""
from __future__ import annotations
import contextlib
import logging
import math
from dataclasses import dataclass
from typing import Callable

import numpy as np

from .config import EngineConfig, NEIGHBOR_STRATEGIES
from .errors import ConfigurationError
from .neighbor import NeighborStrategy, PairList, make_neighbor_strategy
from .profiler import Profiler
from .state import SeedBuffers, SimulationState, create_state, seed_state
from .core.forces import build_force_accumulators
from .core.integrators import make_integrator
from .core.boundary import make_boundary
from .core.diagnostics import Diagnostics, compute_diagnostics
from .core.stability import StabilityMonitor, StabilityResult
from .core.thermostat import rescale_velocities

logger = logging.getLogger(__name__)

# Returns a boolean mask of length N; only pairs of active particles interact.
ParticleFilter = Callable[[SimulationState], np.ndarray]


def exclude_escaped(state: SimulationState) -> np.ndarray:
    """Particle filter that drops escaped particles from force computation."""
    return state.escaped == 0


@dataclass(eq=False)
class SimulationEngine:
    """
    Particle simulation controller.

    Attributes:
        config: Immutable run configuration.
        particle_filter: Optional predicate selecting which particles take
            part in pair interactions. None means every particle interacts,
            escaped or not. Pass exclude_escaped to leave escaped particles out.
        profiler: Optional Profiler timing the neighbors, forces, integrate
            and boundary phases. The integrate section includes the second
            force evaluation of velocity Verlet.
    """
    config: EngineConfig
    particle_filter: ParticleFilter | None = None
    profiler: Profiler | None = None

    def __post_init__(self) -> None:
        """Allocate zero-filled state and build strategies from the config."""
        cfg = self.config
        self.state = create_state(cfg.particle_count)
        self.step_count = 0
        self._strategy: NeighborStrategy = make_neighbor_strategy(cfg.neighbor_strategy)
        self._accumulators = build_force_accumulators(cfg)
        self._integrator = make_integrator(cfg.integrator)
        self._boundary = make_boundary(cfg)
        self._monitor = StabilityMonitor(cfg.dt, cfg.thermostat, cfg.target_temperature)
        self._neighbors_built = False

        logger.info(
            "engine: N=%d box=%s dt=%g integrator=%s neighbors=%s interactions=[%s] %s",
            cfg.particle_count, cfg.box, cfg.dt, cfg.integrator, cfg.neighbor_strategy,
            ", ".join(a.name for a in self._accumulators),
            "periodic" if cfg.periodic else "escaping",
        )

    # ------------------------------------------------------------------
    # Accessors

    def get_state(self) -> SimulationState:
        return self.state

    def get_config(self) -> EngineConfig:
        return self.config

    @property
    def time(self) -> float:
        return self.state.time

    @property
    def neighbor_strategy(self) -> NeighborStrategy:
        return self._strategy

    @property
    def interactions(self) -> list[str]:
        """Names of the enabled interactions, in evaluation order."""
        return [a.name for a in self._accumulators]

    # ------------------------------------------------------------------
    # Seeding and restore

    def seed(self, buffers: SeedBuffers | None = None, **arrays) -> None:
        """
        Overwrite state buffers from explicit arrays.

        Accepts a SeedBuffers or the same fields as keyword arguments:
            engine.seed(positions=p, velocities=v, masses=m, charges=q)

        Raises:
            SeedError: On wrong lengths, non-finite values or non-positive
                masses. Nothing is written in that case.
        """
        if buffers is None:
            buffers = SeedBuffers(**arrays)
        elif arrays:
            raise TypeError("pass either a SeedBuffers or keyword arrays, not both")
        seed_state(self.state, buffers)
        self._neighbors_built = False
        self._monitor.reset()

    def seed_random(self, rng: np.random.Generator | int | None = None) -> None:
        """Seed random initial conditions (see particle_sim.seeding)."""
        from .seeding import random_seed_buffers

        if not isinstance(rng, np.random.Generator):
            rng = np.random.default_rng(rng)
        self.seed(random_seed_buffers(self.config, rng))

    def set_time(self, t: float) -> None:
        """Restore elapsed simulated time (e.g. after hydration)."""
        t = float(t)
        if not math.isfinite(t):
            raise ConfigurationError(f"time must be finite, got {t}")
        self.state.time = t

    def snapshot(self):
        """Capture an EngineSnapshot of the current state."""
        from .io.snapshot import snapshot

        return snapshot(self)

    @classmethod
    def hydrate(cls, snap, **kwargs) -> "SimulationEngine":
        """
        Build a new engine equivalent to the one snap was taken from.

        Extra keyword arguments (particle_filter, profiler) go to the constructor.

        Raises:
            SnapshotVersionError: If the snapshot version is not supported.
        """
        from .io.snapshot import hydrate

        return hydrate(snap, engine_cls=cls, **kwargs)

    # ------------------------------------------------------------------
    # Strategy switch

    def set_neighbor_strategy(self, strategy: NeighborStrategy | str) -> None:
        """
        Swap the neighbor strategy.

        The new strategy is fully built against the current positions before
        it replaces the old one, so the next force evaluation never sees a
        half-initialized pair source. A named built-in strategy is also
        recorded in the config (and therefore in snapshots).
        """
        if isinstance(strategy, str):
            strategy = make_neighbor_strategy(strategy)
        strategy.rebuild(self.state, self.config.cutoff)

        old = self._strategy.name
        self._strategy = strategy
        self._neighbors_built = True
        if strategy.name in NEIGHBOR_STRATEGIES:
            self.config = self.config.replace(neighbor_strategy=strategy.name)
        logger.info("neighbor strategy switched: %s -> %s", old, strategy.name)

    # ------------------------------------------------------------------
    # Stepping

    def _section(self, name: str):
        if self.profiler is None:
            return contextlib.nullcontext()
        return self.profiler.section(name)

    def _active_mask(self) -> np.ndarray | None:
        if self.particle_filter is None:
            return None
        mask = np.asarray(self.particle_filter(self.state), dtype=bool)
        if mask.shape != (self.state.n,):
            raise ConfigurationError(
                f"particle filter must return a mask of shape ({self.state.n},), got {mask.shape}")
        return mask

    def pairs(self) -> PairList:
        """Current interacting pairs (rebuilding the neighbor structure if needed)."""
        with self._section("neighbors"):
            if self._strategy.rebuild_every_step or not self._neighbors_built:
                self._strategy.rebuild(self.state, self.config.cutoff)
                self._neighbors_built = True
            return self._strategy.pairs(self.state, self.config.cutoff, self._active_mask())

    def _compute_forces(self, state: SimulationState) -> PairList:
        pairs = self.pairs()
        with self._section("forces"):
            state.zero_forces()
            for acc in self._accumulators:
                acc.accumulate(pairs, state, state.forces)
        return pairs

    def _check_masses(self) -> None:
        m = self.state.masses
        if np.any(~(m > 0.0)):
            bad = int(np.flatnonzero(~(m > 0.0))[0])
            raise ConfigurationError(
                f"particle {bad} has mass {m[bad]}; seed positive masses before stepping")

    def step(self) -> None:
        """Advance the simulation by one timestep dt."""
        self._check_masses()
        cfg = self.config
        self._compute_forces(self.state)
        with self._section("integrate"):
            self._integrator.step(self.state, cfg.dt, self._compute_forces)
        with self._section("boundary"):
            self._boundary.apply(self.state)
        if cfg.thermostat:
            rescale_velocities(self.state, cfg.target_temperature, cfg.kB)
        self.state.time += cfg.dt
        self.step_count += 1

    def run(self, steps: int) -> None:
        """Call step() the given number of times."""
        for _ in range(int(steps)):
            self.step()

    # ------------------------------------------------------------------
    # Observables

    def diagnostics(self) -> Diagnostics:
        """
        Energies, temperature, extremes and momentum at the current positions.

        Forces for max_force go to a scratch buffer; state.forces keeps
        whatever the last step left in it.
        """
        pairs = self.pairs()
        forces = np.zeros_like(self.state.forces)
        for acc in self._accumulators:
            acc.accumulate(pairs, self.state, forces)
        return compute_diagnostics(self.state, pairs, self._accumulators, self.config.kB, forces=forces)

    def force_contributions(self) -> dict[str, np.ndarray]:
        """
        Each enabled interaction's force on every particle, computed in isolation.

        Returns:
            Dict mapping interaction name to an (N, 3) force array. The shared
            force buffer is left untouched.
        """
        pairs = self.pairs()
        out = {}
        for acc in self._accumulators:
            buf = np.zeros_like(self.state.forces)
            acc.accumulate(pairs, self.state, buf)
            out[acc.name] = buf.reshape(-1, 3)
        return out

    def check_stability(self) -> StabilityResult | None:
        """Feed fresh diagnostics to the stability monitor."""
        return self._monitor.check(self.diagnostics())
