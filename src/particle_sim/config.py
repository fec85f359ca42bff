# MIT License (see LICENSE)
"""
Immutable engine configuration.

EngineConfig is created once per engine. It is never mutated in place: a
"live update" means building a new value with replace(), constructing a new
engine from it and hydrating that engine from a snapshot of the old one.

Free-text strategy choices (integrator, neighbor strategy) are canonicalized
case-insensitively and fall back to a documented default instead of failing.
Structural fields (particle count, box, timestep, constants) are validated
and raise ConfigurationError.
"""
from __future__ import annotations
import dataclasses
import logging
import math
import numbers
from dataclasses import dataclass
from typing import Any

from .constants import (
    G_DEFAULT,
    K_DEFAULT,
    EPSILON_DEFAULT,
    DELTA_DEFAULT,
    KB_DEFAULT,
    GRAVITY_SOFTENING_FACTOR,
    COULOMB_SOFTENING_FACTOR,
    LJ_SOFTENING_FACTOR,
)
from .errors import ConfigurationError
from .util import canonicalize_option

logger = logging.getLogger(__name__)

INTEGRATORS = ("velocityVerlet", "euler")
NEIGHBOR_STRATEGIES = ("cell", "naive")

DEFAULT_INTEGRATOR = "velocityVerlet"
DEFAULT_NEIGHBOR_STRATEGY = "cell"

_FLOAT_FIELDS = (
    "dt", "cutoff", "G", "K", "epsilon", "delta", "kB", "sun_mass", "escape_speed",
    "gravity_softening", "coulomb_softening", "lj_softening", "target_temperature",
)
_BOOL_FIELDS = (
    "gravity", "lennard_jones", "coulomb", "periodic", "make_sun", "circular_orbits", "thermostat",
)


def canonicalize_integrator(raw) -> str:
    """Return 'velocityVerlet' or 'euler'; anything else maps to 'velocityVerlet'."""
    return canonicalize_option(raw, INTEGRATORS, DEFAULT_INTEGRATOR)


def canonicalize_neighbor_strategy(raw) -> str:
    """Return 'cell' or 'naive'; anything else maps to 'cell'."""
    return canonicalize_option(raw, NEIGHBOR_STRATEGIES, DEFAULT_NEIGHBOR_STRATEGY)


@dataclass(frozen=True)
class EngineConfig:
    """
    Per-run engine configuration.

    Attributes:
        particle_count: Number of particles N (> 0). Fixed for the engine's lifetime.
        box: Half extents (hx, hy, hz) of the simulation box; coordinates live in [-h, h].
        dt: Integration timestep.
        cutoff: Pair interaction cutoff radius. Also the cell size of the cell strategy.
        G: Gravitational constant.
        K: Coulomb constant.
        epsilon: Lennard-Jones well depth.
        delta: Lennard-Jones length scale (sigma).
        kB: Boltzmann-like constant for the temperature diagnostic.
        gravity, lennard_jones, coulomb: Interaction toggles.
        periodic: Wrap positions across box faces; otherwise flag escaping particles.
        integrator: "velocityVerlet" or "euler" (canonicalized).
        neighbor_strategy: "cell" or "naive" (canonicalized).
        sun_mass: Mass of the optional central body.
        make_sun: Seed a central body at the origin (index 0).
        circular_orbits: Seed the other particles on circular orbits around the sun.
        escape_speed: Speed above which a particle near a box face counts as escaped.
        gravity_softening, coulomb_softening, lj_softening: Softening factors
            (0 disables softening for that interaction).
        thermostat: Rescale velocities toward target_temperature after each step.
        target_temperature: Thermostat set point.
    """
    particle_count: int
    box: tuple[float, float, float] = (5.0, 5.0, 5.0)
    dt: float = 0.01
    cutoff: float = 10.0
    G: float = G_DEFAULT
    K: float = K_DEFAULT
    epsilon: float = EPSILON_DEFAULT
    delta: float = DELTA_DEFAULT
    kB: float = KB_DEFAULT
    gravity: bool = True
    lennard_jones: bool = True
    coulomb: bool = True
    periodic: bool = True
    integrator: str = DEFAULT_INTEGRATOR
    neighbor_strategy: str = DEFAULT_NEIGHBOR_STRATEGY
    sun_mass: float = 500.0
    make_sun: bool = True
    circular_orbits: bool = True
    escape_speed: float = 10.0
    gravity_softening: float = GRAVITY_SOFTENING_FACTOR
    coulomb_softening: float = COULOMB_SOFTENING_FACTOR
    lj_softening: float = LJ_SOFTENING_FACTOR
    thermostat: bool = False
    target_temperature: float = 100.0

    def __post_init__(self) -> None:
        """Canonicalize option strings and the box, validate, then coerce scalars to Python types."""
        object.__setattr__(self, "integrator", canonicalize_integrator(self.integrator))
        object.__setattr__(self, "neighbor_strategy", canonicalize_neighbor_strategy(self.neighbor_strategy))
        try:
            box = tuple(float(v) for v in self.box)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"box must be three numbers, got {self.box!r}") from exc
        object.__setattr__(self, "box", box)
        self._validate()
        self._normalize()

    def _validate(self) -> None:
        n = self.particle_count
        if isinstance(n, bool) or not isinstance(n, numbers.Integral) or n <= 0:
            raise ConfigurationError(f"particle_count must be a positive integer, got {n!r}")
        if len(self.box) != 3:
            raise ConfigurationError(f"box must have three half extents, got {len(self.box)}")
        for axis, h in zip("xyz", self.box):
            if not math.isfinite(h) or h <= 0:
                raise ConfigurationError(f"box half extent {axis} must be positive and finite, got {h}")

        positive = {
            "dt": self.dt,
            "cutoff": self.cutoff,
            "delta": self.delta,
            "kB": self.kB,
            "escape_speed": self.escape_speed,
            "target_temperature": self.target_temperature,
        }
        non_negative = {
            "G": self.G,
            "K": self.K,
            "epsilon": self.epsilon,
            "gravity_softening": self.gravity_softening,
            "coulomb_softening": self.coulomb_softening,
            "lj_softening": self.lj_softening,
        }
        for name, value in positive.items():
            if not _finite_number(value) or value <= 0:
                raise ConfigurationError(f"{name} must be positive and finite, got {value!r}")
        for name, value in non_negative.items():
            if not _finite_number(value) or value < 0:
                raise ConfigurationError(f"{name} must be non-negative and finite, got {value!r}")
        if self.make_sun and (not _finite_number(self.sun_mass) or self.sun_mass <= 0):
            raise ConfigurationError(f"sun_mass must be positive when make_sun is set, got {self.sun_mass!r}")

    def _normalize(self) -> None:
        # numpy scalars pass validation but are not JSON serializable.
        object.__setattr__(self, "particle_count", int(self.particle_count))
        for name in _FLOAT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, numbers.Real):
                object.__setattr__(self, name, float(value))
        for name in _BOOL_FIELDS:
            object.__setattr__(self, name, bool(getattr(self, name)))

    def replace(self, **changes: Any) -> "EngineConfig":
        """Return a new, re-validated config with the given fields changed."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible dict (box as a list)."""
        data = dataclasses.asdict(self)
        data["box"] = list(self.box)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineConfig":
        """
        Build a config from a dict produced by to_dict().

        Unknown keys are ignored so newer writers stay readable; missing
        optional keys take their defaults.

        Raises:
            ConfigurationError: If particle_count is missing or any value is invalid.
        """
        if "particle_count" not in data:
            raise ConfigurationError("config is missing required 'particle_count'")
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.debug("ignoring unknown config keys: %s", ", ".join(unknown))
        kwargs = {k: v for k, v in data.items() if k in known}
        if "box" in kwargs:
            kwargs["box"] = tuple(kwargs["box"])
        return cls(**kwargs)


def _finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)
