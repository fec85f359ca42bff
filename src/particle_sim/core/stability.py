# MIT License (see LICENSE)
"""
Tiered numerical stability detection.

Feed StabilityMonitor.check() fresh Diagnostics after each step (or every
few steps). It tracks consecutive violations and reports:

- "critical": NaN or Inf in any diagnostic. Reported immediately.
- "severe": max speed > 500 or max force > 5000 for 3 consecutive checks.
- "warning": with the thermostat off, total energy changing by more than
  5% between checks for 20 consecutive checks; with the thermostat on,
  temperature above 5x the target for 20 consecutive checks.

A check that finds nothing returns None.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field

from .diagnostics import Diagnostics

logger = logging.getLogger(__name__)

SEVERE_SPEED = 500.0
SEVERE_FORCE = 5000.0
WARNING_ENERGY_DRIFT = 0.05
WARNING_TEMPERATURE_RATIO = 5.0
SEVERE_CONSECUTIVE = 3
WARNING_CONSECUTIVE = 20


@dataclass
class StabilityResult:
    """
    Attributes:
        level: "warning", "severe" or "critical".
        message: Human-readable description.
        diagnostics: The diagnostics that triggered the report.
        suggestions: Parameter changes likely to help.
    """
    level: str
    message: str
    diagnostics: Diagnostics
    suggestions: list[str] = field(default_factory=list)


class StabilityMonitor:
    """
    Stateful monitor counting consecutive violations.

    Args:
        dt: Timestep, quoted in suggestions.
        thermostat: Whether the thermostat is on (selects the warning rule).
        target_temperature: Thermostat set point.
    """

    def __init__(self, dt: float, thermostat: bool = False, target_temperature: float = 100.0) -> None:
        self.dt = float(dt)
        self.thermostat = bool(thermostat)
        self.target_temperature = float(target_temperature)
        self.reset()

    def reset(self) -> None:
        """Forget all counters (call after a reset or a config change)."""
        self.severe_count = 0
        self.warning_count = 0
        self.last_energy: float | None = None

    def check(self, diag: Diagnostics) -> StabilityResult | None:
        if not diag.is_finite():
            result = StabilityResult(
                level="critical",
                message="simulation diverged (NaN/Inf detected)",
                diagnostics=diag,
                suggestions=[
                    "reduce the particle count",
                    "increase delta (softer Lennard-Jones core)",
                    "decrease epsilon, K or G",
                    f"reduce dt (current: {self.dt})",
                ],
            )
            logger.warning(result.message)
            return result

        result = None
        if diag.max_speed > SEVERE_SPEED or diag.max_force > SEVERE_FORCE:
            self.severe_count += 1
            if self.severe_count >= SEVERE_CONSECUTIVE:
                result = self._severe(diag)
        else:
            self.severe_count = 0

        warning = self._warning(diag)
        if warning is not None:
            self.warning_count += 1
            if result is None and self.warning_count >= WARNING_CONSECUTIVE:
                result = warning
        else:
            self.warning_count = 0

        self.last_energy = diag.total_energy
        if result is not None:
            logger.warning("stability %s: %s", result.level, result.message)
        return result

    def _severe(self, diag: Diagnostics) -> StabilityResult:
        speed = diag.max_speed > SEVERE_SPEED
        force = diag.max_force > SEVERE_FORCE
        if speed and force:
            what = "particles moving too fast and forces too large"
        elif speed:
            what = "particles moving unrealistically fast"
        else:
            what = "forces extremely large (close encounters)"
        return StabilityResult(
            level="severe",
            message=f"extreme values detected: {what}",
            diagnostics=diag,
            suggestions=[
                f"reduce dt (current: {self.dt}, try: {self.dt * 0.5:.4g})",
                "use fewer particles or a larger box",
                "weaken epsilon, K or G",
                "increase delta (softer Lennard-Jones core)",
            ],
        )

    def _warning(self, diag: Diagnostics) -> StabilityResult | None:
        if not self.thermostat:
            if self.last_energy is None:
                return None
            rel = abs(diag.total_energy - self.last_energy) / abs(self.last_energy or 1.0)
            if rel > WARNING_ENERGY_DRIFT:
                return StabilityResult(
                    level="warning",
                    message=f"energy drift {100.0 * rel:.1f}% per check",
                    diagnostics=diag,
                    suggestions=[
                        f"reduce dt (current: {self.dt})",
                        "use the velocityVerlet integrator",
                        "enable the thermostat",
                    ],
                )
            return None

        ratio = diag.temperature / self.target_temperature
        if ratio > WARNING_TEMPERATURE_RATIO:
            return StabilityResult(
                level="warning",
                message=f"temperature {ratio:.1f}x target (thermostat unable to cool)",
                diagnostics=diag,
                suggestions=[
                    "reduce epsilon, K or G",
                    f"lower the target temperature (current: {self.target_temperature})",
                ],
            )
        return None
