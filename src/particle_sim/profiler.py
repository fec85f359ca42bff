# MIT License (see LICENSE)
"""
Lightweight per-phase timing.

The engine times its step phases (neighbors, forces, integrate, boundary)
when a Profiler is attached.

Example:
    profiler = Profiler()
    engine = SimulationEngine(config, profiler=profiler)
    for _ in range(100):
        engine.step()
    print(profiler.stats.summary())
"""
from __future__ import annotations
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator


@dataclass
class ProfileStats:
    """Timing samples (seconds) per named section."""
    samples: dict[str, list[float]] = field(default_factory=dict)

    def add(self, name: str, dt: float) -> None:
        self.samples.setdefault(name, []).append(dt)

    def total(self, name: str) -> float:
        """Summed time for a section in seconds (0 if never recorded)."""
        return float(sum(self.samples.get(name, ())))

    def summary(self) -> dict[str, dict[str, float]]:
        """
        Per-section statistics.

        Returns:
            Dict mapping section name to {'n', 'mean_ms', 'max_ms', 'total_ms'}.
        """
        out = {}
        for name, times in self.samples.items():
            total_ms = 1e3 * self.total(name)
            out[name] = {
                "n": len(times),
                "mean_ms": total_ms / len(times),
                "max_ms": 1e3 * max(times),
                "total_ms": total_ms,
            }
        return out


class Profiler:
    """Context-manager based section timer."""

    def __init__(self) -> None:
        self.stats = ProfileStats()

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Time the enclosed block under name (recorded even if it raises)."""
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self.stats.add(name, time.perf_counter() - t0)

    def reset(self) -> None:
        self.stats = ProfileStats()
