"""Frame timing and fixed physics steps."""
from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass
class FrameTimer:
    """High resolution timer based on :func:`time.perf_counter`."""

    last_time: float = field(default_factory=time.perf_counter)

    def tick(self) -> float:
        now = time.perf_counter()
        dt = now - self.last_time
        self.last_time = now
        return dt


@dataclass
class FixedStepAccumulator:
    """Collects frame time and hands it back as whole fixed steps.

    The unused remainder carries over to the next frame. When a frame needs
    more than ``max_substeps`` steps the backlog is dropped so that a slow
    frame cannot snowball into ever longer ones.
    """

    step: float
    max_substeps: int
    value: float = 0.0

    def accrue(self, delta: float) -> None:
        if delta > 0.0:
            self.value += delta

    def clear(self) -> None:
        self.value = 0.0

    def consume(self) -> int:
        if self.step <= 0.0:
            raise ValueError(f"Step size must be positive, got {self.step}")
        steps = int(self.value // self.step)
        if steps > self.max_substeps:
            self.value = 0.0
            return self.max_substeps
        self.value -= steps * self.step
        return steps

    @property
    def alpha(self) -> float:
        """Fraction of a step left in the accumulator."""
        return self.value / self.step if self.step > 0.0 else 0.0


__all__ = ["FixedStepAccumulator", "FrameTimer"]
