"""Preset starting conditions for the rover."""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class RoverScenario:
    key: str
    name: str
    position: tuple[float, float, float]
    velocity: tuple[float, float, float]
    description: str

    def position_vector(self) -> np.ndarray:
        return np.array(self.position, dtype=float)

    def velocity_vector(self) -> np.ndarray:
        return np.array(self.velocity, dtype=float)


SCENARIO_DEFINITIONS: tuple[RoverScenario, ...] = (
    RoverScenario(
        key="default",
        name="Drop",
        position=(0.0, 5.5, 0.0),
        velocity=(0.0, 0.0, 0.0),
        description="Rover released at rest half a unit above the surface.",
    ),
    RoverScenario(
        key="high_drop",
        name="High drop",
        position=(0.0, 8.0, 0.0),
        velocity=(0.0, 0.0, 0.0),
        description="Longer fall that ends in a few visible bounces.",
    ),
    RoverScenario(
        key="skim",
        name="Skim",
        position=(0.0, 5.5, 0.0),
        velocity=(1.0, 0.0, 0.0),
        description="Sideways launch that arcs around the moon before landing.",
    ),
)

SCENARIOS: dict[str, RoverScenario] = {s.key: s for s in SCENARIO_DEFINITIONS}
DEFAULT_SCENARIO_KEY = SCENARIO_DEFINITIONS[0].key


__all__ = [
    "DEFAULT_SCENARIO_KEY",
    "SCENARIO_DEFINITIONS",
    "SCENARIOS",
    "RoverScenario",
]
