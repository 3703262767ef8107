"""Scene context tying the terrain, the physics world and the rover together."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import numpy as np

from .assets import AssetLoader
from .camera import CameraPose, follow_camera
from .config import CAMERA_CFG, PHYSICS_CFG, TERRAIN_CFG, CameraCfg, PhysicsCfg, TerrainCfg
from .logging_utils import RunLogger
from .model import (
    BodyPhase,
    BoxShape,
    ContactMaterial,
    Material,
    RigidBody,
    SphereShape,
    quaternion_from_euler,
)
from .physics import GravityIntegrator
from .random_source import RandomSource, SeededRandom
from .terrain import build_moon
from .timekeeping import FixedStepAccumulator
from .world import PhysicsWorld


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickOutcome:
    phase: BodyPhase
    camera: Optional[CameraPose]
    distance: Optional[float]
    steps: int


class MoonScene:
    """Owns everything that lives between scene construction and teardown.

    The rover starts out ``UNLOADED``. It becomes ``ACTIVE`` once, when its
    asset arrives through the loader, or ``LOAD_FAILED`` if the load fails.
    Until it is active every :meth:`tick` leaves the world untouched.
    """

    def __init__(
        self,
        terrain_cfg: TerrainCfg = TERRAIN_CFG,
        physics_cfg: PhysicsCfg = PHYSICS_CFG,
        camera_cfg: CameraCfg = CAMERA_CFG,
        *,
        rng: Optional[RandomSource] = None,
        loader: Optional[AssetLoader] = None,
        rover_asset: str | Path | None = None,
        run_logger: Optional[RunLogger] = None,
        start_position: Optional[np.ndarray] = None,
        start_velocity: Optional[np.ndarray] = None,
    ) -> None:
        self.terrain_cfg = terrain_cfg
        self.physics_cfg = physics_cfg
        self.camera_cfg = camera_cfg
        self.rng = rng if rng is not None else SeededRandom()
        self.loader = loader
        self.run_logger = run_logger
        self._start_position = (
            physics_cfg.rover_start_position if start_position is None else start_position
        )
        self._start_velocity = (
            physics_cfg.rover_start_velocity if start_velocity is None else start_velocity
        )

        self.moon = build_moon(self.rng, terrain_cfg)

        self.world = PhysicsWorld(physics_cfg)
        self.ground_material = Material("ground")
        self.rover_material = Material("rover")
        self.world.add_contact_material(
            ContactMaterial(
                self.ground_material,
                self.rover_material,
                friction=physics_cfg.friction,
                restitution=physics_cfg.restitution,
            )
        )
        self.moon_body = self.world.add_body(
            RigidBody(
                shape=SphereShape(terrain_cfg.radius),
                mass=0.0,
                material=self.ground_material,
                name="moon",
            )
        )
        self.integrator = GravityIntegrator(self.world, physics_cfg, camera_cfg)
        self.accumulator = FixedStepAccumulator(physics_cfg.dt, physics_cfg.max_substeps)

        self.phase = BodyPhase.UNLOADED
        self.rover: Optional[RigidBody] = None
        self.rover_vertices: Optional[np.ndarray] = None
        self.load_error: Optional[BaseException] = None
        self.camera: Optional[CameraPose] = None
        self._in_contact = False
        self._torn_down = False

        if self.run_logger is not None:
            self.run_logger.write_meta(self._meta())

        if loader is not None and rover_asset is not None:
            loader.load(rover_asset, self._on_rover_loaded, self._on_rover_failed)
        else:
            self._on_rover_loaded(None)

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    @property
    def distance(self) -> Optional[float]:
        if self.rover is None:
            return None
        return float(np.linalg.norm(self.rover.position))

    def _meta(self) -> dict:
        return {
            "gravity_strength": self.physics_cfg.gravity_strength,
            "dt": self.physics_cfg.dt,
            "real_time": self.physics_cfg.real_time,
            "moon_radius": self.terrain_cfg.radius,
            "crater_count": self.terrain_cfg.crater_count,
            "preserve_craters": self.terrain_cfg.preserve_craters,
                        "start_position": np.asarray(self._start_position, dtype=float).tolist(),
            "start_velocity": np.asarray(self._start_velocity, dtype=float).tolist(),
            "seed": getattr(self.rng, "seed", None),
        }

    def _on_rover_loaded(self, vertices: Any) -> None:
        if self.phase is not BodyPhase.UNLOADED or self._torn_down:
            return
        cfg = self.physics_cfg
        self.rover_vertices = None if vertices is None else np.asarray(vertices, dtype=float)
        self.rover = self.world.add_body(
            RigidBody(
                shape=BoxShape(cfg.rover_half_extents),
                mass=cfg.rover_mass,
                material=self.rover_material,
                name="rover",
                position=self._start_position,
                velocity=self._start_velocity,
                quaternion=quaternion_from_euler(0.0, cfg.rover_start_yaw, 0.0),
            )
        )
        self.phase = BodyPhase.ACTIVE
        self.camera = follow_camera(self.rover.position, self.camera_cfg)
        self._log_event("rover_loaded", "")

    def _on_rover_failed(self, error: BaseException) -> None:
        if self.phase is not BodyPhase.UNLOADED:
            return
        self.phase = BodyPhase.LOAD_FAILED
        self.load_error = error
        logger.error("Rover asset failed to load; simulation stays idle: %s", error)
        self._log_event("load_failed", str(error))

    def tick(self, frame_dt: float | None = None) -> TickOutcome:
        """Run the physics for one rendered frame."""

        if self._torn_down:
            raise RuntimeError("Cannot tick a scene after teardown")
        if self.loader is not None:
            self.loader.poll()
        if self.phase is not BodyPhase.ACTIVE or self.rover is None:
            return TickOutcome(self.phase, None, None, 0)

        if self.physics_cfg.real_time:
            self.accumulator.accrue(frame_dt or 0.0)
            steps = self.accumulator.consume()
        else:
            steps = 1

        for _ in range(steps):
            _, self.camera = self.integrator.step(self.rover, self.physics_cfg.dt)
            self._record_step()

        return TickOutcome(self.phase, self.camera, self.distance, steps)

    def _record_step(self) -> None:
        touching = any(c.body is self.rover for c in self.world.contacts)
        if touching and not self._in_contact:
            speed = max(c.impact_speed for c in self.world.contacts if c.body is self.rover)
            self._log_event("contact", f"impact_speed={speed:.4f}")
        self._in_contact = touching

        if self.run_logger is None or self.rover is None:
            return
        if self.world.step_count % max(1, self.physics_cfg.log_every_steps) != 0:
            return
        position = self.rover.position
        velocity = self.rover.velocity
        self.run_logger.log_ts(
            [
                self.world.time,
                float(position[0]),
                float(position[1]),
                float(position[2]),
                float(velocity[0]),
                float(velocity[1]),
                float(velocity[2]),
                float(np.linalg.norm(position)),
                float(np.linalg.norm(self.integrator.last_force)),
            ]
        )

    def _log_event(self, event_type: str, details: str) -> None:
        if self.run_logger is None or self.run_logger.closed:
            return
        distance = self.distance
        self.run_logger.log_event(
            [self.world.time, event_type, float("nan") if distance is None else distance, details]
        )

    def status_text(self) -> str:
        if self.phase is BodyPhase.LOAD_FAILED:
            return "Rover failed to load"
        if self.phase is BodyPhase.UNLOADED or self.distance is None:
            return "Loading rover..."
        return f"Distance from center: {self.distance:.2f} units"

    def teardown(self) -> None:
        """Release the loader, the world and the run log. Safe to call twice."""

        if self._torn_down:
            return
        if self.loader is not None:
            self.loader.shutdown()
        self._log_event("teardown", "")
        self.world.clear()
        if self.run_logger is not None:
            self.run_logger.close()
        self.rover = None
        self._torn_down = True
        logger.info("Scene torn down after %d physics steps", self.world.step_count)


__all__ = ["MoonScene", "TickOutcome"]
