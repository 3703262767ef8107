"""Central gravity for bodies orbiting or resting on the moon."""
from __future__ import annotations

from typing import Optional

import numpy as np

from .camera import CameraPose, follow_camera
from .config import CAMERA_CFG, PHYSICS_CFG, CameraCfg, PhysicsCfg
from .model import RigidBody
from .world import PhysicsWorld


def central_gravity(
    position: np.ndarray,
    strength: float = PHYSICS_CFG.gravity_strength,
    epsilon: float = PHYSICS_CFG.distance_epsilon,
) -> tuple[np.ndarray, float]:
    """Return ``(force, distance)`` for an attractor at the origin.

    The force has magnitude ``strength / distance**2`` and points at the
    origin. The body mass is not part of the law. At the origin itself the
    direction is undefined and the force is zero.
    """

    direction = -np.asarray(position, dtype=float)
    distance = float(np.linalg.norm(direction))
    if distance <= epsilon:
        return np.zeros(3, dtype=float), distance
    direction /= distance
    return direction * (strength / (distance * distance)), distance


class GravityIntegrator:
    """Applies central gravity to one body and advances the world."""

    def __init__(
        self,
        world: PhysicsWorld,
        cfg: PhysicsCfg = PHYSICS_CFG,
        camera_cfg: CameraCfg = CAMERA_CFG,
    ) -> None:
        self.world = world
        self.cfg = cfg
        self.camera_cfg = camera_cfg
        self.last_force: np.ndarray = np.zeros(3, dtype=float)
        self.last_distance: float | None = None

    def step(
        self, body: Optional[RigidBody], dt: float | None = None
    ) -> tuple[Optional[RigidBody], Optional[CameraPose]]:
        """Advance one tick. ``body=None`` (not loaded yet) does nothing."""

        if body is None:
            return None, None
        dt = self.cfg.dt if dt is None else dt

        force, distance = central_gravity(
            body.position, self.cfg.gravity_strength, self.cfg.distance_epsilon
        )
        self.world.apply_force(body, force, body.position)
        self.world.step(dt)

        self.last_force = force
        self.last_distance = distance
        return body, follow_camera(body.position, self.camera_cfg)


__all__ = ["GravityIntegrator", "central_gravity"]
