"""Minimal rigid-body world: force accumulation, integration and contacts."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from .config import PHYSICS_CFG, PhysicsCfg
from .model import (
    BoxShape,
    ContactMaterial,
    Material,
    RigidBody,
    SleepState,
    SphereShape,
    rotation_matrix,
)


@dataclass
class Contact:
    body: RigidBody
    other: RigidBody
    normal: np.ndarray
    depth: float
    impact_speed: float


def _quaternion_derivative(angular_velocity: np.ndarray, q: np.ndarray) -> np.ndarray:
    ax, ay, az = angular_velocity
    bx, by, bz, bw = q
    return np.array(
        [
            ax * bw + ay * bz - az * by,
            ay * bw + az * bx - ax * bz,
            az * bw + ax * by - ay * bx,
            -ax * bx - ay * by - az * bz,
        ],
        dtype=float,
    )


def _sphere_contact(body: RigidBody, sphere: RigidBody) -> Optional[tuple[np.ndarray, float]]:
    """Contact normal (pointing away from ``sphere``) and penetration depth."""

    radius = sphere.shape.radius
    offset = body.position - sphere.position
    centre_distance = float(np.linalg.norm(offset))

    if isinstance(body.shape, SphereShape):
        if centre_distance <= 0.0:
            return None
        depth = radius + body.shape.radius - centre_distance
        return offset / centre_distance, depth

    rotation = rotation_matrix(body.quaternion)
    half = np.asarray(body.shape.half_extents, dtype=float)
    local_centre = rotation.T @ (sphere.position - body.position)
    closest = np.clip(local_centre, -half, half)
    gap = local_centre - closest
    gap_length = float(np.linalg.norm(gap))
    if gap_length > 0.0:
        normal = -(rotation @ gap) / gap_length
        return normal, radius - gap_length

    # Sphere centre inside the box: push out along the centre line.
    if centre_distance <= 0.0:
        return None
    depth = radius + body.shape.bounding_radius - centre_distance
    return offset / centre_distance, depth


class PhysicsWorld:
    """Holds bodies and advances them with semi-implicit Euler steps."""

    def __init__(self, cfg: PhysicsCfg = PHYSICS_CFG) -> None:
        self.cfg = cfg
        self._bodies: list[RigidBody] = []
        self._contact_materials: list[ContactMaterial] = []
        self.contacts: list[Contact] = []
        self.time = 0.0
        self.step_count = 0

    @property
    def bodies(self) -> tuple[RigidBody, ...]:
        return tuple(self._bodies)

    def add_body(self, body: RigidBody) -> RigidBody:
        if body not in self._bodies:
            self._bodies.append(body)
        return body

    def add_bodies(self, bodies: Iterable[RigidBody]) -> None:
        for body in bodies:
            self.add_body(body)

    def remove_body(self, body: RigidBody) -> None:
        if body in self._bodies:
            self._bodies.remove(body)

    def add_contact_material(self, contact_material: ContactMaterial) -> None:
        self._contact_materials.append(contact_material)

    def contact_material(
        self, first: Material | None, second: Material | None
    ) -> tuple[float, float]:
        """Return ``(friction, restitution)`` for a pair of materials."""

        for contact_material in self._contact_materials:
            if contact_material.matches(first, second):
                return contact_material.friction, contact_material.restitution
        return self.cfg.default_friction, self.cfg.default_restitution

    def apply_force(
        self,
        body: RigidBody,
        force: np.ndarray,
        point: Optional[np.ndarray] = None,
    ) -> None:
        """Accumulate ``force`` for the next step, acting at world ``point``."""

        if body.is_static:
            return
        force = np.asarray(force, dtype=float)
        if body.sleep_state is SleepState.SLEEPING and np.any(force != 0.0):
            body.wake_up()
        body.force += force
        if point is not None:
            lever = np.asarray(point, dtype=float) - body.position
            body.torque += np.cross(lever, force)

    def step(self, dt: float) -> None:
        if dt <= 0.0:
            raise ValueError(f"Time step must be positive, got {dt}")

        for body in self._bodies:
            if body.is_static or body.sleep_state is SleepState.SLEEPING:
                continue
            self._integrate(body, dt)

        self.contacts = self._resolve_contacts()
        self.time += dt
        self.step_count += 1

        for body in self._bodies:
            if self.cfg.allow_sleep and not body.is_static:
                self._sleep_tick(body)
            body.force[:] = 0.0
            body.torque[:] = 0.0

    def clear(self) -> None:
        self._bodies.clear()
        self._contact_materials.clear()
        self.contacts = []

    def _integrate(self, body: RigidBody, dt: float) -> None:
        body.velocity += body.force * body.inv_mass * dt
        rotation = rotation_matrix(body.quaternion)
        inv_inertia_world = rotation @ np.diag(body.inv_inertia) @ rotation.T
        body.angular_velocity += inv_inertia_world @ body.torque * dt
        body.position += body.velocity * dt

        q = body.quaternion + 0.5 * dt * _quaternion_derivative(
            body.angular_velocity, body.quaternion
        )
        body.quaternion = q / np.linalg.norm(q)

    def _resolve_contacts(self) -> list[Contact]:
        contacts: list[Contact] = []
        grounds = [
            b for b in self._bodies if b.is_static and isinstance(b.shape, SphereShape)
        ]
        for body in self._bodies:
            if body.is_static or body.sleep_state is SleepState.SLEEPING:
                continue
            if not isinstance(body.shape, (SphereShape, BoxShape)):
                continue
            for ground in grounds:
                hit = _sphere_contact(body, ground)
                if hit is None:
                    continue
                normal, depth = hit
                if depth <= 0.0:
                    continue
                impact_speed = self._respond(body, ground, normal, depth)
                contacts.append(Contact(body, ground, normal, depth, impact_speed))
        return contacts

    def _respond(
        self, body: RigidBody, ground: RigidBody, normal: np.ndarray, depth: float
    ) -> float:
        friction, restitution = self.contact_material(body.material, ground.material)
        body.position += normal * depth

        normal_speed = float(np.dot(body.velocity, normal))
        if normal_speed >= 0.0:
            return 0.0

        impulse = -(1.0 + restitution) * normal_speed
        body.velocity += normal * impulse

        tangential = body.velocity - np.dot(body.velocity, normal) * normal
        tangential_speed = float(np.linalg.norm(tangential))
        max_friction = friction * impulse
        if tangential_speed <= max_friction:
            body.velocity -= tangential
        elif tangential_speed > 0.0:
            body.velocity -= tangential / tangential_speed * max_friction
        return -normal_speed

    def _sleep_tick(self, body: RigidBody) -> None:
        speed_sq = float(np.dot(body.velocity, body.velocity))
        speed_sq += float(np.dot(body.angular_velocity, body.angular_velocity))
        limit_sq = self.cfg.sleep_speed_limit ** 2
        if body.sleep_state is SleepState.AWAKE and speed_sq < limit_sq:
            body.sleep_state = SleepState.SLEEPY
            body.sleepy_since = self.time
        elif body.sleep_state is SleepState.SLEEPY and speed_sq > limit_sq:
            body.wake_up()
        elif (
            body.sleep_state is SleepState.SLEEPY
            and self.time - body.sleepy_since > self.cfg.sleep_time_limit
        ):
            body.sleep_state = SleepState.SLEEPING
            body.velocity[:] = 0.0
            body.angular_velocity[:] = 0.0


__all__ = ["Contact", "PhysicsWorld"]
