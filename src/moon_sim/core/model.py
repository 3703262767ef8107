"""Data models for rigid bodies and their collision shapes."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Union

import numpy as np


@dataclass(frozen=True)
class SphereShape:
    radius: float

    def inertia(self, mass: float) -> np.ndarray:
        value = 0.4 * mass * self.radius * self.radius
        return np.full(3, value, dtype=float)

    @property
    def bounding_radius(self) -> float:
        return self.radius


@dataclass(frozen=True)
class BoxShape:
    half_extents: tuple[float, float, float]

    def inertia(self, mass: float) -> np.ndarray:
        hx, hy, hz = self.half_extents
        return np.array(
            [
                mass / 3.0 * (hy * hy + hz * hz),
                mass / 3.0 * (hx * hx + hz * hz),
                mass / 3.0 * (hx * hx + hy * hy),
            ],
            dtype=float,
        )

    @property
    def bounding_radius(self) -> float:
        return float(np.linalg.norm(self.half_extents))


Shape = Union[SphereShape, BoxShape]


@dataclass(frozen=True)
class Material:
    name: str


@dataclass(frozen=True)
class ContactMaterial:
    """Friction and restitution used when two materials touch."""

    a: Material
    b: Material
    friction: float
    restitution: float

    def matches(self, first: Material | None, second: Material | None) -> bool:
        return {first, second} == {self.a, self.b}


class SleepState(Enum):
    AWAKE = auto()
    SLEEPY = auto()
    SLEEPING = auto()


class BodyPhase(Enum):
    """Lifecycle of the rover body inside a scene."""

    UNLOADED = auto()
    ACTIVE = auto()
    LOAD_FAILED = auto()


def quaternion_from_euler(x: float, y: float, z: float) -> np.ndarray:
    """Quaternion ``(x, y, z, w)`` for intrinsic XYZ Euler angles."""

    c1, s1 = math.cos(x / 2.0), math.sin(x / 2.0)
    c2, s2 = math.cos(y / 2.0), math.sin(y / 2.0)
    c3, s3 = math.cos(z / 2.0), math.sin(z / 2.0)
    return np.array(
        [
            s1 * c2 * c3 + c1 * s2 * s3,
            c1 * s2 * c3 - s1 * c2 * s3,
            c1 * c2 * s3 + s1 * s2 * c3,
            c1 * c2 * c3 - s1 * s2 * s3,
        ],
        dtype=float,
    )


def rotation_matrix(quaternion: np.ndarray) -> np.ndarray:
    x, y, z, w = quaternion
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
            [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
            [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
        ],
        dtype=float,
    )


@dataclass(eq=False)
class RigidBody:
    """Mutable state of one simulated body. ``mass == 0`` means static."""

    shape: Shape
    mass: float = 0.0
    material: Material | None = None
    name: str = ""
    position: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=float))
    quaternion: np.ndarray = field(
        default_factory=lambda: np.array([0.0, 0.0, 0.0, 1.0], dtype=float)
    )
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=float))
    angular_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=float))
    force: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=float))
    torque: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=float))
    sleep_state: SleepState = SleepState.AWAKE
    sleepy_since: float = 0.0

    def __post_init__(self) -> None:
        if self.mass < 0.0:
            raise ValueError(f"Body mass must not be negative, got {self.mass}")
        self.position = np.asarray(self.position, dtype=float).copy()
        self.quaternion = np.asarray(self.quaternion, dtype=float).copy()
        self.velocity = np.asarray(self.velocity, dtype=float).copy()
        self.angular_velocity = np.asarray(self.angular_velocity, dtype=float).copy()

    @property
    def is_static(self) -> bool:
        return self.mass == 0.0

    @property
    def inv_mass(self) -> float:
        return 0.0 if self.is_static else 1.0 / self.mass

    @property
    def inv_inertia(self) -> np.ndarray:
        if self.is_static:
            return np.zeros(3, dtype=float)
        inertia = self.shape.inertia(self.mass)
        return np.where(inertia > 0.0, 1.0 / np.where(inertia > 0.0, inertia, 1.0), 0.0)

    def wake_up(self) -> None:
        self.sleep_state = SleepState.AWAKE

    def copy(self) -> "RigidBody":
        return RigidBody(
            shape=self.shape,
            mass=self.mass,
            material=self.material,
            name=self.name,
            position=self.position.copy(),
            quaternion=self.quaternion.copy(),
            velocity=self.velocity.copy(),
            angular_velocity=self.angular_velocity.copy(),
            force=self.force.copy(),
            torque=self.torque.copy(),
            sleep_state=self.sleep_state,
            sleepy_since=self.sleepy_since,
        )


__all__ = [
    "BodyPhase",
    "BoxShape",
    "ContactMaterial",
    "Material",
    "RigidBody",
    "Shape",
    "SleepState",
    "SphereShape",
    "quaternion_from_euler",
    "rotation_matrix",
]
