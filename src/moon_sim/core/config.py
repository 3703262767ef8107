"""Configuration dataclasses for the moon simulation."""
from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np


@dataclass(frozen=True)
class TerrainCfg:
    radius: float = 5.0
    width_segments: int = 128
    height_segments: int = 128
    crater_count: int = 15
    crater_depth: float = 0.2
    crater_size_min: float = 1.0
    crater_size_max: float = 3.0
    noise_amplitude: float = 0.1
    # False reproduces the legacy surface where noise overwrites crater depth.
    preserve_craters: bool = True
    weld_seams: bool = True


@dataclass(frozen=True)
class PhysicsCfg:
    gravity_strength: float = 10.0
    dt: float = 1.0 / 60.0
    max_substeps: int = 5
    real_time: bool = False
    distance_epsilon: float = 1e-9
    rover_mass: float = 1.0
    rover_half_extents: tuple[float, float, float] = (0.1, 0.1, 0.1)
    rover_start_position: np.ndarray = field(
        default_factory=lambda: np.array([0.0, 5.5, 0.0], dtype=float)
    )
    rover_start_velocity: np.ndarray = field(
        default_factory=lambda: np.zeros(3, dtype=float)
    )
    rover_start_yaw: float = math.pi / 2.0
    friction: float = 0.5
    restitution: float = 0.3
    default_friction: float = 0.3
    default_restitution: float = 0.0
    allow_sleep: bool = True
    sleep_speed_limit: float = 0.1
    sleep_time_limit: float = 1.0
    log_every_steps: int = 10


@dataclass(frozen=True)
class CameraCfg:
    anchor: tuple[float, float, float] = (5.0, 6.0, 5.0)
    height: float = 0.5
    distance: float = 0.5
    look_target: tuple[float, float, float] = (-5.0, 0.0, -5.0)
    fov_deg: float = 75.0
    near: float = 0.1


@dataclass(frozen=True)
class RenderCfg:
    width: int = 1000
    height: int = 800
    fps: int = 60
    background_color: tuple[int, int, int] = (0, 0, 0)
    moon_color: tuple[int, int, int] = (136, 136, 136)
    moon_shadow_color: tuple[int, int, int] = (40, 40, 44)
    rover_color: tuple[int, int, int] = (230, 190, 90)
    rover_pixel_radius: int = 5
    hud_text_color: tuple[int, int, int] = (255, 255, 255)
    hud_font_size: int = 16
    status_position: tuple[int, int] = (20, 20)
    light_direction: tuple[float, float, float] = (-5.0, 3.0, 5.0)
    ambient_light: float = 0.25
    point_stride: int = 3


TERRAIN_CFG = TerrainCfg()
PHYSICS_CFG = PhysicsCfg()
CAMERA_CFG = CameraCfg()
RENDER_CFG = RenderCfg()


__all__ = [
    "CAMERA_CFG",
    "PHYSICS_CFG",
    "RENDER_CFG",
    "TERRAIN_CFG",
    "CameraCfg",
    "PhysicsCfg",
    "RenderCfg",
    "TerrainCfg",
]
