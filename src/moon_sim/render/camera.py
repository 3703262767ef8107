from __future__ import annotations

import math

import numpy as np

from moon_sim.core.camera import CameraPose


WORLD_UP = np.array([0.0, 1.0, 0.0])


def look_at_basis(pose: CameraPose) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Right, up and forward unit vectors for a camera looking at its target."""

    forward = np.asarray(pose.target, dtype=float) - np.asarray(pose.position, dtype=float)
    length = float(np.linalg.norm(forward))
    forward = forward / length if length > 0.0 else np.array([0.0, 0.0, -1.0])
    right = np.cross(forward, WORLD_UP)
    if float(np.linalg.norm(right)) < 1e-9:
        right = np.array([1.0, 0.0, 0.0])
    right = right / np.linalg.norm(right)
    up = np.cross(right, forward)
    return right, up, forward


class Camera:
    """Perspective projection of world points onto the window."""

    def __init__(self, size: tuple[int, int], fov_deg: float, *, near: float = 0.1) -> None:
        self._size = size
        self._fov_deg = fov_deg
        self._near = near
        self._pose = CameraPose(
            position=np.array([0.0, 0.0, 10.0]), target=np.zeros(3, dtype=float)
        )

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    def update_size(self, size: tuple[int, int]) -> None:
        self._size = size

    @property
    def pose(self) -> CameraPose:
        return self._pose

    def set_pose(self, pose: CameraPose) -> None:
        self._pose = pose

    @property
    def focal_length(self) -> float:
        return (self._size[1] / 2.0) / math.tan(math.radians(self._fov_deg) / 2.0)

    def project(self, points: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return pixel coordinates, depths and a mask of points in front of the camera."""

        points = np.atleast_2d(np.asarray(points, dtype=float))
        right, up, forward = look_at_basis(self._pose)
        relative = points - self._pose.position
        x = relative @ right
        y = relative @ up
        depth = relative @ forward
        visible = depth > self._near
        safe_depth = np.where(visible, depth, 1.0)

        width, height = self._size
        focal = self.focal_length
        sx = width / 2.0 + x * focal / safe_depth
        sy = height / 2.0 - y * focal / safe_depth
        pixels = np.stack((sx, sy), axis=-1).round().astype(int)
        return pixels, depth, visible

    def world_to_screen(self, point: np.ndarray) -> tuple[int, int] | None:
        pixels, _, visible = self.project(point)
        if not visible[0]:
            return None
        return int(pixels[0, 0]), int(pixels[0, 1])
