"""Vertex buffers, UV sphere construction and normal recomputation."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np


WELD_DECIMALS = 9


class MeshValidationError(ValueError):
    """Raised when vertex data cannot be interpreted as xyz triples."""


@dataclass
class Mesh:
    """Mutable vertex buffer with optional triangle indices and normals."""

    positions: np.ndarray
    faces: Optional[np.ndarray] = None
    normals: Optional[np.ndarray] = None

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    def flat_positions(self) -> np.ndarray:
        return self.positions.reshape(-1)


def as_positions(data: Sequence[float] | np.ndarray) -> np.ndarray:
    """Return ``data`` as an ``(N, 3)`` float64 copy.

    Accepts either a flat buffer ``[x0, y0, z0, x1, ...]`` or an array that is
    already shaped ``(N, 3)``. Anything else is rejected before processing.
    """

    try:
        array = np.array(data, dtype=float)
    except (TypeError, ValueError) as exc:
        raise MeshValidationError(f"Vertex data is not numeric: {exc}") from exc

    if array.ndim == 1:
        if array.size % 3 != 0:
            raise MeshValidationError(
                f"Flat vertex buffer length {array.size} is not a multiple of 3"
            )
        array = array.reshape(-1, 3)
    elif array.ndim != 2 or array.shape[1] != 3:
        raise MeshValidationError(f"Expected (N, 3) vertex array, got shape {array.shape}")

    if not np.all(np.isfinite(array)):
        raise MeshValidationError("Vertex data contains non-finite values")
    return array


def build_sphere(radius: float, width_segments: int, height_segments: int) -> Mesh:
    """Build a UV sphere with the same vertex layout as three.js.

    Rows run from the north pole (+Y) to the south pole. Every row holds
    ``width_segments + 1`` vertices, so the seam and the poles are duplicated.
    """

    if width_segments < 3 or height_segments < 2:
        raise MeshValidationError(
            f"Sphere needs at least 3x2 segments, got {width_segments}x{height_segments}"
        )
    if radius <= 0.0:
        raise MeshValidationError(f"Sphere radius must be positive, got {radius}")

    u = np.arange(width_segments + 1, dtype=float) / width_segments
    v = np.arange(height_segments + 1, dtype=float) / height_segments
    uu, vv = np.meshgrid(u, v)
    phi = uu * 2.0 * math.pi
    theta = vv * math.pi

    x = -radius * np.cos(phi) * np.sin(theta)
    y = radius * np.cos(theta)
    z = radius * np.sin(phi) * np.sin(theta)
    positions = np.stack((x, y, z), axis=-1).reshape(-1, 3)

    row = width_segments + 1
    grid = np.arange((height_segments + 1) * row).reshape(height_segments + 1, row)
    a = grid[:-1, 1:]
    b = grid[:-1, :-1]
    c = grid[1:, :-1]
    d = grid[1:, 1:]

    upper = np.stack((a, b, d), axis=-1)[1:]
    lower = np.stack((b, c, d), axis=-1)[:-1]
    faces = np.concatenate((upper.reshape(-1, 3), lower.reshape(-1, 3)), axis=0)
    return Mesh(positions=positions, faces=faces.astype(np.int64))


def weld_groups(positions: np.ndarray) -> np.ndarray:
    """Map every vertex to the index of its group of coincident vertices."""

    rounded = np.round(positions, WELD_DECIMALS) + 0.0
    _, inverse = np.unique(rounded, axis=0, return_inverse=True)
    return np.asarray(inverse).reshape(-1)


def _radial_fallback(positions: np.ndarray) -> np.ndarray:
    lengths = np.linalg.norm(positions, axis=1, keepdims=True)
    fallback = np.zeros_like(positions)
    fallback[:, 1] = 1.0
    return np.where(lengths > 0.0, positions / np.where(lengths > 0.0, lengths, 1.0), fallback)


def compute_vertex_normals(
    positions: np.ndarray,
    faces: Optional[np.ndarray] = None,
    *,
    weld: bool = True,
) -> np.ndarray:
    """Smooth, area weighted vertex normals with unit length everywhere.

    ``faces=None`` treats every consecutive vertex triple as one triangle.
    Coincident vertices share a normal when ``weld`` is set, so duplicated
    seam vertices light the same way as their neighbours.
    """

    positions = as_positions(positions)
    count = positions.shape[0]
    if faces is None:
        if count % 3 != 0:
            raise MeshValidationError(
                f"Triangle soup needs a multiple of 3 vertices, got {count}"
            )
        faces = np.arange(count).reshape(-1, 3)
    faces = np.asarray(faces, dtype=np.int64)

    accumulated = np.zeros_like(positions)
    if faces.size:
        p0 = positions[faces[:, 0]]
        p1 = positions[faces[:, 1]]
        p2 = positions[faces[:, 2]]
        face_normals = np.cross(p1 - p0, p2 - p0)
        for corner in range(3):
            np.add.at(accumulated, faces[:, corner], face_normals)

    if weld and count:
        groups = weld_groups(positions)
        summed = np.zeros((int(groups.max()) + 1, 3), dtype=float)
        np.add.at(summed, groups, accumulated)
        accumulated = summed[groups]

    lengths = np.linalg.norm(accumulated, axis=1, keepdims=True)
    degenerate = lengths[:, 0] <= 1e-12
    normals = np.empty_like(accumulated)
    normals[~degenerate] = accumulated[~degenerate] / lengths[~degenerate]
    if np.any(degenerate):
        normals[degenerate] = _radial_fallback(positions[degenerate])
    return normals


__all__ = [
    "Mesh",
    "MeshValidationError",
    "as_positions",
    "build_sphere",
    "compute_vertex_normals",
    "weld_groups",
]
