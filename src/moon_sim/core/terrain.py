"""Procedural crater terrain on a sphere mesh.

Craters are sampled once per deformation pass and shared by every vertex.
Each crater pushes vertices inside its radius of effect towards the centre of
the sphere, with the deepest point at the crater centre. A small radial
roughness noise is layered on top afterwards.

Two ways of combining the craters with the noise are supported, chosen by
``TerrainCfg.preserve_craters``:

* ``True``: the noise perturbs the crater-displaced radius, so craters stay
  visible.
* ``False``: the vertex is pushed back to ``radius + noise``, which discards
  the crater displacement. This reproduces the older moon surface.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .config import TERRAIN_CFG, TerrainCfg
from .mesh import Mesh, as_positions, build_sphere, compute_vertex_normals, weld_groups
from .random_source import RandomSource


@dataclass(frozen=True)
class Crater:
    """Crater centred on the sphere surface."""

    center: np.ndarray
    size: float
    depth: float


def _random_direction(rng: RandomSource) -> np.ndarray:
    direction = np.array([rng.next() * 2.0 - 1.0 for _ in range(3)], dtype=float)
    length = float(np.linalg.norm(direction))
    if length < 1e-12:
        return np.array([0.0, 1.0, 0.0])
    return direction / length


def generate_craters(
    rng: RandomSource,
    count: int,
    radius: float,
    cfg: TerrainCfg = TERRAIN_CFG,
) -> list[Crater]:
    """Sample ``count`` craters; four draws each (x, y, z, then size)."""

    if count < 0:
        raise ValueError(f"Crater count must not be negative, got {count}")
    craters: list[Crater] = []
    for _ in range(count):
        center = _random_direction(rng) * radius
        size = rng.next() * (cfg.crater_size_max - cfg.crater_size_min) + cfg.crater_size_min
        craters.append(Crater(center=center, size=size, depth=cfg.crater_depth))
    return craters


def sample_noise(rng: RandomSource, count: int, cfg: TerrainCfg = TERRAIN_CFG) -> np.ndarray:
    """Radial roughness in ``[-amplitude, amplitude)`` for ``count`` vertices."""

    scale = 2.0 * cfg.noise_amplitude
    return np.array([(rng.next() - 0.5) * scale for _ in range(count)], dtype=float)


def apply_craters(
    positions: np.ndarray,
    radius: float,
    craters: Sequence[Crater],
) -> np.ndarray:
    """Return positions pushed inward by every crater they fall inside.

    Distances are always measured from the original ``positions`` so that
    overlapping craters add up instead of compounding.
    """

    original = as_positions(positions)
    displaced = original.copy()
    outward = original / radius
    for crater in craters:
        distance = np.linalg.norm(original - crater.center, axis=1)
        inside = distance < crater.size
        if not np.any(inside):
            continue
        impact = (1.0 - distance[inside] / crater.size) * crater.depth
        displaced[inside] -= outward[inside] * impact[:, np.newaxis]
    return displaced


def deform(
    base_positions: Sequence[float] | np.ndarray,
    radius: float,
    crater_count: int,
    rng: RandomSource,
    cfg: TerrainCfg = TERRAIN_CFG,
) -> np.ndarray:
    """Crater and roughen a sphere, returning new ``(N, 3)`` positions."""

    if radius <= 0.0:
        raise ValueError(f"Radius must be positive, got {radius}")
    positions = as_positions(base_positions)
    craters = generate_craters(rng, crater_count, radius, cfg)
    displaced = apply_craters(positions, radius, craters)

    lengths = np.linalg.norm(positions, axis=1)
    safe = np.where(lengths > 0.0, lengths, 1.0)
    directions = np.where(
        (lengths > 0.0)[:, np.newaxis], positions / safe[:, np.newaxis], 0.0
    )

    if cfg.weld_seams and len(positions):
        groups = weld_groups(positions)
        noise = sample_noise(rng, int(groups.max()) + 1, cfg)[groups]
    else:
        noise = sample_noise(rng, len(positions), cfg)

    if cfg.preserve_craters:
        base_radius = np.einsum("ij,ij->i", displaced, directions)
    else:
        base_radius = np.full(len(positions), float(radius))
    return directions * (base_radius + noise)[:, np.newaxis]


def deform_mesh(
    mesh: Mesh,
    crater_count: int,
    rng: RandomSource,
    cfg: TerrainCfg = TERRAIN_CFG,
    *,
    radius: float | None = None,
) -> np.ndarray:
    """Deform ``mesh`` in place and return its recomputed normals."""

    radius = cfg.radius if radius is None else radius
    mesh.positions[:] = deform(mesh.positions, radius, crater_count, rng, cfg)
    mesh.normals = compute_vertex_normals(mesh.positions, mesh.faces, weld=cfg.weld_seams)
    return mesh.normals


def build_moon(rng: RandomSource, cfg: TerrainCfg = TERRAIN_CFG) -> Mesh:
    mesh = build_sphere(cfg.radius, cfg.width_segments, cfg.height_segments)
    deform_mesh(mesh, cfg.crater_count, rng, cfg)
    return mesh


__all__ = [
    "Crater",
    "apply_craters",
    "build_moon",
    "deform",
    "deform_mesh",
    "generate_craters",
    "sample_noise",
]
