from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import pygame

from .assets import Color, get_text_surface
from .camera import Camera

if TYPE_CHECKING:  # pragma: no cover
    from moon_sim.core.mesh import Mesh


def shade(
    normals: np.ndarray,
    light_direction: tuple[float, float, float],
    ambient: float,
) -> np.ndarray:
    """Lambert intensity in ``[ambient, 1]`` for each normal."""

    light = np.asarray(light_direction, dtype=float)
    light = light / np.linalg.norm(light)
    intensity = np.clip(normals @ light, 0.0, 1.0)
    return ambient + (1.0 - ambient) * intensity


def draw_moon_points(
    surface: pygame.Surface,
    camera: Camera,
    mesh: "Mesh",
    *,
    color: tuple[int, int, int],
    shadow_color: tuple[int, int, int],
    light_direction: tuple[float, float, float],
    ambient: float,
    stride: int = 1,
) -> int:
    """Draw every ``stride``-th vertex as a shaded pixel, far points first.

    Returns the number of points drawn.
    """

    positions = mesh.positions[::max(1, stride)]
    if mesh.normals is not None:
        normals = mesh.normals[::max(1, stride)]
    else:
        lengths = np.linalg.norm(positions, axis=1, keepdims=True)
        normals = positions / np.where(lengths > 0.0, lengths, 1.0)

    pixels, depth, visible = camera.project(positions)
    width, height = surface.get_size()
    on_screen = (
        visible
        & (pixels[:, 0] >= 0)
        & (pixels[:, 0] < width)
        & (pixels[:, 1] >= 0)
        & (pixels[:, 1] < height)
    )
    if not np.any(on_screen):
        return 0

    intensity = shade(normals[on_screen], light_direction, ambient)
    lit = np.asarray(color, dtype=float)
    dark = np.asarray(shadow_color, dtype=float)
    colors = (dark + (lit - dark) * intensity[:, np.newaxis]).astype(int)

    order = np.argsort(-depth[on_screen])
    visible_pixels = pixels[on_screen]
    for index in order:
        x, y = visible_pixels[index]
        surface.fill(tuple(colors[index]), (int(x), int(y), 2, 2))
    return int(order.size)


def draw_rover(
    surface: pygame.Surface,
    camera: Camera,
    position: np.ndarray,
    *,
    color: tuple[int, int, int],
    radius: int,
) -> bool:
    screen = camera.world_to_screen(position)
    if screen is None or radius <= 0:
        return False
    pygame.draw.circle(surface, color, screen, radius)
    return True


def draw_status(
    surface: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    position: tuple[int, int],
    *,
    color: Color,
) -> pygame.Rect:
    rendered = get_text_surface(font, text, color)
    return surface.blit(rendered, position)
