import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import numpy as np
import pygame
import pytest

from moon_sim.core.camera import CameraPose
from moon_sim.core.config import RENDER_CFG
from moon_sim.core.mesh import build_sphere
from moon_sim.render import Camera, clear_text_cache, draw_moon_points, draw_rover, draw_status, get_text_surface, shade


def make_camera(size=(160, 120)):
    camera = Camera(size, 75.0)
    camera.set_pose(CameraPose(position=np.array([0.0, 0.0, 12.0]), target=np.zeros(3)))
    return camera


def test_shade_stays_between_ambient_and_one():
    normals = np.array([[1.0, 0.0, 0.0], [-1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])

    intensity = shade(normals, (1.0, 0.0, 0.0), 0.25)

    np.testing.assert_allclose(intensity, [1.0, 0.25, 0.25])


def test_moon_points_are_drawn_on_surface():
    surface = pygame.Surface((160, 120))
    surface.fill((0, 0, 0))
    mesh = build_sphere(5.0, 16, 12)

    drawn = draw_moon_points(
        surface,
        make_camera(),
        mesh,
        color=RENDER_CFG.moon_color,
        shadow_color=RENDER_CFG.moon_shadow_color,
        light_direction=RENDER_CFG.light_direction,
        ambient=RENDER_CFG.ambient_light,
    )

    assert drawn > 0
    assert surface.get_at((80, 60))[:3] != (0, 0, 0)


def test_nothing_drawn_when_camera_looks_away():
    surface = pygame.Surface((160, 120))
    camera = Camera((160, 120), 75.0)
    camera.set_pose(CameraPose(position=np.array([0.0, 0.0, 12.0]), target=np.array([0.0, 0.0, 24.0])))

    drawn = draw_moon_points(
        surface,
        camera,
        build_sphere(5.0, 16, 12),
        color=(200, 200, 200),
        shadow_color=(20, 20, 20),
        light_direction=(0.0, 1.0, 0.0),
        ambient=0.2,
    )

    assert drawn == 0


def test_rover_marker_only_when_visible():
    surface = pygame.Surface((160, 120))
    camera = make_camera()

    assert draw_rover(surface, camera, np.zeros(3), color=(255, 0, 0), radius=3)
    assert surface.get_at((80, 60))[:3] == (255, 0, 0)
    assert not draw_rover(surface, camera, np.array([0.0, 0.0, 20.0]), color=(255, 0, 0), radius=3)


@pytest.fixture
def font():
    pygame.font.init()
    yield pygame.font.Font(None, 16)
    clear_text_cache()


def test_status_text_is_cached(font):
    first = get_text_surface(font, "Distance from center: 5.50 units", (255, 255, 255))
    second = get_text_surface(font, "Distance from center: 5.50 units", (255, 255, 255))

    assert first is second


def test_draw_status_blits_text(font):
    surface = pygame.Surface((320, 80))

    rect = draw_status(surface, font, "Loading rover...", (20, 20), color=(255, 255, 255))

    assert rect.topleft == (20, 20)
    assert rect.width > 0
