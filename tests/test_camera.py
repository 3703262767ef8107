from dataclasses import replace

import numpy as np

from moon_sim.core.camera import follow_camera
from moon_sim.core.config import CAMERA_CFG, TERRAIN_CFG
from moon_sim.render.camera import Camera, look_at_basis


def test_follow_camera_for_rover_at_distance_five():
    pose = follow_camera(np.array([0.0, 3.0, 4.0]))

    np.testing.assert_allclose(pose.target, [-5.0, 0.0, -5.0])
    # anchor (5, 6, 5) lifted by distance + height = 1.0 along (0, 0.6, 0.8)
    np.testing.assert_allclose(pose.position, [5.0, 6.6, 5.8])


def test_follow_camera_lifts_by_full_offset():
    cfg = replace(CAMERA_CFG, anchor=(1.0, 1.2, 1.0), look_target=(-1.0, 0.0, -1.0))

    pose = follow_camera(np.array([0.0, 3.0, 4.0]), cfg)

    np.testing.assert_allclose(pose.position, [1.0, 1.8, 1.8])
    # a quarter lift would give anchor + 0.25 * outward
    assert not np.allclose(pose.position, [1.0, 1.35, 1.2])


def test_follow_camera_sits_outside_the_moon():
    pose = follow_camera(np.array([0.0, 5.1, 0.0]))

    assert np.linalg.norm(pose.position) > TERRAIN_CFG.radius
    assert np.linalg.norm(pose.target) > TERRAIN_CFG.radius


def test_follow_camera_is_pure():
    first = follow_camera(np.array([0.5, 1.0, -2.0]))
    follow_camera(np.array([9.0, 9.0, 9.0]))
    second = follow_camera(np.array([0.5, 1.0, -2.0]))

    np.testing.assert_array_equal(first.position, second.position)
    np.testing.assert_array_equal(first.target, second.target)


def test_follow_camera_at_origin_stays_on_anchor():
    pose = follow_camera(np.zeros(3))

    np.testing.assert_allclose(pose.position, CAMERA_CFG.anchor)


def test_follow_camera_uses_configured_offsets():
    cfg = replace(CAMERA_CFG, anchor=(0.0, 0.0, 0.0), height=2.0, distance=1.0, look_target=(0.0, 0.0, 0.0))

    pose = follow_camera(np.array([0.0, 0.0, 10.0]), cfg)

    np.testing.assert_allclose(pose.position, [0.0, 0.0, 3.0])
    np.testing.assert_allclose(pose.target, [0.0, 0.0, 0.0])


def test_look_at_basis_is_orthonormal():
    pose = follow_camera(np.array([0.0, 1.5, 0.0]))

    right, up, forward = look_at_basis(pose)

    basis = np.stack((right, up, forward))
    np.testing.assert_allclose(basis @ basis.T, np.eye(3), atol=1e-12)


def test_projection_centres_target_and_hides_points_behind():
    camera = Camera((200, 100), 90.0)
    camera.set_pose(follow_camera(np.zeros(3), replace(CAMERA_CFG, anchor=(0.0, 0.0, 10.0), look_target=(0.0, 0.0, 0.0))))

    pixels, depth, visible = camera.project(np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 20.0]]))

    assert tuple(pixels[0]) == (100, 50)
    assert pixels[1, 0] > 100
    assert depth[0] == 10.0
    assert list(visible) == [True, True, False]
    assert camera.world_to_screen(np.array([0.0, 0.0, 20.0])) is None


def test_projection_up_is_screen_up():
    camera = Camera((200, 100), 90.0)
    camera.set_pose(follow_camera(np.zeros(3), replace(CAMERA_CFG, anchor=(0.0, 0.0, 10.0), look_target=(0.0, 0.0, 0.0))))

    x, y = camera.world_to_screen(np.array([0.0, 1.0, 0.0]))

    assert x == 100
    assert y < 50
