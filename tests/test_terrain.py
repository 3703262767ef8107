import numpy as np
import pytest
from dataclasses import replace

from moon_sim.core.config import TERRAIN_CFG
from moon_sim.core.mesh import MeshValidationError, build_sphere
from moon_sim.core.random_source import SeededRandom, SequenceRandom
from moon_sim.core.terrain import (
    Crater,
    apply_craters,
    build_moon,
    deform,
    deform_mesh,
    generate_craters,
    sample_noise,
)


class CountingRandom:
    def __init__(self, seed):
        self._inner = SeededRandom(seed)
        self.calls = 0

    def next(self):
        self.calls += 1
        return self._inner.next()


# Draws: crater x, y, z, size, then the noise sample.
# Crater centre lands on (0, 5, 0) with size 2.0; noise comes out as 0.
CRATER_ON_NORTH_POLE = [0.5, 0.75, 0.5, 0.5]


def test_zero_craters_gives_sphere_within_noise_band():
    sphere = build_sphere(5.0, 24, 16)
    out = deform(sphere.positions, 5.0, 0, SeededRandom(3))

    radii = np.linalg.norm(out, axis=1)
    assert np.all(radii >= 5.0 - 0.1)
    assert np.all(radii < 5.0 + 0.1)

    directions_in = sphere.positions / np.linalg.norm(sphere.positions, axis=1, keepdims=True)
    directions_out = out / radii[:, np.newaxis]
    np.testing.assert_allclose(directions_out, directions_in, atol=1e-12)


def test_crater_centred_on_vertex_lowers_it_by_full_depth():
    vertex = np.array([[0.0, 5.0, 0.0]])
    crater = Crater(center=np.array([0.0, 5.0, 0.0]), size=2.0, depth=0.2)

    displaced = apply_craters(vertex, 5.0, [crater])

    assert np.linalg.norm(displaced[0]) == pytest.approx(5.0 - 0.2)


def test_crater_has_no_effect_outside_its_size():
    vertices = np.array([[5.0, 0.0, 0.0], [0.0, 0.0, -5.0], [0.0, -5.0, 0.0]])
    crater = Crater(center=np.array([0.0, 5.0, 0.0]), size=3.0, depth=0.2)

    displaced = apply_craters(vertices, 5.0, [crater])

    np.testing.assert_array_equal(displaced, vertices)


def test_crater_impact_falls_off_linearly():
    vertex = np.array([[0.0, 5.0, 0.0]])
    centre = np.array([1.0, 5.0, 0.0])
    crater = Crater(center=centre, size=2.0, depth=0.2)

    displaced = apply_craters(vertex, 5.0, [crater])

    # distance 1 of size 2 -> half of the depth
    assert np.linalg.norm(displaced[0]) == pytest.approx(5.0 - 0.1)


def test_overlapping_craters_add_up():
    vertex = np.array([[0.0, 5.0, 0.0]])
    crater = Crater(center=np.array([0.0, 5.0, 0.0]), size=2.0, depth=0.2)

    displaced = apply_craters(vertex, 5.0, [crater, crater])

    assert np.linalg.norm(displaced[0]) == pytest.approx(5.0 - 0.4)


def test_default_mode_keeps_crater_depth_under_noise():
    out = deform([0.0, 5.0, 0.0], 5.0, 1, SequenceRandom(CRATER_ON_NORTH_POLE))

    np.testing.assert_allclose(out, [[0.0, 4.8, 0.0]])


def test_legacy_mode_lets_noise_overwrite_craters():
    cfg = replace(TERRAIN_CFG, preserve_craters=False)

    out = deform([0.0, 5.0, 0.0], 5.0, 1, SequenceRandom(CRATER_ON_NORTH_POLE), cfg)

    np.testing.assert_allclose(out, [[0.0, 5.0, 0.0]])


def test_craters_are_drawn_once_per_call_not_per_vertex():
    cfg = replace(TERRAIN_CFG, weld_seams=False)
    sphere = build_sphere(5.0, 8, 6)
    rng = CountingRandom(11)

    deform(sphere.positions, 5.0, 15, rng, cfg)

    assert rng.calls == 15 * 4 + sphere.vertex_count


def test_generate_craters_places_centres_on_surface():
    craters = generate_craters(SeededRandom(5), 15, 5.0)

    assert len(craters) == 15
    for crater in craters:
        assert np.linalg.norm(crater.center) == pytest.approx(5.0)
        assert 1.0 <= crater.size < 3.0
        assert crater.depth == pytest.approx(0.2)


def test_generate_craters_handles_zero_direction_draw():
    craters = generate_craters(SequenceRandom([0.5]), 1, 5.0)

    np.testing.assert_allclose(craters[0].center, [0.0, 5.0, 0.0])
    assert craters[0].size == pytest.approx(2.0)


def test_generate_craters_rejects_negative_count():
    with pytest.raises(ValueError):
        generate_craters(SeededRandom(1), -1, 5.0)


def test_sample_noise_range():
    noise = sample_noise(SeededRandom(9), 500)

    assert noise.shape == (500,)
    assert noise.min() >= -0.1
    assert noise.max() < 0.1


def test_same_seed_gives_bit_identical_moon():
    sphere = build_sphere(5.0, 128, 128)

    first = deform(sphere.positions, 5.0, 15, SeededRandom(42))
    second = deform(sphere.positions, 5.0, 15, SeededRandom(42))

    assert np.array_equal(first, second)


def test_different_seeds_differ():
    sphere = build_sphere(5.0, 16, 12)

    first = deform(sphere.positions, 5.0, 15, SeededRandom(1))
    second = deform(sphere.positions, 5.0, 15, SeededRandom(2))

    assert not np.array_equal(first, second)


def test_seam_vertices_stay_together():
    width, height = 16, 12
    sphere = build_sphere(5.0, width, height)
    out = deform(sphere.positions, 5.0, 15, SeededRandom(8))

    row = width + 1
    for iy in range(height + 1):
        np.testing.assert_allclose(out[iy * row], out[iy * row + width], atol=1e-9)


def test_malformed_buffer_is_rejected_before_deformation():
    rng = CountingRandom(1)
    with pytest.raises(MeshValidationError):
        deform([1.0, 2.0, 3.0, 4.0], 5.0, 3, rng)
    assert rng.calls == 0


def test_non_positive_radius_is_rejected():
    with pytest.raises(ValueError):
        deform([0.0, 5.0, 0.0], 0.0, 0, SeededRandom(1))


def test_vertex_at_origin_stays_at_origin():
    out = deform([[0.0, 0.0, 0.0], [0.0, 5.0, 0.0]], 5.0, 2, SeededRandom(4))

    np.testing.assert_array_equal(out[0], [0.0, 0.0, 0.0])
    assert np.all(np.isfinite(out))


def test_deform_mesh_mutates_in_place_and_returns_unit_normals():
    mesh = build_sphere(5.0, 20, 14)
    buffer = mesh.positions
    count = mesh.vertex_count

    normals = deform_mesh(mesh, 15, SeededRandom(21))

    assert mesh.positions is buffer
    assert mesh.vertex_count == count
    assert normals.shape == (count, 3)
    np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0, atol=1e-12)
    assert mesh.normals is normals


def test_build_moon_uses_configured_resolution():
    cfg = replace(TERRAIN_CFG, width_segments=10, height_segments=8, crater_count=4)

    moon = build_moon(SeededRandom(0), cfg)

    assert moon.vertex_count == 11 * 9
    assert moon.normals is not None
