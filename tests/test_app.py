import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import numpy as np

from moon_sim import app
from moon_sim.core.model import BodyPhase


def test_parser_defaults():
    args = app.build_parser().parse_args([])

    assert args.craters == 15
    assert args.segments == 128
    assert args.scenario == "default"
    assert not args.real_time
    assert not args.legacy_noise


def test_create_scene_from_flags():
    args = app.build_parser().parse_args(
        ["--seed", "3", "--segments", "12", "--craters", "2", "--scenario", "high_drop", "--legacy-noise"]
    )

    scene = app.create_scene(args)

    assert scene.phase is BodyPhase.ACTIVE
    assert scene.moon.vertex_count == 13 * 13
    assert not scene.terrain_cfg.preserve_craters
    np.testing.assert_array_equal(scene.rover.position, [0.0, 8.0, 0.0])
    scene.teardown()


def test_headless_run_stops_after_frames(tmp_path):
    args = app.build_parser().parse_args(
        ["--seed", "1", "--segments", "12", "--frames", "3", "--log", "--log-dir", str(tmp_path)]
    )

    assert app.run(args) == 0
    assert (tmp_path / "last_run.txt").exists()
