"""
MoonLab - cratered moon with a rover under central gravity
==========================================================

Opens a pygame window, builds the procedural moon, drops the rover and
follows it with the camera. One physics tick runs per rendered frame unless
``--real-time`` is given, in which case wall-clock time drives a fixed-step
accumulator.
"""
from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from typing import Optional, Sequence

import pygame

from moon_sim.core.assets import AssetLoader
from moon_sim.core.config import CAMERA_CFG, PHYSICS_CFG, RENDER_CFG, TERRAIN_CFG
from moon_sim.core.logging_utils import RunLogger
from moon_sim.core.random_source import SeededRandom
from moon_sim.core.scene import MoonScene
from moon_sim.core.timekeeping import FrameTimer
from moon_sim.data.scenarios import DEFAULT_SCENARIO_KEY, SCENARIOS
from moon_sim.render import Camera, draw_moon_points, draw_rover, draw_status, load_font


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cratered moon and rover viewer")
    parser.add_argument("--seed", type=int, default=None, help="Terrain seed (random if omitted)")
    parser.add_argument("--craters", type=int, default=TERRAIN_CFG.crater_count)
    parser.add_argument("--segments", type=int, default=TERRAIN_CFG.width_segments)
    parser.add_argument("--scenario", choices=sorted(SCENARIOS), default=DEFAULT_SCENARIO_KEY)
    parser.add_argument(
        "--real-time",
        action="store_true",
        help="Step physics by elapsed wall-clock time instead of once per frame",
    )
    parser.add_argument(
        "--legacy-noise",
        action="store_true",
        help="Let the roughness noise replace crater depth (older surface look)",
    )
    parser.add_argument("--asset", default=None, help="Rover mesh file (STL, GLB, OBJ)")
    parser.add_argument("--log", action="store_true", help="Record telemetry under data/runs")
    parser.add_argument("--log-dir", default="data/runs")
    parser.add_argument("--frames", type=int, default=None, help="Quit after this many frames")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def create_scene(args: argparse.Namespace) -> MoonScene:
    terrain_cfg = replace(
        TERRAIN_CFG,
        crater_count=args.craters,
        width_segments=args.segments,
        height_segments=args.segments,
        preserve_craters=not args.legacy_noise,
    )
    physics_cfg = replace(PHYSICS_CFG, real_time=args.real_time)
    scenario = SCENARIOS[args.scenario]
    loader = AssetLoader() if args.asset else None
    run_logger = RunLogger(args.log_dir) if args.log else None
    return MoonScene(
        terrain_cfg,
        physics_cfg,
        CAMERA_CFG,
        rng=SeededRandom(args.seed),
        loader=loader,
        rover_asset=args.asset,
        run_logger=run_logger,
        start_position=scenario.position_vector(),
        start_velocity=scenario.velocity_vector(),
    )


def run(args: argparse.Namespace) -> int:
    cfg = RENDER_CFG
    scene = create_scene(args)
    pygame.init()
    try:
        screen = pygame.display.set_mode((cfg.width, cfg.height), pygame.RESIZABLE)
        pygame.display.set_caption("MoonLab")
        clock = pygame.time.Clock()
        font = load_font(["arial", "dejavusans"], cfg.hud_font_size)
        camera = Camera(screen.get_size(), CAMERA_CFG.fov_deg, near=CAMERA_CFG.near)
        timer = FrameTimer()

        frames = 0
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    camera.update_size((event.w, event.h))
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False

            outcome = scene.tick(timer.tick())
            if outcome.camera is not None:
                camera.set_pose(outcome.camera)

            screen.fill(cfg.background_color)
            draw_moon_points(
                screen,
                camera,
                scene.moon,
                color=cfg.moon_color,
                shadow_color=cfg.moon_shadow_color,
                light_direction=cfg.light_direction,
                ambient=cfg.ambient_light,
                stride=cfg.point_stride,
            )
            if scene.rover is not None:
                draw_rover(
                    screen,
                    camera,
                    scene.rover.position,
                    color=cfg.rover_color,
                    radius=cfg.rover_pixel_radius,
                )
            draw_status(
                screen, font, scene.status_text(), cfg.status_position, color=cfg.hud_text_color
            )
            pygame.display.flip()
            clock.tick(cfg.fps)

            frames += 1
            if args.frames is not None and frames >= args.frames:
                running = False
    finally:
        scene.teardown()
        pygame.quit()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
