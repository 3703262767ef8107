"""Camera pose derived from the tracked body position."""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .config import CAMERA_CFG, CameraCfg


@dataclass(frozen=True)
class CameraPose:
    position: np.ndarray
    target: np.ndarray


def follow_camera(body_position: np.ndarray, cfg: CameraCfg = CAMERA_CFG) -> CameraPose:
    """Pose for a camera following a body on the moon.

    The camera sits at the configured anchor, lifted along the body's outward
    direction by ``distance + height``, and always looks at ``look_target``.
    Only the body position matters; orientation and earlier poses do not.
    """

    position = np.asarray(body_position, dtype=float)
    length = float(np.linalg.norm(position))
    outward = position / length if length > 0.0 else np.zeros(3, dtype=float)
    # Lift by the whole ``distance + height``, not a quarter of it
    # (``anchor + 0.25 * outward``) as an in-place scaled offset would give.
    camera = np.asarray(cfg.anchor, dtype=float) + outward * (cfg.distance + cfg.height)
    return CameraPose(position=camera, target=np.asarray(cfg.look_target, dtype=float))


__all__ = ["CameraPose", "follow_camera"]
