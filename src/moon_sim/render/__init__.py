"""Rendering helpers for the moon viewer."""

from .camera import Camera, look_at_basis
from .assets import clear_text_cache, get_text_surface, load_font
from .draw import draw_moon_points, draw_rover, draw_status, shade

__all__ = [
    "Camera",
    "clear_text_cache",
    "draw_moon_points",
    "draw_rover",
    "draw_status",
    "get_text_surface",
    "load_font",
    "look_at_basis",
    "shade",
]
