"""Public API for interactive Mandelbrot exploration."""

from .codec import decode, encode
from .escape import DEFAULT_MAX_ITERATIONS, EscapeResult, escape_value, evaluate, in_set, smooth_escape_count
from .geometry import Complex, ViewState, default_view_state, is_valid, pixel_to_plane, plane_to_pixel, sample_grid
from .gesture import DragGesture, apply_drag, apply_gesture
from .palette import DEFAULT_PALETTE, ColormapPalette, HuePalette, Palette, color_for, parse_hex_color
from .renderer import RenderBuffer, colorize, escape_grid, render
from .session import ViewSession

__all__ = [
    "ColormapPalette",
    "Complex",
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_PALETTE",
    "DragGesture",
    "EscapeResult",
    "HuePalette",
    "Palette",
    "RenderBuffer",
    "ViewSession",
    "ViewState",
    "apply_drag",
    "apply_gesture",
    "color_for",
    "colorize",
    "decode",
    "default_view_state",
    "encode",
    "escape_grid",
    "escape_value",
    "evaluate",
    "in_set",
    "is_valid",
    "parse_hex_color",
    "pixel_to_plane",
    "plane_to_pixel",
    "render",
    "sample_grid",
    "smooth_escape_count",
]
