"""Mapping between the pixel raster and the complex plane."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

# The whole set fits inside Re [-2.5, 1] and Im [-1, 1].
REFERENCE_RE_MIN = -2.5
REFERENCE_RE_MAX = 1.0
REFERENCE_IM_MIN = -1.0
REFERENCE_IM_MAX = 1.0
REFERENCE_WIDTH = REFERENCE_RE_MAX - REFERENCE_RE_MIN
REFERENCE_HEIGHT = REFERENCE_IM_MAX - REFERENCE_IM_MIN


@dataclass(frozen=True)
class Complex:
    """A point on the complex plane."""

    re: float
    im: float


@dataclass(frozen=True)
class ViewState:
    """Top left corner of the view onto the complex plane plus its scale.

    ``scale`` is the number of pixels per unit of length on the complex plane.
    """

    top_left: Complex
    scale: float

    def is_valid(self) -> bool:
        return is_valid(self)


def is_valid(view: ViewState | None) -> bool:
    """Return ``True`` when every field of ``view`` is finite and the scale is positive."""

    if view is None:
        return False
    return (
        math.isfinite(view.scale)
        and view.scale > 0
        and math.isfinite(view.top_left.re)
        and math.isfinite(view.top_left.im)
    )


def check_dimensions(width: int, height: int) -> None:
    if int(width) != width or int(height) != height:
        raise ValueError(f"buffer dimensions must be integers, got {width}x{height}.")
    if width <= 0 or height <= 0:
        raise ValueError(f"buffer dimensions must be positive, got {width}x{height}.")


def divide(numerator: float, denominator: float) -> float:
    """IEEE division: a zero denominator gives a signed infinity, or NaN for 0/0."""

    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def initial_scale(width: int, height: int) -> float:
    """Largest scale at which the reference rectangle fits in the buffer."""

    if width / height >= REFERENCE_WIDTH / REFERENCE_HEIGHT:
        return height / REFERENCE_HEIGHT
    return width / REFERENCE_WIDTH


def default_view_state(width: int, height: int) -> ViewState:
    """Return a view that shows the full Mandelbrot set centred in the buffer."""

    check_dimensions(width, height)
    scale = initial_scale(width, height)
    return ViewState(
        top_left=Complex(
            re=REFERENCE_RE_MIN - (width / scale - REFERENCE_WIDTH) / 2,
            im=REFERENCE_IM_MAX + (height / scale - REFERENCE_HEIGHT) / 2,
        ),
        scale=scale,
    )


def pixel_to_plane(view: ViewState, px: float, py: float) -> Complex:
    """Sample point for pixel ``(px, py)``.

    Pixel rows grow downwards while the imaginary axis grows upwards, so the
    imaginary part is measured from ``top_left.im`` with the sign flipped.
    """

    return Complex(re=divide(px, view.scale) + view.top_left.re, im=divide(py, view.scale) - view.top_left.im)


def plane_to_pixel(view: ViewState, point: Complex) -> tuple[float, float]:
    """Inverse of :func:`pixel_to_plane`."""

    return (point.re - view.top_left.re) * view.scale, (point.im + view.top_left.im) * view.scale


def sample_grid(view: ViewState, width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """Real parts of every column and imaginary parts of every row.

    Uses the same expressions as :func:`pixel_to_plane` so every entry is bit
    identical to the scalar mapping.
    """

    check_dimensions(width, height)
    scale = np.float64(view.scale)
    with np.errstate(divide="ignore", invalid="ignore"):
        re = np.arange(width, dtype=np.float64) / scale + np.float64(view.top_left.re)
        im = np.arange(height, dtype=np.float64) / scale - np.float64(view.top_left.im)
    return re, im
