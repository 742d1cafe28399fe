"""Colour palettes mapping normalised escape values to RGB."""

from __future__ import annotations

import colorsys
from dataclasses import dataclass, field
from typing import Protocol

import numpy as np
from matplotlib import colormaps

from .escape import EscapeResult, escape_value

RGB = tuple[int, int, int]

ONE_THIRD = 1.0 / 3.0
ONE_SIXTH = 1.0 / 6.0
TWO_THIRD = 2.0 / 3.0


class Palette(Protocol):
    inside_color: RGB

    def rgb(self, t: float) -> tuple[float, float, float]:
        ...

    def rgb_array(self, t: np.ndarray) -> np.ndarray:
        ...


def parse_hex_color(value: str) -> RGB:
    """Parse ``#RRGGBB`` into an RGB triple."""

    hex_color = value.lstrip('#')
    if len(hex_color) != 6:
        raise ValueError('colour must be in the form #RRGGBB.')
    try:
        return tuple(int(hex_color[i:i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]
    except ValueError as exc:
        raise ValueError('colour must contain only hexadecimal digits.') from exc


def to_byte(value: float) -> int:
    if value != value:
        return 0
    return int(round(min(max(value, 0.0), 1.0) * 255))


def to_bytes(values: np.ndarray) -> np.ndarray:
    values = np.nan_to_num(np.asarray(values, dtype=np.float64), nan=0.0)
    return np.uint8(np.rint(np.clip(values, 0.0, 1.0) * 255))


def hsl_to_rgb(h: float, s: float, l: float) -> tuple[float, float, float]:
    return colorsys.hls_to_rgb(h, l, s)


def _hue_channel(m1: np.ndarray, m2: np.ndarray, hue: np.ndarray) -> np.ndarray:
    hue = np.mod(hue, 1.0)
    return np.select(
        [hue < ONE_SIXTH, hue < 0.5, hue < TWO_THIRD],
        [m1 + (m2 - m1) * hue * 6.0, m2, m1 + (m2 - m1) * (TWO_THIRD - hue) * 6.0],
        default=m1,
    )


def hsl_to_rgb_array(h: np.ndarray, s: float, l: float) -> np.ndarray:
    """Vectorised :func:`hsl_to_rgb`; returns an array shaped ``h.shape + (3,)``."""

    h = np.asarray(h, dtype=np.float64)
    if s == 0.0:
        return np.full(h.shape + (3,), l, dtype=np.float64)
    if l <= 0.5:
        m2 = l * (1.0 + s)
    else:
        m2 = l + s - (l * s)
    m1 = 2.0 * l - m2
    m1_arr = np.full(h.shape, m1, dtype=np.float64)
    m2_arr = np.full(h.shape, m2, dtype=np.float64)
    return np.stack(
        (
            _hue_channel(m1_arr, m2_arr, h + ONE_THIRD),
            _hue_channel(m1_arr, m2_arr, h),
            _hue_channel(m1_arr, m2_arr, h - ONE_THIRD),
        ),
        axis=-1,
    )


@dataclass(frozen=True)
class HuePalette:
    """Sweep the hue linearly with ``t`` at fixed saturation and lightness.

    The defaults go from blue (``t = 0``) to magenta (``t = 1``).
    """

    hue_offset: float = 0.58
    hue_span: float = 0.25
    saturation: float = 1.0
    lightness: float = 0.5
    inside_color: RGB = (0, 0, 0)

    def hue(self, t):
        return t * self.hue_span + self.hue_offset

    def rgb(self, t: float) -> tuple[float, float, float]:
        return hsl_to_rgb(self.hue(t), self.saturation, self.lightness)

    def rgb_array(self, t: np.ndarray) -> np.ndarray:
        return hsl_to_rgb_array(self.hue(np.asarray(t, dtype=np.float64)), self.saturation, self.lightness)


@dataclass(frozen=True)
class ColormapPalette:
    """Use a matplotlib colormap (e.g. ``"twilight_shifted"``, ``"inferno"``)."""

    name: str
    inside_color: RGB = (0, 0, 0)
    invert: bool = False
    _cmap: object = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            cmap = colormaps[self.name]
        except KeyError as exc:
            raise ValueError(f"Unknown colormap '{self.name}'.") from exc
        object.__setattr__(self, "_cmap", cmap)

    def rgb(self, t: float) -> tuple[float, float, float]:
        r, g, b, _ = self._cmap(1.0 - t if self.invert else t)
        return float(r), float(g), float(b)

    def rgb_array(self, t: np.ndarray) -> np.ndarray:
        t = np.asarray(t, dtype=np.float64)
        rgba = np.asarray(self._cmap(1.0 - t if self.invert else t), dtype=np.float64)
        return rgba[..., :3]


DEFAULT_PALETTE = HuePalette()


def color_for(result: EscapeResult, max_iterations: int, palette: Palette = DEFAULT_PALETTE) -> RGB:
    """Colour of a single evaluated point."""

    t = escape_value(result, max_iterations)
    if t is None:
        return tuple(palette.inside_color)  # type: ignore[return-value]
    r, g, b = palette.rgb(t)
    return to_byte(r), to_byte(g), to_byte(b)
