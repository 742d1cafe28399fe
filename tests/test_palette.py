import math

import numpy as np
import pytest
from matplotlib import colormaps

from mandelview.escape import EscapeResult, evaluate, escape_value
from mandelview.geometry import Complex
from mandelview.palette import (
    DEFAULT_PALETTE,
    ColormapPalette,
    HuePalette,
    color_for,
    hsl_to_rgb,
    hsl_to_rgb_array,
    parse_hex_color,
    to_byte,
    to_bytes,
)


def _bytes(rgb):
    return tuple(to_byte(channel) for channel in rgb)


def test_sweep_endpoints():
    palette = HuePalette()
    assert palette.hue(0.0) == pytest.approx(0.58)
    assert palette.hue(1.0) == pytest.approx(0.83)
    # Blue at the start of the sweep, magenta at the end.
    assert _bytes(palette.rgb(0.0)) == (0, 133, 255)
    assert _bytes(palette.rgb(1.0)) == (250, 0, 255)


def test_sweep_endpoints_match_hsl_conversion():
    palette = HuePalette()
    assert palette.rgb(0.0) == hsl_to_rgb(0.58, 1.0, 0.5)
    assert palette.rgb(1.0) == hsl_to_rgb(0.25 + 0.58, 1.0, 0.5)


@pytest.mark.parametrize("s,l", [(1.0, 0.5), (0.5, 0.3), (0.8, 0.7), (0.0, 0.4)])
def test_vectorised_hsl_matches_scalar(s, l):
    hues = np.array([-0.4, -0.01, 0.0, 0.1, 1 / 6, 0.3, 0.5, 0.6, 2 / 3, 0.9, 1.0, 1.2, 1.83])
    rgb = hsl_to_rgb_array(hues, s, l)
    assert rgb.shape == (hues.size, 3)
    for hue, row in zip(hues, rgb):
        assert tuple(row) == hsl_to_rgb(float(hue), s, l)


def test_rgb_array_matches_rgb():
    palette = HuePalette(hue_offset=0.1, hue_span=0.7)
    t = np.linspace(-0.2, 1.3, 41).reshape(41, 1)
    rgb = palette.rgb_array(t)
    assert rgb.shape == (41, 1, 3)
    for value, row in zip(t[:, 0], rgb[:, 0]):
        assert tuple(row) == palette.rgb(float(value))


@pytest.mark.parametrize("max_iterations", [1, 255, 10000])
def test_in_set_color_is_fixed(max_iterations):
    result = EscapeResult(max_iterations, 0.2)
    assert color_for(result, max_iterations) == (0, 0, 0)
    palette = HuePalette(inside_color=(10, 59, 160))
    assert color_for(result, max_iterations, palette) == (10, 59, 160)


def test_color_for_escaping_point():
    result = evaluate(Complex(0.5, 0.5), 255)
    t = escape_value(result, 255)
    assert color_for(result, 255) == _bytes(DEFAULT_PALETTE.rgb(t))


def test_to_byte_rounds_and_clips():
    assert to_byte(0.0) == 0
    assert to_byte(1.0) == 255
    assert to_byte(0.5) == 128
    assert to_byte(-0.3) == 0
    assert to_byte(1.7) == 255
    assert to_byte(math.nan) == 0


def test_to_bytes_matches_to_byte():
    values = np.array([0.0, 0.2, 0.5, 0.52, 0.98, 1.0, -1.0, 2.0, np.nan])
    converted = to_bytes(values)
    assert converted.dtype == np.uint8
    assert list(converted) == [to_byte(float(v)) for v in values]


def test_parse_hex_color():
    assert parse_hex_color("#0a3ba0") == (10, 59, 160)
    assert parse_hex_color("FFFFFF") == (255, 255, 255)
    with pytest.raises(ValueError):
        parse_hex_color("#fff")
    with pytest.raises(ValueError):
        parse_hex_color("#gg0000")


def test_colormap_palette():
    palette = ColormapPalette("viridis", inside_color=(255, 255, 255))
    expected = colormaps["viridis"](0.25)[:3]
    assert palette.rgb(0.25) == pytest.approx(expected)
    assert palette.rgb_array(np.array([0.0, 0.25, 1.0])).shape == (3, 3)
    assert color_for(EscapeResult(10, 1.0), 10, palette) == (255, 255, 255)


def test_inverted_colormap_palette():
    palette = ColormapPalette("viridis", invert=True)
    assert palette.rgb(0.0) == pytest.approx(colormaps["viridis"](1.0)[:3])


def test_unknown_colormap():
    with pytest.raises(ValueError):
        ColormapPalette("not-a-colormap")
