"""Rendering of a view state into an RGBA pixel buffer."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import numpy as np
import PIL.Image
import tensorflow as tf

from .escape import DEFAULT_MAX_ITERATIONS, HORIZON_SQUARED, check_max_iterations
from .geometry import ViewState, check_dimensions, is_valid, sample_grid
from .palette import DEFAULT_PALETTE, Palette, to_bytes
from .verbosity import log


@dataclass(frozen=True, eq=False)
class RenderBuffer:
    """Row-major RGBA8 pixels shaped ``(height, width, 4)``."""

    width: int
    height: int
    pixels: np.ndarray

    @classmethod
    def blank(cls, width: int, height: int) -> "RenderBuffer":
        check_dimensions(width, height)
        return cls(width=width, height=height, pixels=np.zeros((height, width, 4), dtype=np.uint8))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RenderBuffer):
            return NotImplemented
        return self.width == other.width and self.height == other.height and np.array_equal(self.pixels, other.pixels)

    def flat(self) -> np.ndarray:
        return self.pixels.reshape(-1)

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        return tuple(int(v) for v in self.pixels[y, x])  # type: ignore[return-value]

    def to_image(self) -> PIL.Image.Image:
        return PIL.Image.fromarray(self.pixels)


@tf.function
def _escape_step(xs: tf.Tensor, ys: tf.Tensor, cre: tf.Tensor, cim: tf.Tensor, ns: tf.Tensor, active: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance every point that is still bounded by one iteration."""

    xs_new = xs * xs - ys * ys + cre
    ys_new = 2 * xs * ys + cim
    xs = tf.where(active, xs_new, xs)
    ys = tf.where(active, ys_new, ys)
    ns = ns + tf.cast(active, tf.int32)
    return xs, ys, ns


@tf.function
def _escape_run(cre: tf.Tensor, cim: tf.Tensor, max_iterations: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor]:
    """Iterate the Mandelbrot recurrence using a TensorFlow while loop."""

    max_iterations = tf.cast(max_iterations, tf.int32)
    horizon = tf.constant(HORIZON_SQUARED, dtype=tf.float64)
    xs = tf.zeros_like(cre)
    ys = tf.zeros_like(cim)
    ns = tf.zeros_like(cre, tf.int32)

    def still_active(xs: tf.Tensor, ys: tf.Tensor, ns: tf.Tensor) -> tf.Tensor:
        return tf.logical_and(xs * xs + ys * ys < horizon, ns < max_iterations)

    def cond(xs: tf.Tensor, ys: tf.Tensor, ns: tf.Tensor) -> tf.Tensor:
        return tf.reduce_any(still_active(xs, ys, ns))

    def body(xs: tf.Tensor, ys: tf.Tensor, ns: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor]:
        return _escape_step(xs, ys, cre, cim, ns, still_active(xs, ys, ns))

    xs, ys, ns = tf.while_loop(cond, body, (xs, ys, ns))
    return xs, ys, ns


def escape_grid(
    view: ViewState,
    width: int,
    height: int,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    *,
    device: Optional[str] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Evaluate every pixel of the buffer.

    Returns the iteration counts (``int32``) and the final squared orbit
    magnitudes (``float64``), both shaped ``(height, width)``.
    """

    max_iterations = check_max_iterations(max_iterations)
    re, im = sample_grid(view, width, height)

    with tf.device(device if device is not None else "/CPU:0"):
        re_tf = tf.convert_to_tensor(re, dtype=tf.float64)
        im_tf = tf.convert_to_tensor(im, dtype=tf.float64)
        cre, cim = tf.meshgrid(re_tf, im_tf)
        xs, ys, ns = _escape_run(cre, cim, tf.constant(max_iterations, dtype=tf.int32))
        magnitude_sq = xs * xs + ys * ys

    return ns.numpy(), magnitude_sq.numpy()


def smooth_escape_counts(iterations: np.ndarray, magnitude_sq: np.ndarray) -> np.ndarray:
    """Vectorised fractional escape count; NaN where the formula is undefined."""

    with np.errstate(divide="ignore", invalid="ignore"):
        return iterations.astype(np.float64) + 1 - np.log(np.log(np.sqrt(magnitude_sq))) / np.log(2)


def colorize(
    iterations: np.ndarray,
    magnitude_sq: np.ndarray,
    max_iterations: int,
    palette: Palette = DEFAULT_PALETTE,
) -> np.ndarray:
    """Turn escape data into opaque RGBA8 pixels."""

    inside = iterations >= max_iterations
    rgba = np.empty(iterations.shape + (4,), dtype=np.uint8)

    t = np.zeros(iterations.shape, dtype=np.float64)
    outside = ~inside
    if np.any(outside):
        t[outside] = smooth_escape_counts(iterations[outside], magnitude_sq[outside]) / max_iterations
    rgba[..., :3] = to_bytes(palette.rgb_array(t))

    for k in (0, 1, 2):
        rgba[..., k] = np.where(inside, np.uint8(palette.inside_color[k]), rgba[..., k])
    rgba[..., 3] = 255
    return rgba


def render(
    view: ViewState,
    width: int,
    height: int,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    palette: Optional[Palette] = None,
    *,
    out: Optional[RenderBuffer] = None,
    device: Optional[str] = None,
) -> RenderBuffer:
    """Render ``view`` into a ``width`` x ``height`` buffer.

    An invalid view is never computed: ``out`` is handed back untouched, or a
    blank buffer when no previous buffer was supplied.
    """

    check_dimensions(width, height)
    if not is_valid(view):
        log("Skipping render of invalid view %r" % (view,))
        return out if out is not None else RenderBuffer.blank(width, height)

    palette = palette if palette is not None else DEFAULT_PALETTE
    start = time.perf_counter()
    log("Need to draw %d pixels" % (width * height))

    iterations, magnitude_sq = escape_grid(view, width, height, max_iterations, device=device)
    pixels = colorize(iterations, magnitude_sq, max_iterations, palette)

    log("render() ran in %d ms" % round((time.perf_counter() - start) * 1000))
    return RenderBuffer(width=width, height=height, pixels=pixels)
