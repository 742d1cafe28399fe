"""Escape-time evaluation of single points."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .geometry import Complex

HORIZON = 2.0
HORIZON_SQUARED = HORIZON * HORIZON
DEFAULT_MAX_ITERATIONS = 255


@dataclass(frozen=True)
class EscapeResult:
    """Iteration count at which the orbit stopped and its last squared magnitude."""

    iterations: int
    final_magnitude_squared: float


def check_max_iterations(max_iterations: int) -> int:
    max_iterations = int(max_iterations)
    if max_iterations < 0:
        raise ValueError(f"max_iterations must be non-negative, got {max_iterations}.")
    return max_iterations


def evaluate(c: Complex, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> EscapeResult:
    """Iterate ``z <- z**2 + c`` from ``z = 0`` until ``|z| >= 2`` or the cap is hit.

    Any point surviving until ``max_iterations`` is treated as part of the set.
    """

    max_iterations = check_max_iterations(max_iterations)
    x = 0.0
    y = 0.0
    iteration = 0
    while x * x + y * y < HORIZON_SQUARED and iteration < max_iterations:
        x_temp = x * x - y * y + c.re
        y = 2 * x * y + c.im
        x = x_temp
        iteration += 1
    return EscapeResult(iterations=iteration, final_magnitude_squared=x * x + y * y)


def in_set(result: EscapeResult, max_iterations: int) -> bool:
    return result.iterations == max_iterations


def smooth_escape_count(result: EscapeResult) -> float:
    """Fractional escape count ``n + 1 - log(log(|z|)) / log(2)``.

    A unit magnitude gives +inf; smaller or negative ones give NaN.
    """

    try:
        log_magnitude = math.log(math.sqrt(result.final_magnitude_squared))
        if log_magnitude == 0:
            return math.inf
        return result.iterations + 1 - math.log(log_magnitude) / math.log(2)
    except ValueError:
        return math.nan


def escape_value(result: EscapeResult, max_iterations: int) -> Optional[float]:
    """Smooth escape count normalised by the cap, or ``None`` for points in the set."""

    if in_set(result, max_iterations):
        return None
    return smooth_escape_count(result) / max_iterations
