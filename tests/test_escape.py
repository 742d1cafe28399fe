import math

import numpy as np
import pytest

from mandelview.escape import (
    DEFAULT_MAX_ITERATIONS,
    EscapeResult,
    escape_value,
    evaluate,
    in_set,
    smooth_escape_count,
)
from mandelview.geometry import Complex
from mandelview.renderer import smooth_escape_counts


@pytest.mark.parametrize("max_iterations", [1, 255, 10000])
def test_origin_is_in_set(max_iterations):
    result = evaluate(Complex(0.0, 0.0), max_iterations)
    assert result.iterations == max_iterations
    assert in_set(result, max_iterations)
    assert result.final_magnitude_squared == 0.0


def test_far_point_escapes_immediately():
    result = evaluate(Complex(5.0, 5.0), DEFAULT_MAX_ITERATIONS)
    assert result == EscapeResult(iterations=1, final_magnitude_squared=50.0)
    assert not in_set(result, DEFAULT_MAX_ITERATIONS)


def test_escape_stops_on_the_horizon():
    # 0 -> 1 -> 2: |z|^2 reaches exactly 4.
    assert evaluate(Complex(1.0, 0.0), 100) == EscapeResult(2, 4.0)
    # -2 stays on the horizon forever but counts as escaped once it is reached.
    assert evaluate(Complex(-2.0, 0.0), 100) == EscapeResult(1, 4.0)


def test_main_cardioid_and_period_two_bulb_are_bounded():
    for c in (Complex(-0.1, 0.1), Complex(0.2, 0.0), Complex(-1.0, 0.0), Complex(-0.75, 0.0)):
        assert evaluate(c, 500).iterations == 500


def test_zero_cap_classifies_everything_in_set():
    result = evaluate(Complex(5.0, 5.0), 0)
    assert result.iterations == 0
    assert in_set(result, 0)


def test_negative_cap_is_rejected():
    with pytest.raises(ValueError):
        evaluate(Complex(0.0, 0.0), -1)


def test_smooth_escape_count_formula():
    result = EscapeResult(iterations=1, final_magnitude_squared=50.0)
    expected = 2 - math.log(math.log(math.sqrt(50.0))) / math.log(2)
    assert smooth_escape_count(result) == expected


def test_smooth_escape_count_is_nan_for_degenerate_magnitude():
    assert math.isnan(smooth_escape_count(EscapeResult(3, 0.0)))
    assert math.isnan(smooth_escape_count(EscapeResult(3, 0.25)))


def test_smooth_escape_count_is_infinite_for_unit_magnitude():
    assert smooth_escape_count(EscapeResult(3, 1.0)) == math.inf
    vectorised = smooth_escape_counts(np.array([3]), np.array([1.0]))
    assert vectorised[0] == smooth_escape_count(EscapeResult(3, 1.0))


def test_escape_value_is_normalised_and_none_in_set():
    assert escape_value(EscapeResult(255, 0.3), 255) is None
    result = evaluate(Complex(0.5, 0.5), 255)
    assert result.iterations < 255
    assert escape_value(result, 255) == pytest.approx(smooth_escape_count(result) / 255)


def test_escape_value_grows_towards_the_boundary():
    far = escape_value(evaluate(Complex(1.5, 1.5), 255), 255)
    near = escape_value(evaluate(Complex(0.26, 0.0), 255), 255)
    assert near > far
