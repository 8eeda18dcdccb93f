import math

import numpy as np
import pytest

from laplace_minimax import constants as C
from laplace_minimax.error_function import ErrorNorm
from laplace_minimax.initial_guess import (
    StartingPoint,
    error_curve,
    exchange,
    extrema,
    first_order,
    insert_term,
    level,
    second_order,
)
from laplace_minimax.remez import ConvergenceError


def _alternates(start: StartingPoint, norm: ErrorNorm = ErrorNorm.ABSOLUTE) -> bool:
    signs = np.sign(error_curve(start.weights, start.exponents, start.points, norm))
    return bool(np.all(signs[1:] == -signs[:-1]))


@pytest.fixture(scope="module")
def k3_on_2() -> StartingPoint:
    one = exchange(first_order(2.0))
    two = exchange(insert_term(one))
    return exchange(insert_term(two))


def test_error_curve_norms() -> None:
    x = np.array([1.0, 2.0])
    weights, exponents = np.array([0.5]), np.array([1.0])
    absolute = error_curve(weights, exponents, x, ErrorNorm.ABSOLUTE)
    relative = error_curve(weights, exponents, x, ErrorNorm.RELATIVE)
    np.testing.assert_allclose(absolute, 1.0 / x - 0.5 * np.exp(-x))
    np.testing.assert_allclose(relative, x * absolute)


def test_starting_point_validates_shapes() -> None:
    with pytest.raises(ValueError):
        StartingPoint([0.0], [0.0, 1.0], [1.0, 1.5, 2.0], 2.0)
    with pytest.raises(ValueError):
        StartingPoint([0.0], [0.0], [1.0, 2.0], 2.0)


def test_vector_pins_the_end_points() -> None:
    start = StartingPoint([0.1, 0.2], [-1.0, 1.0], [1.0, 1.5, 2.0, 3.0, 4.0], 4.0)
    assert start.order == 2
    vector = start.vector()
    assert vector.shape == (7,)
    moved = StartingPoint.from_vector(vector + 0.01, 3.5)
    assert moved.points[0] == 1.0 and moved.points[-1] == 3.5
    np.testing.assert_allclose(moved.log_weights, start.log_weights + 0.01)
    assert not moved.detached


def test_first_and_second_order_layout() -> None:
    one = first_order(2.0)
    assert one.order == 1
    np.testing.assert_allclose(one.points, [1.0, math.sqrt(2.0), 2.0])
    assert one.exponents[0] == pytest.approx(math.log(2.0))
    two = second_order(one)
    assert two.order == 2 and len(two.points) == 5
    assert two.points[0] == 1.0 and two.points[-1] == 2.0
    assert np.all(np.diff(two.points) > 0)
    assert two.log_exponents[0] < one.log_exponents[0] < two.log_exponents[1]


def test_double_precision_exchange_k3(k3_on_2: StartingPoint) -> None:
    assert k3_on_2.order == 3
    assert k3_on_2.error == pytest.approx(1.8342e-6, rel=1e-3)
    assert np.all(np.diff(k3_on_2.exponents) > 0)
    assert np.all(k3_on_2.weights > 0)
    assert _alternates(k3_on_2)
    assert k3_on_2.points[-1] == 2.0
    x = np.geomspace(1.0, 2.0, 2000)
    dense = np.max(np.abs(error_curve(k3_on_2.weights, k3_on_2.exponents, x, ErrorNorm.ABSOLUTE)))
    assert dense <= k3_on_2.error * (1 + 10 * C.FLOAT_RIPPLE_TOLERANCE)


def test_inserted_term_is_interleaved(k3_on_2: StartingPoint) -> None:
    resampled = insert_term(k3_on_2)
    assert resampled.order == 4 and len(resampled.points) == 9
    assert np.all(np.diff(resampled.points) > 0)
    assert resampled.exponents[0] < k3_on_2.exponents[0]
    assert resampled.exponents[-1] > k3_on_2.exponents[-1]
    four = exchange(resampled)
    assert four.error < k3_on_2.error / 10


def test_levelling_keeps_exponents_above_floor() -> None:
    ratio = 100.0
    points = ratio ** np.array(C.SECOND_ORDER_POINTS)
    log_w, log_a, _ = level(points, np.array([-2.0, 0.0]), np.array([-30.0, 0.5]), ratio)
    assert np.all(log_a >= math.log(C.EXPONENT_FLOOR / ratio) - 1e-12)
    assert np.all(np.isfinite(log_w))


def test_free_right_end_moves_inside() -> None:
    # the single-term best approximation stops using the interval beyond R ~ 8.667
    start = exchange(first_order(8.0))
    long = exchange(StartingPoint(start.log_weights, start.log_exponents, start.points, 20.0))
    assert long.detached
    assert long.points[-1] == pytest.approx(8.667, rel=1e-3)
    assert long.error == pytest.approx(8.5564e-2, rel=1e-3)


def test_extrema_needs_alternation() -> None:
    points = np.array([1.0, 1.5, 2.0])
    with pytest.raises(ConvergenceError):
        extrema(points, np.array([-700.0]), np.array([0.0]), 2.0)


@pytest.mark.parametrize("norm", list(ErrorNorm))
def test_exchange_in_both_norms(norm: ErrorNorm) -> None:
    one = exchange(first_order(2.0), norm)
    two = exchange(insert_term(one, norm=norm), norm)
    assert two.order == 2
    assert _alternates(two, norm)
    assert two.error < one.error
