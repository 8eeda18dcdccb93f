import logging

import numpy as np
import pytest

from laplace_minimax import ErrorFunction, ErrorNorm
from laplace_minimax.continuation import float_path, minimax, move_ratio, quad_move
from laplace_minimax.initial_guess import StartingPoint, error_curve, exchange, first_order
from laplace_minimax.remez import ConvergenceError


def _solve(start: StartingPoint) -> StartingPoint:
    return exchange(start)


def test_move_ratio_reaches_target() -> None:
    one = exchange(first_order(2.0))
    reached, previous = move_ratio(one, 16.0, _solve)
    assert reached.ratio == 16.0
    assert previous is not None and previous.ratio < 16.0
    assert reached.detached
    assert reached.error == pytest.approx(8.5564076e-2, rel=1e-3)


def test_move_ratio_shrinks_the_interval() -> None:
    two = float_path(2, 32.0)
    reached, _ = move_ratio(two, 4.0, _solve)
    assert reached.ratio == 4.0
    assert reached.error == pytest.approx(2.1913703e-3, rel=1e-3)


def test_move_ratio_gives_up_after_halvings() -> None:
    one = exchange(first_order(2.0))
    calls = []

    def refuse(start: StartingPoint) -> StartingPoint:
        calls.append(start.ratio)
        raise ConvergenceError("no")

    reached, previous = move_ratio(one, 100.0, refuse, max_halvings=3)
    assert reached is one and previous is None
    assert len(calls) == 4
    assert calls[0] == 100.0
    assert all(later < earlier for earlier, later in zip(calls, calls[1:]))


@pytest.mark.parametrize(
    "k, ratio, error",
    [(2, 32.0, 1.7273934e-2), (5, 16.0, 1.5378382e-5), (6, 32.0, 8.4180923e-6)],
)
def test_float_path_builds_orders(k: int, ratio: float, error: float) -> None:
    start = float_path(k, ratio)
    assert start.order == k and start.ratio == ratio
    assert start.error == pytest.approx(error, rel=1e-3)
    signs = np.sign(error_curve(start.weights, start.exponents, start.points, ErrorNorm.ABSOLUTE))
    assert np.all(signs[1:] == -signs[:-1])


def test_float_path_on_a_short_interval() -> None:
    start = float_path(3, 1.5)
    assert start.ratio == 1.5 and start.order == 3
    assert np.all(np.diff(start.points) > 0)


def test_quad_move_polishes_on_the_way() -> None:
    start = float_path(4, 4.0)
    moved = quad_move(start, 8.0)
    assert moved.ratio == 8.0
    assert moved.error == pytest.approx(3.0978e-5, rel=1e-3)


def test_minimax_relative_norm_uses_the_float_path(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="laplace_minimax"):
        nodes = minimax(4, 10.0, ErrorNorm.RELATIVE)
    assert nodes.norm is ErrorNorm.RELATIVE and nodes.order == 4
    assert ErrorFunction.from_nodes(nodes).is_equioscillating(nodes.points, 1e-10)
    assert any("float exchange" in r.getMessage() for r in caplog.records)


def test_minimax_failure_is_a_convergence_error() -> None:
    with pytest.raises(ConvergenceError):
        minimax(3, 10.0, tolerance=1e-40, max_iterations=1)
