import math

import pytest

from laplace_minimax.roots import RootFindingError, golden_section_max, safeguarded_newton
from quadfloat import QuadFloat, sqrt


def test_newton_reaches_quad_accuracy() -> None:
    root = safeguarded_newton(lambda x: x * x - 2, lambda x: 2 * x, QuadFloat(1), QuadFloat(2))
    assert isinstance(root, QuadFloat)
    assert abs(root - sqrt(QuadFloat(2))) < QuadFloat("1e-30")


def test_newton_on_floats() -> None:
    root = safeguarded_newton(math.cos, lambda x: -math.sin(x), 1.0, 2.0)
    assert root == pytest.approx(math.pi / 2, abs=1e-12)


def test_newton_falls_back_to_bisection() -> None:
    # from the midpoint a Newton step on atan overshoots the bracket
    root = safeguarded_newton(
        lambda x: math.atan(x - 3.0), lambda x: 1.0 / (1.0 + (x - 3.0) ** 2), 0.0, 20.0
    )
    assert root == pytest.approx(3.0, abs=1e-12)


def test_newton_returns_root_at_bracket_end() -> None:
    assert safeguarded_newton(lambda x: x - 1.0, lambda x: 1.0, 1.0, 2.0) == 1.0
    assert safeguarded_newton(lambda x: x - 2.0, lambda x: 1.0, 1.0, 2.0) == 2.0


def test_newton_without_sign_change_raises() -> None:
    with pytest.raises(RootFindingError):
        safeguarded_newton(lambda x: x * x + 1, lambda x: 2 * x, 0.0, 1.0)


def test_newton_iteration_budget() -> None:
    with pytest.raises(RootFindingError):
        safeguarded_newton(
            lambda x: math.atan(x - 3.0),
            lambda x: 1.0 / (1.0 + (x - 3.0) ** 2),
            0.0,
            20.0,
            max_iterations=2,
        )


def test_golden_section_finds_maximum() -> None:
    x = golden_section_max(lambda t: -(t - 0.3) ** 2, 0.0, 1.0)
    assert x == pytest.approx(0.3, abs=1e-6)
    y = golden_section_max(lambda t: -(t - QuadFloat("0.7")) ** 2, QuadFloat(0), QuadFloat(1))
    assert isinstance(y, QuadFloat)
    assert abs(y - QuadFloat("0.7")) < QuadFloat("1e-9")
