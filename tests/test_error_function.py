import numpy as np
import pytest

from laplace_minimax.error_function import ErrorFunction, ErrorNorm
from laplace_minimax.nodes import NodeSet
from laplace_minimax.reference import K3_CASE
from quadfloat import QuadFloat

# Alternation points and zeros of the tabulated k=3 solution on [4, 8]
K3_POINTS = ["4", "4.1818", "4.72329", "5.59087", "6.65474", "7.60509", "8"]
K3_ZEROS = [4.04548, 4.40843, 5.12112, 6.11271, 7.17125, 7.89683]
K3_LEVEL = 4.5858e-7


def _k3(norm: ErrorNorm = ErrorNorm.ABSOLUTE) -> ErrorFunction:
    return ErrorFunction(K3_CASE.weights, K3_CASE.exponents, norm)


def test_absolute_and_relative_errors_are_related() -> None:
    absolute, relative = _k3(), _k3(ErrorNorm.RELATIVE)
    for x in (QuadFloat(4), QuadFloat("5.5"), QuadFloat(8)):
        assert abs(relative(x) - x * absolute(x)) < QuadFloat("1e-30")
        assert abs(
            relative.derivative(x) - (absolute(x) + x * absolute.derivative(x))
        ) < QuadFloat("1e-30")


@pytest.mark.parametrize("norm", list(ErrorNorm))
def test_derivatives_match_central_differences(norm: ErrorNorm) -> None:
    fn = _k3(norm)
    x, h = QuadFloat("5.3"), QuadFloat("1e-12")
    slope = (fn(x + h) - fn(x - h)) / (2 * h)
    curvature = (fn.derivative(x + h) - fn.derivative(x - h)) / (2 * h)
    assert abs(slope - fn.derivative(x)) < QuadFloat("1e-18")
    assert abs(curvature - fn.second_derivative(x)) < QuadFloat("1e-18")


def test_zeros_between_alternation_points() -> None:
    zeros = _k3().zeros(K3_POINTS)
    assert len(zeros) == 6
    for zero, expected in zip(zeros, K3_ZEROS):
        assert float(zero) == pytest.approx(expected, abs=1e-4)
        assert abs(_k3()(zero)) < QuadFloat("1e-30")


def test_extrema_keep_end_points() -> None:
    fn = _k3()
    extrema = fn.extrema(K3_POINTS)
    assert len(extrema) == 7
    assert extrema[0] == 4 and extrema[-1] == 8
    for got, expected in zip(extrema[1:-1], K3_POINTS[1:-1]):
        assert float(got) == pytest.approx(float(expected), abs=1e-3)
        assert abs(fn.derivative(got)) < QuadFloat("1e-22")


def test_reference_solution_equioscillates_in_absolute_error() -> None:
    absolute = _k3()
    assert absolute.is_equioscillating(K3_POINTS, 1e-3)
    assert float(absolute.max_abs_error(np.linspace(4.0, 8.0, 2001))) == pytest.approx(
        K3_LEVEL, rel=1e-3
    )
    # in relative error the same curve is far from level
    assert not _k3(ErrorNorm.RELATIVE).is_equioscillating(K3_POINTS, 0.1)


def test_equioscillation_needs_alternating_signs() -> None:
    fn = _k3()
    assert not fn.is_equioscillating(["4", "4.72329", "6.65474"], 1e-3)
    assert fn.ripple(["4", "8"]) < QuadFloat("1e-3")


def test_from_nodes() -> None:
    nodes = NodeSet(
        weights=(QuadFloat(1),),
        exponents=(QuadFloat(2),),
        max_error=QuadFloat(0),
        iterations=0,
        points=(),
        norm=ErrorNorm.RELATIVE,
    )
    fn = ErrorFunction.from_nodes(nodes)
    assert fn.norm is ErrorNorm.RELATIVE
    assert fn.weights == (1,) and fn.exponents == (2,)


def test_mismatched_parameters() -> None:
    with pytest.raises(ValueError):
        ErrorFunction([1, 2], [1])
