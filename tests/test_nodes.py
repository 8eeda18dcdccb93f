import pytest

from laplace_minimax.error_function import ErrorNorm
from laplace_minimax.nodes import NodeSet
from quadfloat import QuadFloat, exp


def _nodes(norm: ErrorNorm = ErrorNorm.ABSOLUTE) -> NodeSet:
    return NodeSet(
        weights=(QuadFloat("0.5"), QuadFloat(2)),
        exponents=(QuadFloat("0.25"), QuadFloat(1)),
        max_error=QuadFloat("1e-3"),
        iterations=4,
        points=(QuadFloat(1), QuadFloat(2), QuadFloat(4), QuadFloat(6), QuadFloat(8)),
        norm=norm,
    )


def test_evaluate_sums_exponentials() -> None:
    nodes = _nodes()
    assert nodes.order == 2
    x = QuadFloat(3)
    assert nodes.evaluate(x) == QuadFloat("0.5") * exp(QuadFloat("-0.75")) + 2 * exp(-x)


def test_scaling_absolute_error() -> None:
    scaled = _nodes().scaled(2)
    assert scaled.weights == (QuadFloat("0.25"), QuadFloat(1))
    assert scaled.exponents == (QuadFloat("0.125"), QuadFloat("0.5"))
    assert scaled.points[0] == 2 and scaled.points[-1] == 16
    assert scaled.max_error == QuadFloat("5e-4")
    assert scaled.iterations == 4


def test_scaling_keeps_relative_error() -> None:
    scaled = _nodes(ErrorNorm.RELATIVE).scaled(2)
    assert scaled.max_error == QuadFloat("1e-3")
    assert scaled.norm is ErrorNorm.RELATIVE


def test_arrays_are_read_only_float64() -> None:
    nodes = _nodes()
    weights = nodes.weights_array()
    assert weights.dtype.name == "float64"
    assert weights.tolist() == [0.5, 2.0]
    assert nodes.exponents_array().tolist() == [0.25, 1.0]
    with pytest.raises(ValueError):
        weights[0] = 1.0


@pytest.mark.parametrize(
    "weights, exponents",
    [
        ((), ()),
        ((QuadFloat(1),), (QuadFloat(1), QuadFloat(2))),
        ((QuadFloat(1), QuadFloat(1)), (QuadFloat(2), QuadFloat(1))),
        ((QuadFloat(1), QuadFloat(1)), (QuadFloat(1), QuadFloat(1))),
    ],
)
def test_invalid_node_sets(weights, exponents) -> None:
    with pytest.raises(ValueError):
        NodeSet(weights, exponents, QuadFloat(0), 0, ())
