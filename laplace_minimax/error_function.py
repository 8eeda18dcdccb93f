"""Error curve of an exponential sum against ``1/x``.

With ``s(x) = sum_i w_i exp(-a_i x)`` the error is either

* absolute: ``eta(x) = 1/x - s(x)``, or
* relative: ``g(x) = 1 - x s(x) = x eta(x)``.

Both have the same zeros. For k terms there are at most 2k of them, so a
best approximation has 2k+1 alternation points. The left end point is always
one of them; the right end point only while the interval is short enough
for the k-term approximation to use all of it.
"""
from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Any, Sequence

from quadfloat import QuadFloat
from quadfloat.context import QUAD

from .roots import RootFindingError, golden_section_max, safeguarded_newton

if TYPE_CHECKING:  # pragma: no cover
    from .nodes import NodeSet

__all__ = ["ErrorFunction", "ErrorNorm"]


def _quad(x: Any) -> QuadFloat:
    return x if isinstance(x, QuadFloat) else QuadFloat(x)


class ErrorNorm(str, enum.Enum):
    ABSOLUTE = "absolute"
    RELATIVE = "relative"


class ErrorFunction:
    """Error of ``sum_i w_i exp(-a_i x)`` with first and second derivatives."""

    def __init__(
        self,
        weights: Sequence[Any],
        exponents: Sequence[Any],
        norm: ErrorNorm = ErrorNorm.ABSOLUTE,
    ) -> None:
        if len(weights) != len(exponents):
            raise ValueError("weights and exponents must have equal length")
        self.weights = tuple(QuadFloat(w) for w in weights)
        self.exponents = tuple(QuadFloat(a) for a in exponents)
        self.norm = ErrorNorm(norm)
        self._raw = [(w.to_mpf(), a.to_mpf()) for w, a in zip(self.weights, self.exponents)]
        self._cached: tuple[Any, tuple[QuadFloat, QuadFloat, QuadFloat]] | None = None

    @classmethod
    def from_nodes(cls, nodes: "NodeSet") -> "ErrorFunction":
        return cls(nodes.weights, nodes.exponents, nodes.norm)

    def _moments(self, x: QuadFloat) -> tuple[QuadFloat, QuadFloat, QuadFloat]:
        # sum t_i, sum a_i t_i, sum a_i^2 t_i with t_i = w_i exp(-a_i x)
        if self._cached is not None and self._cached[0] is x:
            return self._cached[1]
        raw_x = x.to_mpf()
        s0 = s1 = s2 = QUAD.mpf(0)
        for w, a in self._raw:
            t = w * QUAD.exp(-a * raw_x)
            s0 += t
            s1 += a * t
            s2 += a * a * t
        moments = (QuadFloat.from_mpf(s0), QuadFloat.from_mpf(s1), QuadFloat.from_mpf(s2))
        self._cached = (x, moments)
        return moments

    def value(self, x: Any) -> QuadFloat:
        x = _quad(x)
        s0, _, _ = self._moments(x)
        if self.norm is ErrorNorm.ABSOLUTE:
            return 1 / x - s0
        return 1 - x * s0

    __call__ = value

    def derivative(self, x: Any) -> QuadFloat:
        x = _quad(x)
        s0, s1, _ = self._moments(x)
        if self.norm is ErrorNorm.ABSOLUTE:
            return s1 - 1 / (x * x)
        return x * s1 - s0

    def second_derivative(self, x: Any) -> QuadFloat:
        x = _quad(x)
        _, s1, s2 = self._moments(x)
        if self.norm is ErrorNorm.ABSOLUTE:
            return 2 / (x * x * x) - s2
        return 2 * s1 - x * s2

    # ------------------------------------------------------------------
    # alternation structure

    def zeros(self, points: Sequence[Any]) -> list[QuadFloat]:
        """One zero between each pair of consecutive alternating points."""
        points = [_quad(p) for p in points]
        return [
            safeguarded_newton(self.value, self.derivative, left, right)
            for left, right in zip(points, points[1:])
        ]

    def _lobe_extremum(self, left: QuadFloat, right: QuadFloat) -> QuadFloat:
        try:
            return safeguarded_newton(self.derivative, self.second_derivative, left, right)
        except RootFindingError:
            return golden_section_max(lambda t: abs(self.value(t)), left, right)

    def extrema(self, points: Sequence[Any], upper: Any = None) -> list[QuadFloat]:
        """The alternation points of the current curve.

        ``points`` must alternate in sign. The first point is kept and every
        interior point is replaced by the extremum of the lobe around it.

        Without ``upper`` the last point is kept as well. With ``upper`` the
        last lobe runs from the last zero to ``upper`` and its point is
        whichever of ``upper`` and an interior extremum has the larger error:
        once the interval is long enough the best approximation on it is the
        one on ``[1, inf)`` and the right end point drops out of the
        alternation set.
        """
        points = [_quad(p) for p in points]
        zeros = self.zeros(points)
        interior = [self._lobe_extremum(left, right) for left, right in zip(zeros, zeros[1:])]
        if upper is None:
            return [points[0], *interior, points[-1]]

        upper = _quad(upper)
        last = upper
        slope_left, slope_right = self.derivative(zeros[-1]), self.derivative(upper)
        if slope_right != 0 and (slope_left > 0) != (slope_right > 0):
            candidate = safeguarded_newton(
                self.derivative, self.second_derivative, zeros[-1], upper
            )
            if abs(self.value(candidate)) > abs(self.value(upper)):
                last = candidate
        return [points[0], *interior, last]

    def ripple(self, points: Sequence[Any]) -> QuadFloat:
        """Relative spread ``(max|e| - min|e|) / max|e|`` of the error at ``points``."""
        magnitudes = [abs(self.value(p)) for p in points]
        largest = max(magnitudes)
        if not largest:
            return QuadFloat(0)
        return (largest - min(magnitudes)) / largest

    def is_equioscillating(self, points: Sequence[Any], tolerance: Any) -> bool:
        """Alternating signs and magnitudes equal to within ``tolerance``."""
        values = [self.value(p) for p in points]
        if any(v == 0 for v in values):
            return False
        if any((a > 0) == (b > 0) for a, b in zip(values, values[1:])):
            return False
        return self.ripple(points) <= tolerance

    def max_abs_error(self, samples: Sequence[Any]) -> QuadFloat:
        return max(abs(self.value(x)) for x in samples)
