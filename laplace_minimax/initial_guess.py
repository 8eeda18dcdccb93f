"""Double-precision exchange that produces starting points for the quad stage.

Everything here works on the normalized interval ``[1, R]`` in numpy
``float64`` and on the log-parameters ``log w`` and ``log a``. The levelling
equations are solved with :func:`scipy.optimize.least_squares`, whose bound
on ``log a`` keeps the smallest exponent from drifting to zero while the
alternation points are still far from the final ones. Zeros and lobe extrema
of the error curve come from :func:`scipy.optimize.brentq`.

Orders are built up one term at a time:

* k = 1 from a closed form,
* k = 2 by splitting the single term,
* k > 2 by resampling the (k-1)-term solution onto k terms, or, when the
  (k-2)-term solution at the same ``R`` is known as well, by extrapolating
  linearly in k from both.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

import numpy as np
from scipy.optimize import brentq, least_squares

from . import constants as C
from .error_function import ErrorNorm
from .remez import ConvergenceError

if TYPE_CHECKING:  # pragma: no cover
    from .nodes import NodeSet

__all__ = [
    "StartingPoint",
    "error_curve",
    "exchange",
    "extrema",
    "first_order",
    "insert_term",
    "level",
    "second_order",
]

logger = logging.getLogger(__name__)

_EPS = np.finfo(np.float64).eps


@dataclass(frozen=True)
class StartingPoint:
    """k-term sum on ``[1, ratio]`` with its 2k+1 alternation points.

    ``error`` is the largest error magnitude at ``points`` once the sum has
    been through an exchange, NaN for a bare prediction.
    """

    log_weights: np.ndarray
    log_exponents: np.ndarray
    points: np.ndarray
    ratio: float
    error: float = math.nan

    def __post_init__(self) -> None:
        for name in ("log_weights", "log_exponents", "points"):
            object.__setattr__(self, name, np.asarray(getattr(self, name), dtype=np.float64))
        k = len(self.log_weights)
        if k < 1 or len(self.log_exponents) != k:
            raise ValueError("log_weights and log_exponents must be non-empty and of equal length")
        if len(self.points) != 2 * k + 1:
            raise ValueError(f"need {2 * k + 1} alternation points, got {len(self.points)}")

    @property
    def order(self) -> int:
        return len(self.log_weights)

    @property
    def weights(self) -> np.ndarray:
        return np.exp(self.log_weights)

    @property
    def exponents(self) -> np.ndarray:
        return np.exp(self.log_exponents)

    @property
    def detached(self) -> bool:
        """The last alternation point lies inside the interval."""
        return bool(self.points[-1] < self.ratio * (1 - 1e-12))

    def vector(self) -> np.ndarray:
        """``[log w, log a, log x_j]`` as one array."""
        return np.concatenate([self.log_weights, self.log_exponents, np.log(self.points)])

    @classmethod
    def from_nodes(cls, nodes: "NodeSet", ratio: float) -> "StartingPoint":
        """Double-precision copy of a quad result on ``[1, ratio]``."""
        return cls(
            np.log([float(w) for w in nodes.weights]),
            np.log([float(a) for a in nodes.exponents]),
            [float(x) for x in nodes.points],
            ratio,
            float(nodes.max_error),
        )

    @classmethod
    def from_vector(cls, vector: np.ndarray, ratio: float) -> "StartingPoint":
        """Inverse of :meth:`vector`; the end points are pinned to ``[1, ratio]``."""
        k = (len(vector) - 1) // 3
        points = np.exp(vector[2 * k:])
        points[0] = 1.0
        points[-1] = min(points[-1], ratio)
        return cls(vector[:k], vector[k:2 * k], points, ratio)


def error_curve(
    weights: np.ndarray, exponents: np.ndarray, x: np.ndarray, norm: ErrorNorm
) -> np.ndarray:
    """Error of the exponential sum at every sample in ``x``."""
    with np.errstate(over="ignore", under="ignore", invalid="ignore"):
        s = np.exp(-np.outer(x, exponents)) @ weights
    if norm is ErrorNorm.ABSOLUTE:
        return 1.0 / x - s
    return 1.0 - x * s


def _curve(
    log_weights: np.ndarray, log_exponents: np.ndarray, norm: ErrorNorm
) -> tuple[Callable[[float], float], Callable[[float], float]]:
    weights, exponents = np.exp(log_weights), np.exp(log_exponents)

    def value(x: float) -> float:
        s = float(weights @ np.exp(-exponents * x))
        return 1.0 / x - s if norm is ErrorNorm.ABSOLUTE else 1.0 - x * s

    def slope(x: float) -> float:
        t = weights * np.exp(-exponents * x)
        if norm is ErrorNorm.ABSOLUTE:
            return float(exponents @ t) - 1.0 / (x * x)
        return x * float(exponents @ t) - float(t.sum())

    return value, slope


# ----------------------------------------------------------------------
# levelling


def _levelling_system(points: np.ndarray, k: int, norm: ErrorNorm):
    signs = np.where(np.arange(len(points)) % 2 == 0, 1.0, -1.0)
    scale = np.ones_like(points) if norm is ErrorNorm.ABSOLUTE else points

    def terms(p: np.ndarray) -> np.ndarray:
        with np.errstate(over="ignore", under="ignore"):
            return np.exp(p[:k] - np.outer(points, np.exp(p[k:2 * k])))

    def residuals(p: np.ndarray) -> np.ndarray:
        s = terms(p).sum(axis=1)
        value = 1.0 / points - s if norm is ErrorNorm.ABSOLUTE else 1.0 - points * s
        return value - signs * p[-1]

    def jacobian(p: np.ndarray) -> np.ndarray:
        t = terms(p) * scale[:, None]
        return np.hstack([-t, t * np.outer(points, np.exp(p[k:2 * k])), -signs[:, None]])

    return residuals, jacobian


def level(
    points: np.ndarray,
    log_weights: np.ndarray,
    log_exponents: np.ndarray,
    ratio: float,
    norm: ErrorNorm = ErrorNorm.ABSOLUTE,
) -> tuple[np.ndarray, np.ndarray, float]:
    """Solve ``e(x_j) = (-1)**j E`` in the least-squares sense.

    Returns ``(log w, log a, E)`` with the terms sorted by exponent. A point
    where the residual cannot be reduced further is accepted as it is; the
    following exchange step moves the points and usually frees it.
    """
    k = len(log_weights)
    points = np.asarray(points, dtype=np.float64)
    value, _ = _curve(log_weights, log_exponents, norm)
    signs = np.where(np.arange(len(points)) % 2 == 0, 1.0, -1.0)
    start_error = float(np.mean(signs * np.array([value(x) for x in points])))

    lower = np.full(2 * k + 1, -np.inf)
    lower[k:2 * k] = math.log(C.EXPONENT_FLOOR / ratio)
    x0 = np.concatenate([log_weights, log_exponents, [start_error]])
    x0 = np.maximum(x0, lower)

    residuals, jacobian = _levelling_system(points, k, norm)
    result = least_squares(
        residuals,
        x0,
        jac=jacobian,
        bounds=(lower, np.inf),
        method="trf",
        x_scale="jac",
        ftol=C.FLOAT_LEVEL_TOL,
        xtol=C.FLOAT_LEVEL_TOL,
        gtol=C.FLOAT_LEVEL_TOL,
    )
    if not np.all(np.isfinite(result.x)):
        raise ConvergenceError("double-precision levelling produced non-finite parameters")
    logger.debug(
        "[laplace-minimax] float levelling: %d evaluations, residual %.3e",
        result.nfev,
        float(np.max(np.abs(result.fun))),
    )
    order = np.argsort(result.x[k:2 * k])
    return result.x[:k][order], result.x[k:2 * k][order], float(result.x[-1])


# ----------------------------------------------------------------------
# exchange


def _lobe_extremum(
    value: Callable[[float], float], slope: Callable[[float], float], left: float, right: float
) -> float:
    if (slope(left) > 0) != (slope(right) > 0):
        return brentq(slope, left, right, xtol=1e-300, rtol=4 * _EPS)
    samples = np.geomspace(left, right, C.LOBE_SAMPLES)
    return float(samples[np.argmax([abs(value(x)) for x in samples])])


def extrema(
    points: np.ndarray,
    log_weights: np.ndarray,
    log_exponents: np.ndarray,
    ratio: float,
    norm: ErrorNorm = ErrorNorm.ABSOLUTE,
) -> np.ndarray:
    """New alternation points: 1, the interior lobe extrema and the free right end.

    The last lobe runs from the last zero to ``ratio``; its point is an
    interior extremum when that one has the larger error.
    """
    value, slope = _curve(log_weights, log_exponents, norm)
    values = [value(x) for x in points]
    if any((a > 0) == (b > 0) for a, b in zip(values, values[1:])):
        raise ConvergenceError("double-precision error curve lost its alternation")
    zeros = [
        brentq(value, left, right, xtol=1e-300, rtol=4 * _EPS)
        for left, right in zip(points, points[1:])
    ]
    interior = [_lobe_extremum(value, slope, a, b) for a, b in zip(zeros, zeros[1:])]
    last = _lobe_extremum(value, slope, zeros[-1], ratio)
    if abs(value(last)) <= abs(value(ratio)):
        last = ratio
    return np.array([1.0, *interior, last])


def exchange(
    start: StartingPoint,
    norm: ErrorNorm = ErrorNorm.ABSOLUTE,
    *,
    tolerance: float = C.FLOAT_RIPPLE_TOLERANCE,
    max_iterations: int = C.FLOAT_MAX_ITERATIONS,
) -> StartingPoint:
    """Double-precision exchange from ``start`` until the ripple is below ``tolerance``."""
    ratio = start.ratio
    log_weights, log_exponents, points = start.log_weights, start.log_exponents, start.points
    if np.any(np.diff(points) <= 0):
        raise ConvergenceError("alternation points are not increasing")
    for iteration in range(1, max_iterations + 1):
        log_weights, log_exponents, level_error = level(
            points, log_weights, log_exponents, ratio, norm
        )
        if level_error == 0:
            raise ConvergenceError("levelled error vanished")
        try:
            points = extrema(points, log_weights, log_exponents, ratio, norm)
        except ValueError as exc:
            raise ConvergenceError(f"double-precision exchange broke down: {exc}") from exc
        deviation = float(np.max(np.abs(error_curve(
            np.exp(log_weights), np.exp(log_exponents), points, norm
        ))))
        ripple = (deviation - abs(level_error)) / abs(level_error)
        logger.debug(
            "[laplace-minimax] float exchange k=%d R=%.6g iteration %d: |E|=%.6e, ripple %.3e",
            len(log_weights),
            ratio,
            iteration,
            abs(level_error),
            ripple,
        )
        if ripple <= tolerance:
            return StartingPoint(log_weights, log_exponents, points, ratio, deviation)
    raise ConvergenceError(
        f"double-precision exchange did not settle in {max_iterations} iterations "
        f"(k={len(log_weights)}, R={ratio:.6g}, ripple {ripple:.3e})"
    )


# ----------------------------------------------------------------------
# orders


def first_order(ratio: float) -> StartingPoint:
    """Single-term start ``a = log R / (R - 1)`` on ``[1, ratio]``."""
    a = math.log(ratio) / (ratio - 1.0)
    return StartingPoint([a], [math.log(a)], [1.0, math.sqrt(ratio), ratio], ratio)


def second_order(first: StartingPoint) -> StartingPoint:
    """Split the single term of ``first`` into two."""
    lw, la = first.log_weights[0], first.log_exponents[0]
    shift = C.SECOND_ORDER_EXPONENT_SHIFT
    low, high = C.SECOND_ORDER_WEIGHT_SHIFTS
    points = first.ratio ** np.array(C.SECOND_ORDER_POINTS)
    points[0], points[-1] = 1.0, first.ratio
    return StartingPoint([lw + low, lw + high], [la - shift, la + shift], points, first.ratio)


def _resample(values: np.ndarray, m: int) -> np.ndarray:
    # values sit at (i + 1/2) / n of the unit interval; linear, extrapolated at the ends
    n = len(values)
    u = (np.arange(m) + 0.5) * n / m - 0.5
    lo = np.clip(np.floor(u).astype(int), 0, n - 2)
    t = u - lo
    return values[lo] * (1 - t) + values[lo + 1] * t


def _resample_points(log_points: np.ndarray, m: int) -> np.ndarray:
    n = len(log_points)
    u = np.arange(m) * (n - 1) / (m - 1)
    lo = np.minimum(np.floor(u).astype(int), n - 2)
    t = u - lo
    return log_points[lo] * (1 - t) + log_points[lo + 1] * t


def _spread(solution: StartingPoint, k: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """``log a``, ``log w - log a`` and ``log x_j`` resampled onto k terms."""
    return (
        _resample(solution.log_exponents, k),
        _resample(solution.log_weights - solution.log_exponents, k),
        _resample_points(np.log(solution.points), 2 * k + 1),
    )


def _fitted_log_weights(exponents: np.ndarray, ratio: float, norm: ErrorNorm) -> np.ndarray | None:
    x = np.geomspace(1.0, ratio, C.FIT_SAMPLES_PER_TERM * len(exponents) + C.FIT_SAMPLES_BASE)
    basis = np.exp(-np.outer(x, exponents))
    if norm is ErrorNorm.ABSOLUTE:
        weights = np.linalg.lstsq(basis, 1.0 / x, rcond=None)[0]
    else:
        weights = np.linalg.lstsq(basis * x[:, None], np.ones_like(x), rcond=None)[0]
    if np.any(weights <= 0):
        return None
    return np.log(weights)


def insert_term(
    previous: StartingPoint,
    before: StartingPoint | None = None,
    norm: ErrorNorm = ErrorNorm.ABSOLUTE,
) -> StartingPoint:
    """Predicted (k+1)-term start on ``previous.ratio`` from the k-term solution.

    With ``before``, the (k-1)-term solution on the same interval, every
    resampled quantity is extrapolated linearly in k. Without it the
    exponents are resampled and the weights fitted by linear least squares,
    falling back to resampled weight-to-exponent ratios if the fit has a
    non-positive weight.
    """
    k = previous.order + 1
    ratio = previous.ratio
    if k == 2:
        return second_order(previous)
    log_exponents, log_quotients, log_points = _spread(previous, k)
    if before is not None:
        old_exponents, old_quotients, old_points = _spread(before, k)
        log_exponents = 2 * log_exponents - old_exponents
        log_weights = 2 * log_quotients - old_quotients + log_exponents
        log_points = 2 * log_points - old_points
    else:
        log_weights = _fitted_log_weights(np.exp(log_exponents), ratio, norm)
        if log_weights is None:
            logger.debug("[laplace-minimax] weight fit for k=%d not positive, resampling", k)
            log_weights = log_quotients + log_exponents
    points = np.exp(log_points)
    points[0], points[-1] = 1.0, ratio
    return StartingPoint(log_weights, log_exponents, points, ratio)
