"""Remez-type exchange for best exponential-sum approximation of ``1/x``.

Each iteration has two steps, both carried out in quad precision:

levelling
    For the current alternation points ``x_0 < ... < x_2k`` solve the
    2k+1 nonlinear equations ``e(x_j) = (-1)**j E`` for ``log w``, ``log a``
    and the levelled error ``E`` with damped Newton.
exchange
    Replace the points by the extrema of the new error curve. The right end
    of the interval is free: once the interval is long enough the last
    alternation point moves inside it.

The iteration stops when the error at the new extrema exceeds ``|E|`` by no
more than ``tolerance * |E|``. Errors so small that quad rounding in the
error curve is a visible fraction of them raise that threshold to the
rounding level.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Sequence

import numpy as np

from quadfloat import EPSILON, QuadFloat, SingularMatrixError, exp
from quadfloat.context import QUAD
from quadfloat.linalg import solve

from . import constants as C
from .error_function import ErrorFunction, ErrorNorm
from .nodes import NodeSet
from .roots import RootFindingError

if TYPE_CHECKING:  # pragma: no cover
    from .initial_guess import StartingPoint

__all__ = ["ConvergenceError", "IterationReport", "exchange", "level", "residual_floor"]

logger = logging.getLogger(__name__)


class ConvergenceError(RuntimeError):
    """The exchange did not reach equioscillation."""


@dataclass(frozen=True)
class IterationReport:
    iteration: int
    levelled_error: QuadFloat
    max_error: QuadFloat
    ripple: QuadFloat


@dataclass(frozen=True)
class _Levelled:
    log_weights: tuple[QuadFloat, ...]
    log_exponents: tuple[QuadFloat, ...]
    error: QuadFloat
    steps: int


def residual_floor(k: int) -> QuadFloat:
    """Rounding level of a k-term error curve evaluated in quad precision."""
    return EPSILON * max(C.NEWTON_FLOOR_PER_TERM * k, C.NEWTON_FLOOR_MIN)


def _system(
    points: Sequence[QuadFloat],
    params: Sequence[QuadFloat],
    norm: ErrorNorm,
) -> tuple[list[QuadFloat], np.ndarray]:
    """Residuals ``e(x_j) - (-1)**j E`` and their Jacobian."""
    k = (len(params) - 1) // 2
    # raw mpmath numbers in the quad context; this is the innermost loop
    weights = [QUAD.exp(b.to_mpf()) for b in params[:k]]
    exponents = [QUAD.exp(a.to_mpf()) for a in params[k:2 * k]]
    level_error = params[-1].to_mpf()
    one = QUAD.mpf(1)
    residuals = []
    jacobian = np.empty((len(points), len(params)), dtype=object)
    for j, point in enumerate(points):
        x = point.to_mpf()
        sign = 1 if j % 2 == 0 else -1
        scale = one if norm is ErrorNorm.ABSOLUTE else x
        total = QUAD.mpf(0)
        for i, (w, a) in enumerate(zip(weights, exponents)):
            term = w * QUAD.exp(-a * x)
            total += term
            jacobian[j, i] = QuadFloat.from_mpf(-term * scale)
            jacobian[j, k + i] = QuadFloat.from_mpf(term * a * x * scale)
        jacobian[j, 2 * k] = QuadFloat(-sign)
        value = one / x - total if norm is ErrorNorm.ABSOLUTE else one - x * total
        residuals.append(QuadFloat.from_mpf(value - sign * level_error))
    return residuals, jacobian


def _sum_squares(values: Sequence[QuadFloat]) -> QuadFloat:
    total = QuadFloat(0)
    for v in values:
        total += v * v
    return total


def _max_abs(values: Sequence[QuadFloat]) -> QuadFloat:
    return max(abs(v) for v in values)


def level(
    points: Sequence[QuadFloat],
    log_weights: Sequence[QuadFloat],
    log_exponents: Sequence[QuadFloat],
    norm: ErrorNorm = ErrorNorm.ABSOLUTE,
    *,
    max_steps: int = C.NEWTON_MAX_STEPS,
) -> _Levelled:
    """Damped Newton on the levelling equations at fixed ``points``.

    Newton stops as soon as the residual is down to the rounding floor or to
    ``NEWTON_STALL_RTOL * |E|``, whichever is larger.

    Raises:
        ConvergenceError: singular Jacobian, a line search that cannot reduce
            the residual, or no convergence within ``max_steps``.
    """
    k = len(log_weights)
    if len(points) != 2 * k + 1:
        raise ValueError(f"need {2 * k + 1} alternation points, got {len(points)}")

    fn = ErrorFunction([exp(b) for b in log_weights], [exp(a) for a in log_exponents], norm)
    start_error = QuadFloat(0)
    for j, x in enumerate(points):
        start_error += fn(x) if j % 2 == 0 else -fn(x)
    params = [*log_weights, *log_exponents, start_error / len(points)]

    floor = residual_floor(k)
    residuals, jacobian = _system(points, params, norm)
    size = _sum_squares(residuals)

    def settled() -> bool:
        return _max_abs(residuals) <= max(floor, C.NEWTON_STALL_RTOL * abs(params[-1]))

    step = 0
    for step in range(max_steps):
        if settled():
            break
        try:
            delta = solve(jacobian, [-r for r in residuals])
        except SingularMatrixError as exc:
            raise ConvergenceError("levelling system is singular") from exc

        scale = QuadFloat(1)
        for _ in range(C.NEWTON_MAX_HALVINGS):
            trial = [p + scale * d for p, d in zip(params, delta)]
            trial_residuals, trial_jacobian = _system(points, trial, norm)
            trial_size = _sum_squares(trial_residuals)
            if trial_size < size:
                break
            scale = scale / 2
        else:
            if _max_abs(residuals) <= C.NEWTON_NOISE_RTOL * abs(params[-1]):
                # no descent left above the rounding noise of the residuals
                break
            raise ConvergenceError(
                f"levelling line search stalled at residual {float(_max_abs(residuals)):.3e}"
            )

        params, residuals, jacobian, size = trial, trial_residuals, trial_jacobian, trial_size
        logger.debug(
            "[laplace-minimax] newton step %d: damping %s, residual %.3e",
            step + 1,
            float(scale),
            float(_max_abs(residuals)),
        )
        if scale == 1 and _max_abs(delta) <= C.NEWTON_STEP_TOL:
            break
    else:
        if not settled():
            raise ConvergenceError(
                f"levelling did not converge in {max_steps} Newton steps "
                f"(residual {float(_max_abs(residuals)):.3e})"
            )

    return _Levelled(tuple(params[:k]), tuple(params[k:2 * k]), params[-1], step + 1)


def _sorted_pairs(levelled: _Levelled) -> tuple[list[QuadFloat], list[QuadFloat]]:
    pairs = sorted(zip(levelled.log_exponents, levelled.log_weights), key=lambda p: p[0])
    return [b for _, b in pairs], [a for a, _ in pairs]


def exchange(
    ratio: Any,
    start: "StartingPoint",
    norm: ErrorNorm = ErrorNorm.ABSOLUTE,
    *,
    tolerance: float = C.DEFAULT_TOLERANCE,
    max_iterations: int = C.DEFAULT_MAX_ITERATIONS,
    on_iteration: Callable[[IterationReport], None] | None = None,
) -> NodeSet:
    """Best approximation on ``[1, ratio]`` starting from ``start``.

    Raises:
        ConvergenceError: no equioscillation within ``max_iterations``, or the
            levelling/exchange broke down on the way.
    """
    if max_iterations < 1:
        raise ValueError("max_iterations must be at least 1")
    ratio = QuadFloat(ratio)
    points = [QuadFloat(float(p)) for p in start.points]
    points[0] = QuadFloat(1)
    if not start.detached or points[-1] > ratio:
        points[-1] = ratio
    if any(b <= a for a, b in zip(points, points[1:])):
        raise ConvergenceError("alternation points are not increasing")
    log_weights = [QuadFloat(float(b)) for b in start.log_weights]
    log_exponents = [QuadFloat(float(a)) for a in start.log_exponents]
    k = len(log_weights)

    for iteration in range(1, max_iterations + 1):
        levelled = level(points, log_weights, log_exponents, norm)
        log_weights, log_exponents = _sorted_pairs(levelled)
        weights = [exp(b) for b in log_weights]
        exponents = [exp(a) for a in log_exponents]
        if levelled.error == 0:
            raise ConvergenceError("levelled error vanished")

        fn = ErrorFunction(weights, exponents, norm)
        try:
            points = fn.extrema(points, upper=ratio)
        except RootFindingError as exc:
            raise ConvergenceError(f"alternation lost in iteration {iteration}: {exc}") from exc

        values = [fn(x) for x in points]
        deviation = _max_abs(values)
        ripple = abs(deviation - abs(levelled.error)) / abs(levelled.error)
        alternating = all((a > 0) != (b > 0) for a, b in zip(values, values[1:]))
        report = IterationReport(iteration, abs(levelled.error), deviation, ripple)
        if on_iteration is not None:
            on_iteration(report)
        logger.debug(
            "[laplace-minimax] iteration %d: %d newton steps, |E|=%.6e, ripple %.3e",
            iteration,
            levelled.steps,
            float(report.levelled_error),
            float(ripple),
        )

        threshold = max(QuadFloat(tolerance), residual_floor(k) / abs(levelled.error))
        if alternating and ripple <= threshold:
            if any(b <= a for a, b in zip(exponents, exponents[1:])):
                raise ConvergenceError("exponents collapsed onto each other")
            return NodeSet(
                weights=tuple(weights),
                exponents=tuple(exponents),
                max_error=deviation,
                iterations=iteration,
                points=tuple(points),
                norm=norm,
            )

    raise ConvergenceError(
        f"no equioscillation after {max_iterations} iterations "
        f"(ripple {float(ripple):.3e}, tolerance {tolerance:.1e})"
    )
