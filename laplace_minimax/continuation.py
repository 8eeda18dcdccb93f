"""Continuation paths from an easy problem to the requested one.

Best approximations with many terms are only reached by Newton from a start
that is already close. Two parameters are continued:

ratio
    :func:`move_ratio` walks from a solution on ``[1, R0]`` to ``[1, R1]``
    in steps in ``log R``. The start of each step is extrapolated linearly
    from the last two solutions; the step grows after a success and is
    halved after a failure.
order
    :func:`float_path` adds one term at a time in double precision. Order k
    is inserted on ``[1, min(R, 2**(k-1))]``. Once an insertion fails there,
    every later order is inserted on ``[1, 2**(k-1)]`` itself, where the
    error is large enough for double precision, and the path moves to
    ``R`` at the end.

:func:`minimax` puts the pieces together for the solver: a tabulated start
when there is one, otherwise the double-precision path, then quad-precision
continuation to ``R`` and a final exchange at the requested tolerance.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Callable

from quadfloat import QuadFloat

from . import constants as C
from . import initial_guess, tables
from .error_function import ErrorNorm
from .initial_guess import StartingPoint
from .nodes import NodeSet
from .remez import ConvergenceError, IterationReport, exchange

__all__ = ["float_path", "minimax", "move_ratio", "quad_move"]

logger = logging.getLogger(__name__)

Solve = Callable[[StartingPoint], StartingPoint]


def _predict(current: StartingPoint, previous: StartingPoint | None, ratio: float) -> StartingPoint:
    vector = current.vector()
    if previous is not None:
        here = math.log(current.ratio)
        slope = (math.log(ratio) - here) / (here - math.log(previous.ratio))
        vector = vector + slope * (vector - previous.vector())
    return StartingPoint.from_vector(vector, ratio)


def move_ratio(
    current: StartingPoint,
    target: float,
    solve: Solve,
    *,
    previous: StartingPoint | None = None,
    max_halvings: int = C.FLOAT_RATIO_HALVINGS,
) -> tuple[StartingPoint, StartingPoint | None]:
    """Carry ``current`` from its interval to ``[1, target]``.

    Returns the last solution reached and the one before it. The first has
    ``ratio == target`` unless the step had to be halved more than
    ``max_halvings`` times in a row.
    """
    step = math.log(target / current.ratio)
    halvings = 0
    while current.ratio != target:
        remaining = math.log(target / current.ratio)
        ratio = target if abs(step) >= abs(remaining) else current.ratio * math.exp(step)
        try:
            solution = solve(_predict(current, previous, ratio))
        except ConvergenceError as exc:
            halvings += 1
            if halvings > max_halvings:
                logger.debug(
                    "[laplace-minimax] continuation stuck at R=%.6g towards %.6g: %s",
                    current.ratio,
                    target,
                    exc,
                )
                break
            step /= 2
            continue
        previous, current = current, solution
        halvings = 0
        step *= C.RATIO_STEP_GROWTH
        logger.debug(
            "[laplace-minimax] k=%d reached R=%.6g, error %.6e",
            current.order,
            current.ratio,
            current.error,
        )
    return current, previous


def _float_solver(norm: ErrorNorm) -> Solve:
    def solve(start: StartingPoint) -> StartingPoint:
        return initial_guess.exchange(start, norm)

    return solve


def _quad_solver(norm: ErrorNorm) -> Solve:
    def solve(start: StartingPoint) -> StartingPoint:
        nodes = exchange(
            start.ratio,
            start,
            norm,
            tolerance=C.CONTINUATION_TOLERANCE,
            max_iterations=C.CONTINUATION_MAX_ITERATIONS,
        )
        return StartingPoint.from_nodes(nodes, start.ratio)

    return solve


def _insert(
    current: StartingPoint, before: StartingPoint | None, norm: ErrorNorm, solve: Solve
) -> StartingPoint:
    predictions = [initial_guess.insert_term(current, before, norm)]
    if before is not None:
        predictions.append(initial_guess.insert_term(current, None, norm))
    for prediction in predictions[:-1]:
        try:
            return solve(prediction)
        except ConvergenceError as exc:
            logger.debug("[laplace-minimax] extrapolated insertion failed: %s", exc)
    return solve(predictions[-1])


def float_path(k: int, ratio: float, norm: ErrorNorm = ErrorNorm.ABSOLUTE) -> StartingPoint:
    """k-term double-precision solution on ``[1, ratio]``.

    If the final move to ``ratio`` stalls, the solution on the interval
    closest to it is returned instead; check its ``ratio``.

    Raises:
        ConvergenceError: an insertion failed on ``[1, 2**(k-1)]`` as well.
    """
    solve = _float_solver(norm)
    current = solve(initial_guess.first_order(min(ratio, C.FIRST_RATIO)))
    before: StartingPoint | None = None
    balanced = False
    for order in range(2, k + 1):
        cap = C.BALANCED_RATIO_BASE ** (order - 1)
        at = cap if balanced else min(ratio, cap)
        if current.ratio != at:
            current = _float_move(current, at, solve)
            before = None
        try:
            inserted = _insert(current, before, norm, solve)
        except ConvergenceError as exc:
            if balanced or at == cap:
                raise ConvergenceError(
                    f"could not insert term {order} on R={at:.6g}: {exc}"
                ) from exc
            logger.debug(
                "[laplace-minimax] inserting term %d on R=%.6g failed, moving to R=%.6g",
                order,
                at,
                cap,
            )
            balanced = True
            current = _float_move(current, cap, solve)
            before = None
            inserted = _insert(current, None, norm, solve)
        before, current = current, inserted
        logger.debug(
            "[laplace-minimax] k=%d on R=%.6g, error %.6e", order, current.ratio, current.error
        )
    if current.ratio != ratio:
        current, _ = move_ratio(current, ratio, solve)
    return current


def _float_move(current: StartingPoint, target: float, solve: Solve) -> StartingPoint:
    reached, _ = move_ratio(current, target, solve)
    if reached.ratio != target:
        raise ConvergenceError(
            f"double-precision continuation stalled at R={reached.ratio:.6g} "
            f"on the way to {target:.6g}"
        )
    return reached


def quad_move(
    start: StartingPoint, target: float, norm: ErrorNorm = ErrorNorm.ABSOLUTE
) -> StartingPoint:
    """Quad-precision continuation of ``start`` to ``[1, target]``.

    Raises:
        ConvergenceError: the continuation stalled before reaching ``target``.
    """
    reached, _ = move_ratio(start, target, _quad_solver(norm), max_halvings=C.QUAD_RATIO_HALVINGS)
    if reached.ratio != target:
        raise ConvergenceError(
            f"continuation stalled at R={reached.ratio:.6g} on the way to {target:.6g}"
        )
    return reached


def minimax(
    k: int,
    ratio: Any,
    norm: ErrorNorm = ErrorNorm.ABSOLUTE,
    *,
    tolerance: float = C.DEFAULT_TOLERANCE,
    max_iterations: int = C.DEFAULT_MAX_ITERATIONS,
    on_iteration: Callable[[IterationReport], None] | None = None,
) -> NodeSet:
    """Best k-term approximation on ``[1, ratio]``.

    Raises:
        ConvergenceError: no path to an equioscillating solution.
    """
    ratio = QuadFloat(ratio)
    target = float(ratio)

    def polish(start: StartingPoint) -> NodeSet:
        return exchange(
            ratio,
            start,
            norm,
            tolerance=tolerance,
            max_iterations=max_iterations,
            on_iteration=on_iteration,
        )

    anchor: StartingPoint | None = None
    if norm is ErrorNorm.ABSOLUTE:
        start = tables.interpolated_start(k, target)
        anchor = tables.nearest_entry(k, target)
        if start is not None:
            try:
                return polish(start)
            except ConvergenceError as exc:
                if anchor is None or anchor.ratio == target:
                    raise
                logger.debug(
                    "[laplace-minimax] interpolated start failed (%s), continuing from R=%.6g",
                    exc,
                    anchor.ratio,
                )
    if anchor is None:
        anchor = float_path(k, target, norm)
    if anchor.ratio != target:
        anchor = quad_move(anchor, target, norm)
    return polish(anchor)
