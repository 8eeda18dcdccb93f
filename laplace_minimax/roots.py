"""Bracketed one-dimensional root finding and maximization.

Both routines only use ``+ - * /``, ``abs`` and comparisons on their
arguments, so they run unchanged on ``float`` and on ``QuadFloat``.
"""
from __future__ import annotations

from typing import Any, Callable

from quadfloat import numeric_traits

from .constants import GOLDEN_MAX_ITERATIONS, ROOT_MAX_ITERATIONS, ROOT_XTOL

__all__ = ["RootFindingError", "golden_section_max", "safeguarded_newton"]

# (sqrt(5) - 1) / 2 to well beyond 36 digits
_INV_PHI = "0.6180339887498948482045868343656381177203"


class RootFindingError(ArithmeticError):
    """Raised when a bracket holds no sign change or the iteration budget runs out."""


def _default_xtol(x: Any) -> Any:
    # |g| is flat at its extrema, so tighter locations change nothing
    # measurable and Newton would only chase rounding noise.
    machine = numeric_traits(type(x)).epsilon * 4
    floor = type(x)(ROOT_XTOL)
    return floor if floor > machine else machine


def safeguarded_newton(
    f: Callable[[Any], Any],
    df: Callable[[Any], Any],
    lo: Any,
    hi: Any,
    *,
    xtol: Any = None,
    max_iterations: int = ROOT_MAX_ITERATIONS,
) -> Any:
    """Root of ``f`` in ``[lo, hi]`` by Newton-Raphson kept inside the bracket.

    A Newton step that leaves the bracket, or that does not at least halve
    the previous step, is replaced by bisection. ``xtol`` is relative to the
    current iterate.
    """
    f_lo, f_hi = f(lo), f(hi)
    if f_lo == 0:
        return lo
    if f_hi == 0:
        return hi
    if (f_lo > 0) == (f_hi > 0):
        raise RootFindingError(f"no sign change on [{lo}, {hi}]")
    if xtol is None:
        xtol = _default_xtol(lo)

    # orient so that f(neg) < 0 < f(pos)
    neg, pos = (lo, hi) if f_lo < 0 else (hi, lo)
    x = (lo + hi) / 2
    step_old = abs(hi - lo)
    step = step_old
    fx, dfx = f(x), df(x)
    for _ in range(max_iterations):
        newton_leaves = dfx == 0 or (
            ((x - pos) * dfx - fx) * ((x - neg) * dfx - fx) > 0
        )
        if newton_leaves or abs(2 * fx) > abs(step_old * dfx):
            step_old = step
            step = (pos - neg) / 2
            x = neg + step
        else:
            step_old = step
            step = fx / dfx
            x = x - step
        if abs(step) <= xtol * abs(x):
            return x
        fx, dfx = f(x), df(x)
        if fx == 0:
            return x
        if fx < 0:
            neg = x
        else:
            pos = x
    raise RootFindingError(f"no convergence after {max_iterations} iterations on [{lo}, {hi}]")


def golden_section_max(
    f: Callable[[Any], Any],
    lo: Any,
    hi: Any,
    *,
    xtol: Any = None,
    max_iterations: int = GOLDEN_MAX_ITERATIONS,
) -> Any:
    """Location of the maximum of a unimodal ``f`` on ``[lo, hi]``."""
    if xtol is None:
        xtol = _default_xtol(lo)
    inv_phi = type(lo)(_INV_PHI)
    a, b = lo, hi
    c = b - (b - a) * inv_phi
    d = a + (b - a) * inv_phi
    fc, fd = f(c), f(d)
    for _ in range(max_iterations):
        if abs(b - a) <= xtol * (abs(a) + abs(b)):
            break
        if fc > fd:
            b, d, fd = d, c, fc
            c = b - (b - a) * inv_phi
            fc = f(c)
        else:
            a, c, fc = c, d, fd
            d = a + (b - a) * inv_phi
            fd = f(d)
    return c if fc > fd else d
