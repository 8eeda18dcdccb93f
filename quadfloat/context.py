"""Shared mpmath context backing every :class:`~quadfloat.scalar.QuadFloat`.

The context is created once at import time with a 113-bit significand (the
IEEE binary128 layout) and is never reconfigured afterwards. The global
``mpmath.mp`` context is left alone so other mpmath users in the same process
are unaffected.
"""
from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Iterator

from mpmath.ctx_mp import MPContext

__all__ = [
    "QUAD",
    "PRECISION_BITS",
    "GUARD_BITS",
    "guarded",
    "QUAD_MIN_RAW",
    "QUAD_MAX_RAW",
    "TRUE_MIN_RAW",
    "EPSILON_RAW",
    "OVERFLOW_RAW",
    "UNDERFLOW_RAW",
]

PRECISION_BITS = 113
GUARD_BITS = 64

QUAD = MPContext()
QUAD.prec = PRECISION_BITS


@contextmanager
def guarded(bits: int = GUARD_BITS) -> Iterator[None]:
    """Temporarily widen the quad context by ``bits`` guard bits."""
    with QUAD.extraprec(bits):
        yield


def _build_quad_min():
    # DBL_MIN (2**-1022) sixteen times, then 2**-30: 2**-16382 without ever
    # leaving the range of the intermediate products.
    value = QUAD.mpf(1)
    for _ in range(16):
        value *= QUAD.mpf(sys.float_info.min)
    return value / QUAD.mpf(1073741824)


def _build_quad_max():
    # (1 - 2**-113) * (2**1023)**16 * 2**16
    dbl_mult = QUAD.mpf(8.9884656743115795386e307)
    value = QUAD.mpf(1) - QUAD.ldexp(QUAD.mpf(1), -113)
    for _ in range(16):
        value *= dbl_mult
    return value * QUAD.mpf(65536)


QUAD_MIN_RAW = _build_quad_min()
QUAD_MAX_RAW = _build_quad_max()
EPSILON_RAW = QUAD.ldexp(QUAD.mpf(1), -112)
TRUE_MIN_RAW = QUAD_MIN_RAW * EPSILON_RAW

with QUAD.workprec(2 * PRECISION_BITS):
    # Anything at or beyond QUAD_MAX + half an ulp rounds to infinity.
    OVERFLOW_RAW = QUAD.ldexp(QUAD.mpf(1), 16384) - QUAD.ldexp(QUAD.mpf(1), 16384 - 114)
    UNDERFLOW_RAW = TRUE_MIN_RAW / 2
