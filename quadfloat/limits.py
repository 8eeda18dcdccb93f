"""Numeric limits of :class:`QuadFloat` and its traits registration."""
from __future__ import annotations

import math

from .context import (
    EPSILON_RAW,
    PRECISION_BITS,
    QUAD,
    QUAD_MAX_RAW,
    QUAD_MIN_RAW,
    TRUE_MIN_RAW,
    guarded,
)
from .scalar import QuadFloat, power
from .traits import NumTraits, register_traits

__all__ = [
    "DIGITS",
    "DIGITS10",
    "EPSILON",
    "INFINITY",
    "MAX_DIGITS10",
    "MAX_EXPONENT",
    "MAX_EXPONENT10",
    "MIN_EXPONENT",
    "MIN_EXPONENT10",
    "NAN",
    "QUAD_MAX",
    "QUAD_MIN",
    "QUAD_TRAITS",
    "TRUE_MIN",
]

DIGITS = PRECISION_BITS
DIGITS10 = math.floor((DIGITS - 1) * math.log10(2))
MAX_DIGITS10 = math.ceil(1 + DIGITS * math.log10(2))
MIN_EXPONENT = -16381
MAX_EXPONENT = 16384
# Same integer arithmetic as C's float.h derivation, truncating toward zero.
MIN_EXPONENT10 = int(MIN_EXPONENT * 301 / 1000)
MAX_EXPONENT10 = int(MAX_EXPONENT * 301 / 1000)

QUAD_MIN = QuadFloat.from_mpf(QUAD_MIN_RAW)
QUAD_MAX = QuadFloat.from_mpf(QUAD_MAX_RAW)
EPSILON = QuadFloat.from_mpf(EPSILON_RAW)
TRUE_MIN = QuadFloat.from_mpf(TRUE_MIN_RAW)
INFINITY = QuadFloat.from_mpf(QUAD.inf)
NAN = QuadFloat.from_mpf(QUAD.nan)


def _round_to_quad(value: QuadFloat) -> QuadFloat:
    return QuadFloat.from_mpf(value.to_mpf())


QUAD_TRAITS = register_traits(
    NumTraits(
        scalar_type=QuadFloat,
        epsilon=EPSILON,
        highest=QUAD_MAX,
        lowest=-QUAD_MAX,
        smallest_normal=QUAD_MIN,
        infinity=INFINITY,
        quiet_nan=NAN,
        digits10=DIGITS10,
        max_digits10=MAX_DIGITS10,
        min_exponent10=MIN_EXPONENT10,
        max_exponent10=MAX_EXPONENT10,
        from_int=QuadFloat,
        power=power,
        working_precision=guarded,
        rounded=_round_to_quad,
    )
)
