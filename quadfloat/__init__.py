"""Quad-precision (113-bit significand) floating point on top of mpmath.

The package provides the :class:`QuadFloat` scalar, its numeric limits, a
literal reader/writer and dense linear algebra for numpy arrays of it.

Typical usage
-------------
>>> from quadfloat import QuadFloat, exp
>>> exp(QuadFloat("1e-3"))
"""

from .scalar import (  # noqa: F401
    QuadFloat,
    acos,
    acosh,
    asin,
    asinh,
    atan,
    atanh,
    cos,
    cosh,
    erf,
    erfc,
    exp,
    fabs,
    log,
    log10,
    maximum,
    power,
    sin,
    sinh,
    sqrt,
    tan,
    tanh,
)
from .traits import NumTraits, numeric_traits, register_traits  # noqa: F401
from .limits import (  # noqa: F401
    DIGITS,
    DIGITS10,
    EPSILON,
    MAX_DIGITS10,
    QUAD_MAX,
    QUAD_MIN,
    TRUE_MIN,
)
from .literals import LiteralFormatError, format_literal, parse_literal  # noqa: F401
from .linalg import SingularMatrixError  # noqa: F401

__all__ = [
    "QuadFloat",
    "acos",
    "acosh",
    "asin",
    "asinh",
    "atan",
    "atanh",
    "cos",
    "cosh",
    "erf",
    "erfc",
    "exp",
    "fabs",
    "log",
    "log10",
    "maximum",
    "power",
    "sin",
    "sinh",
    "sqrt",
    "tan",
    "tanh",
    "NumTraits",
    "numeric_traits",
    "register_traits",
    "DIGITS",
    "DIGITS10",
    "EPSILON",
    "MAX_DIGITS10",
    "QUAD_MAX",
    "QUAD_MIN",
    "TRUE_MIN",
    "LiteralFormatError",
    "format_literal",
    "parse_literal",
    "SingularMatrixError",
]
