"""The :class:`QuadFloat` value type and its elementary functions.

``QuadFloat`` wraps an mpmath ``mpf`` living in the 113-bit context from
:mod:`quadfloat.context`. On top of mpmath's arithmetic it restores the IEEE
conventions a binary128 value follows: division by zero gives a signed
infinity, results past the largest finite value overflow to infinity, results
below the smallest subnormal flush to zero, and domain errors in the
elementary functions produce NaN instead of complex numbers or exceptions.
"""
from __future__ import annotations

import numbers
from typing import Any, Callable

from .context import OVERFLOW_RAW, QUAD, UNDERFLOW_RAW

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
]

_mpf = QUAD.mpf
_mpc = QUAD.mpc
_ZERO = QUAD.mpf(0)


def _finish(raw: Any) -> Any:
    """Map an mpmath result onto the binary128 value set."""
    if isinstance(raw, _mpc):
        return QUAD.nan
    if raw >= OVERFLOW_RAW:
        return QUAD.inf
    if raw <= -OVERFLOW_RAW:
        return QUAD.ninf
    if raw and -UNDERFLOW_RAW < raw < UNDERFLOW_RAW:
        return _ZERO
    return raw


def _divide(num: Any, den: Any) -> Any:
    if den == 0:
        if num == 0 or QUAD.isnan(num):
            return QUAD.nan
        return QUAD.inf if num > 0 else QUAD.ninf
    return num / den


def _power(base: Any, exponent: Any) -> Any:
    try:
        return base ** exponent
    except ZeroDivisionError:
        return QUAD.inf


def _to_raw(value: Any) -> Any:
    """Return the mpmath representation of ``value`` or ``NotImplemented``."""
    if isinstance(value, QuadFloat):
        return value._value
    if isinstance(value, (int, float)):
        return _mpf(value)
    if hasattr(value, "_mpf_"):
        return +_mpf(value)
    if isinstance(value, numbers.Integral):
        return _mpf(int(value))
    if isinstance(value, numbers.Rational):
        return _divide(_mpf(int(value.numerator)), _mpf(int(value.denominator)))
    if isinstance(value, numbers.Real):
        return _mpf(float(value))
    return NotImplemented


class QuadFloat:
    """Extended-precision real number with a 113-bit significand.

    Instances are immutable. Arithmetic with ``int`` and ``float`` operands
    promotes them exactly before rounding the result once at 113 bits.
    Strings are read with :func:`quadfloat.literals.parse_literal`.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Any = 0) -> None:
        if isinstance(value, str):
            from .literals import parse_literal

            raw = parse_literal(value)._value
        else:
            raw = _to_raw(value)
            if raw is NotImplemented:
                raise TypeError(f"cannot convert {type(value).__name__} to QuadFloat")
        self._value = _finish(raw)

    @classmethod
    def _wrap(cls, raw: Any) -> "QuadFloat":
        obj = object.__new__(cls)
        obj._value = _finish(raw)
        return obj

    @classmethod
    def from_mpf(cls, raw: Any) -> "QuadFloat":
        """Round an mpmath number of any precision to the nearest QuadFloat."""
        return cls._wrap(+QUAD.mpf(raw))

    # ------------------------------------------------------------------
    # inspection

    def to_mpf(self) -> Any:
        return self._value

    def is_nan(self) -> bool:
        return bool(QUAD.isnan(self._value))

    def is_inf(self) -> bool:
        return bool(QUAD.isinf(self._value))

    def is_finite(self) -> bool:
        return not (self.is_nan() or self.is_inf())

    def frexp(self) -> tuple["QuadFloat", int]:
        """Return ``(m, e)`` with ``self == m * 2**e`` and ``0.5 <= |m| < 1``."""
        if self._value == 0 or not self.is_finite():
            return self, 0
        mantissa, exponent = QUAD.frexp(self._value)
        return QuadFloat._wrap(mantissa), int(exponent)

    def as_integer_ratio(self) -> tuple[int, int]:
        """Exact ``(numerator, denominator)`` pair, like :meth:`float.as_integer_ratio`."""
        if self.is_nan():
            raise ValueError("cannot convert NaN to integer ratio")
        if self.is_inf():
            raise OverflowError("cannot convert Infinity to integer ratio")
        if self._value == 0:
            return 0, 1
        # _mpf_ is (sign, mantissa, exponent, bitcount); the mantissa is unsigned
        sign, mantissa, exponent, _ = self._value._mpf_
        numerator, exponent = int(mantissa), int(exponent)
        if sign:
            numerator = -numerator
        if exponent >= 0:
            return numerator << exponent, 1
        return numerator, 1 << -exponent

    # ------------------------------------------------------------------
    # conversions

    def __float__(self) -> float:
        return float(self._value)

    def __int__(self) -> int:
        if self.is_nan():
            raise ValueError("cannot convert NaN to integer")
        if self.is_inf():
            raise OverflowError("cannot convert Infinity to integer")
        return int(self._value)

    def __bool__(self) -> bool:
        return bool(self._value)

    def __str__(self) -> str:
        from .literals import format_literal

        return format_literal(self)

    def __repr__(self) -> str:
        from .literals import ROUND_TRIP_DIGITS, format_literal

        return f"QuadFloat('{format_literal(self, ROUND_TRIP_DIGITS)}')"

    def __format__(self, spec: str) -> str:
        if not spec:
            return str(self)
        if spec.endswith("e") and spec[:-1].startswith(".") and spec[1:-1].isdigit():
            from .literals import format_literal

            return format_literal(self, int(spec[1:-1]))
        return format(float(self), spec)

    def __hash__(self) -> int:
        return hash(self._value)

    # ------------------------------------------------------------------
    # arithmetic

    def __neg__(self) -> "QuadFloat":
        return QuadFloat._wrap(-self._value)

    def __pos__(self) -> "QuadFloat":
        return self

    def __abs__(self) -> "QuadFloat":
        return QuadFloat._wrap(abs(self._value))

    def __add__(self, other: Any) -> "QuadFloat":
        raw = _to_raw(other)
        if raw is NotImplemented:
            return NotImplemented
        return QuadFloat._wrap(self._value + raw)

    def __radd__(self, other: Any) -> "QuadFloat":
        return self.__add__(other)

    def __sub__(self, other: Any) -> "QuadFloat":
        raw = _to_raw(other)
        if raw is NotImplemented:
            return NotImplemented
        return QuadFloat._wrap(self._value - raw)

    def __rsub__(self, other: Any) -> "QuadFloat":
        raw = _to_raw(other)
        if raw is NotImplemented:
            return NotImplemented
        return QuadFloat._wrap(raw - self._value)

    def __mul__(self, other: Any) -> "QuadFloat":
        raw = _to_raw(other)
        if raw is NotImplemented:
            return NotImplemented
        return QuadFloat._wrap(self._value * raw)

    def __rmul__(self, other: Any) -> "QuadFloat":
        return self.__mul__(other)

    def __truediv__(self, other: Any) -> "QuadFloat":
        raw = _to_raw(other)
        if raw is NotImplemented:
            return NotImplemented
        return QuadFloat._wrap(_divide(self._value, raw))

    def __rtruediv__(self, other: Any) -> "QuadFloat":
        raw = _to_raw(other)
        if raw is NotImplemented:
            return NotImplemented
        return QuadFloat._wrap(_divide(raw, self._value))

    def __pow__(self, other: Any) -> "QuadFloat":
        if isinstance(other, int):
            return QuadFloat._wrap(_power(self._value, other))
        raw = _to_raw(other)
        if raw is NotImplemented:
            return NotImplemented
        return QuadFloat._wrap(_power(self._value, raw))

    def __rpow__(self, other: Any) -> "QuadFloat":
        raw = _to_raw(other)
        if raw is NotImplemented:
            return NotImplemented
        return QuadFloat._wrap(_power(raw, self._value))

    # ------------------------------------------------------------------
    # comparisons (NaN compares false, except for !=)

    def __eq__(self, other: object) -> bool:
        raw = _to_raw(other)
        if raw is NotImplemented:
            return NotImplemented
        return bool(self._value == raw)

    def __ne__(self, other: object) -> bool:
        raw = _to_raw(other)
        if raw is NotImplemented:
            return NotImplemented
        return not bool(self._value == raw)

    def __lt__(self, other: Any) -> bool:
        raw = _to_raw(other)
        if raw is NotImplemented:
            return NotImplemented
        return bool(self._value < raw)

    def __le__(self, other: Any) -> bool:
        raw = _to_raw(other)
        if raw is NotImplemented:
            return NotImplemented
        return bool(self._value <= raw)

    def __gt__(self, other: Any) -> bool:
        raw = _to_raw(other)
        if raw is NotImplemented:
            return NotImplemented
        return bool(self._value > raw)

    def __ge__(self, other: Any) -> bool:
        raw = _to_raw(other)
        if raw is NotImplemented:
            return NotImplemented
        return bool(self._value >= raw)


# ---------------------------------------------------------------------------
# Elementary functions
# ---------------------------------------------------------------------------


def _elementary(name: str) -> Callable[[Any], QuadFloat]:
    func = getattr(QUAD, name)

    def apply(x: Any) -> QuadFloat:
        raw = _to_raw(x)
        if raw is NotImplemented:
            raise TypeError(f"{name}() argument must be real, not {type(x).__name__}")
        if QUAD.isnan(raw):
            return QuadFloat._wrap(raw)
        try:
            return QuadFloat._wrap(func(raw))
        except (ValueError, ZeroDivisionError):
            # outside the real domain
            return QuadFloat._wrap(QUAD.nan)

    apply.__name__ = name
    apply.__qualname__ = name
    apply.__doc__ = f"``{name}(x)`` at 113-bit precision; NaN outside the real domain."
    return apply


acos = _elementary("acos")
acosh = _elementary("acosh")
asin = _elementary("asin")
asinh = _elementary("asinh")
atan = _elementary("atan")
atanh = _elementary("atanh")
cos = _elementary("cos")
cosh = _elementary("cosh")
erf = _elementary("erf")
erfc = _elementary("erfc")
exp = _elementary("exp")
fabs = _elementary("fabs")
log = _elementary("log")
log10 = _elementary("log10")
sin = _elementary("sin")
sinh = _elementary("sinh")
sqrt = _elementary("sqrt")
tan = _elementary("tan")
tanh = _elementary("tanh")


def power(base: Any, exponent: Any) -> QuadFloat:
    """``base ** exponent``; integer exponents use exact repeated squaring."""
    return QuadFloat(base) ** exponent


def maximum(a: Any, b: Any) -> QuadFloat:
    a, b = QuadFloat(a), QuadFloat(b)
    return a if a > b else b
