"""Reading and writing decimal literals for any registered scalar type.

Parsing is a small finite-state scanner over the characters of the literal::

    SIGN -> INTEGER -> FRACTION -> EXPONENT_SIGN -> EXPONENT

Formatting works from the exact binary value of the scalar (its integer
ratio), so the printed digits are correctly rounded (half-even) no matter how
many are requested.
"""
from __future__ import annotations

import math
from enum import Enum, auto
from typing import Any

from .scalar import QuadFloat
from .traits import NumTraits, numeric_traits

__all__ = [
    "DEFAULT_DIGITS",
    "ROUND_TRIP_DIGITS",
    "LiteralFormatError",
    "format_literal",
    "parse_literal",
]

DEFAULT_DIGITS = 20
# 36 significant digits: enough to reproduce every 113-bit value exactly.
ROUND_TRIP_DIGITS = 35

# Fortran-style "D" is accepted alongside "e" and "E"; lowercase "d" is not.
_EXPONENT_MARKERS = "eED"
_LOG10_2 = math.log10(2)


class LiteralFormatError(ValueError):
    """Raised when a string is not a well-formed numeric literal."""

    def __init__(self, text: str, reason: str) -> None:
        super().__init__(f"invalid numeric literal {text!r}: {reason}")
        self.text = text
        self.reason = reason


class _State(Enum):
    SIGN = auto()
    INTEGER = auto()
    FRACTION = auto()
    EXPONENT_SIGN = auto()
    EXPONENT = auto()


class _Scan:
    """Exact decimal content of a literal: ``(-1)**negative * mantissa * 10**exponent``."""

    def __init__(self, max_digits: int) -> None:
        self.max_digits = max_digits
        self.negative = False
        self.mantissa = 0
        self.digit_count = 0
        self.exponent = 0
        self.seen_digit = False
        self.exponent_negative = False
        self.exponent_digits = 0
        self.exponent_value = 0

    def mantissa_digit(self, digit: int, fractional: bool) -> None:
        self.seen_digit = True
        if self.mantissa == 0 and digit == 0:
            # leading zero
            if fractional:
                self.exponent -= 1
            return
        if self.digit_count < self.max_digits:
            self.mantissa = self.mantissa * 10 + digit
            self.digit_count += 1
            if fractional:
                self.exponent -= 1
        elif not fractional:
            self.exponent += 1

    def exponent_digit(self, digit: int) -> None:
        self.exponent_digits += 1
        self.exponent_value = self.exponent_value * 10 + digit

    @property
    def decimal_exponent(self) -> int:
        shift = -self.exponent_value if self.exponent_negative else self.exponent_value
        return self.exponent + shift


def _special(body: str, traits: NumTraits) -> Any | None:
    sign = ""
    if body[:1] in "+-":
        sign, body = body[0], body[1:]
    word = body.lower()
    if word == "nan":
        return traits.quiet_nan
    if word in ("inf", "infinity"):
        return -traits.infinity if sign == "-" else traits.infinity
    return None


def _scan(text: str, max_digits: int) -> _Scan:
    scan = _Scan(max_digits)
    state = _State.SIGN
    for ch in text:
        if state is _State.SIGN:
            if ch in "+-":
                scan.negative = ch == "-"
                state = _State.INTEGER
            elif ch.isdigit():
                scan.mantissa_digit(int(ch), fractional=False)
                state = _State.INTEGER
            elif ch == ".":
                state = _State.FRACTION
            else:
                raise LiteralFormatError(text, f"unexpected character {ch!r}")
        elif state is _State.INTEGER:
            if ch.isdigit():
                scan.mantissa_digit(int(ch), fractional=False)
            elif ch == ".":
                state = _State.FRACTION
            elif ch in _EXPONENT_MARKERS:
                state = _State.EXPONENT_SIGN
            else:
                raise LiteralFormatError(text, f"unexpected character {ch!r}")
        elif state is _State.FRACTION:
            if ch.isdigit():
                scan.mantissa_digit(int(ch), fractional=True)
            elif ch in _EXPONENT_MARKERS:
                state = _State.EXPONENT_SIGN
            else:
                raise LiteralFormatError(text, f"unexpected character {ch!r}")
        elif state is _State.EXPONENT_SIGN:
            if ch in "+-":
                scan.exponent_negative = ch == "-"
            elif ch.isdigit():
                scan.exponent_digit(int(ch))
            else:
                raise LiteralFormatError(text, f"unexpected character {ch!r}")
            state = _State.EXPONENT
        else:
            if not ch.isdigit():
                raise LiteralFormatError(text, f"unexpected character {ch!r}")
            scan.exponent_digit(int(ch))

    if not scan.seen_digit:
        raise LiteralFormatError(text, "no digits in mantissa")
    if state is _State.EXPONENT_SIGN or (state is _State.EXPONENT and not scan.exponent_digits):
        raise LiteralFormatError(text, "exponent marker without digits")
    return scan


def parse_literal(text: str, scalar_type: type = QuadFloat) -> Any:
    """Parse a decimal literal such as ``-1.25D-3`` into ``scalar_type``.

    Accepted: optional sign, digits with an optional fractional part, an
    optional exponent introduced by ``e``, ``E`` or ``D``, and ``nan``/``inf``
    in any case. Surrounding whitespace is ignored.
    """
    traits = numeric_traits(scalar_type)
    body = text.strip()
    if not body:
        raise LiteralFormatError(text, "empty literal")
    special = _special(body, traits)
    if special is not None:
        return special

    scan = _scan(body, traits.max_digits10 + 4)
    expon = scan.decimal_exponent

    with traits.working_precision():
        value = traits.from_int(scan.mantissa)
        if scan.mantissa:
            ten = traits.from_int(10)
            if expon <= traits.min_exponent10 + 2:
                # 10**expon alone would already sit in (or under) the
                # subnormal range; scale in two steps so the mantissa keeps
                # its leading digits.
                value = value * traits.power(ten, expon + scan.digit_count + 1)
                value = value * traits.power(ten, -scan.digit_count - 1)
            elif expon:
                value = value * traits.power(ten, expon)
        if scan.negative:
            value = -value
    return traits.rounded(value)


def _compare_to_power(num: int, den: int, e10: int) -> int:
    """Sign-carrying comparison of ``num/den`` against ``10**e10``."""
    if e10 >= 0:
        return num - den * 10 ** e10
    return num * 10 ** -e10 - den


def _round_half_even(num: int, den: int) -> int:
    quotient, remainder = divmod(num, den)
    twice = 2 * remainder
    if twice > den or (twice == den and quotient % 2):
        quotient += 1
    return quotient


def format_literal(value: Any, digits: int = DEFAULT_DIGITS) -> str:
    """Scientific notation with ``digits`` fractional digits.

    >>> format_literal(QuadFloat(1) / 2 ** 113)
    '+9.62964972193617926528e-35'
    """
    if digits < 0:
        raise ValueError("digits must be non-negative")
    if value != value:
        return "nan"
    try:
        num, den = value.as_integer_ratio()
    except OverflowError:
        return "+inf" if value > 0 else "-inf"

    if num < 0:
        sign, num = "-", -num
    elif num == 0 and math.copysign(1.0, float(value)) < 0:
        sign = "-"
    else:
        sign = "+"

    if num == 0:
        e10 = 0
        scaled = 0
    else:
        e10 = math.floor((num.bit_length() - den.bit_length()) * _LOG10_2)
        while _compare_to_power(num, den, e10) < 0:
            e10 -= 1
        while _compare_to_power(num, den, e10 + 1) >= 0:
            e10 += 1
        shift = digits - e10
        if shift >= 0:
            scaled = _round_half_even(num * 10 ** shift, den)
        else:
            scaled = _round_half_even(num, den * 10 ** -shift)
        if scaled == 10 ** (digits + 1):
            scaled //= 10
            e10 += 1

    text = str(scaled).rjust(digits + 1, "0")
    mantissa = f"{text[0]}.{text[1:]}" if digits else text
    return f"{sign}{mantissa}e{e10:+03d}"
