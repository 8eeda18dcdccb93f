from fractions import Fraction

import mpmath
import pytest

from quadfloat import (
    EPSILON,
    QUAD_MAX,
    TRUE_MIN,
    QuadFloat,
    acosh,
    atanh,
    exp,
    log,
    maximum,
    power,
    sqrt,
)


def test_precision_exceeds_double() -> None:
    tiny = QuadFloat(2) ** -100
    assert QuadFloat(1) + tiny != 1
    assert 1.0 + float(tiny) == 1.0


def test_epsilon_is_unit_in_last_place_of_one() -> None:
    one = QuadFloat(1)
    assert one + EPSILON > one
    assert one + EPSILON / 4 == one


def test_mixed_arithmetic_with_builtin_numbers() -> None:
    assert 1 + QuadFloat(2) == 3
    assert QuadFloat(2) * 2.5 == 5
    assert 10 - QuadFloat(4) == 6
    assert 1 / QuadFloat(4) == 0.25
    assert QuadFloat(3) ** 2 == 9
    assert 2 ** QuadFloat(3) == 8
    assert -QuadFloat(2) == -2
    assert abs(QuadFloat(-2)) == 2


def test_fraction_rounds_once() -> None:
    assert QuadFloat(Fraction(1, 3)) == QuadFloat(1) / 3


def test_division_by_zero_follows_ieee() -> None:
    assert (QuadFloat(1) / 0).is_inf()
    assert QuadFloat(1) / 0 > 0
    assert QuadFloat(-1) / 0 < 0
    assert (QuadFloat(0) / 0).is_nan()


def test_nan_compares_unequal() -> None:
    nan = QuadFloat("nan")
    assert nan != nan
    assert not nan == nan
    assert not nan < 1
    assert not nan >= 1


def test_overflow_and_underflow() -> None:
    assert (QUAD_MAX * 2).is_inf()
    assert (-QUAD_MAX * 2) < 0
    assert TRUE_MIN / 4 == 0
    assert TRUE_MIN > 0


def test_domain_errors_give_nan() -> None:
    assert log(-1).is_nan()
    assert sqrt(-1).is_nan()
    assert acosh(0.5).is_nan()
    assert atanh(2).is_nan()
    assert log(0).is_inf() and log(0) < 0


def test_elementary_functions_at_full_precision() -> None:
    assert str(exp(QuadFloat(1))) == "+2.71828182845904523536e+00"
    root = sqrt(QuadFloat(2))
    assert abs(root * root - 2) <= 4 * EPSILON
    assert power(2, 10) == 1024
    assert maximum(1, QuadFloat("1.5")) == QuadFloat("1.5")


def test_conversions() -> None:
    assert float(QuadFloat("0.1")) == 0.1
    assert int(QuadFloat("-2.7")) == -2
    assert bool(QuadFloat(0)) is False
    assert QuadFloat("0.5").as_integer_ratio() == (1, 2)
    assert QuadFloat(-0.75).as_integer_ratio() == (-3, 4)
    assert QuadFloat(3).as_integer_ratio() == (3, 1)
    assert (-QuadFloat(3) * QuadFloat(2) ** 200).as_integer_ratio() == (-3 * 2 ** 200, 1)
    assert (-QuadFloat(1) / 3).as_integer_ratio()[0] < 0
    mantissa, exponent = QuadFloat(12).frexp()
    assert mantissa == 0.75 and exponent == 4
    with pytest.raises(ValueError):
        int(QuadFloat("nan"))
    with pytest.raises(OverflowError):
        int(QuadFloat("inf"))


def test_hash_matches_equality() -> None:
    assert hash(QuadFloat(2)) == hash(QuadFloat("2.0"))
    assert len({QuadFloat(1), QuadFloat("1"), QuadFloat(1.0)}) == 1


def test_unsupported_operand() -> None:
    with pytest.raises(TypeError):
        QuadFloat([1])
    with pytest.raises(TypeError):
        QuadFloat(1) + "1"


def test_format_spec() -> None:
    assert f"{QuadFloat(1) / 3:.5e}" == "+3.33333e-01"
    assert f"{QuadFloat(1) / 4:.3f}" == "0.250"


def test_global_mpmath_context_untouched() -> None:
    QuadFloat(1) / 3
    assert mpmath.mp.prec == 53
