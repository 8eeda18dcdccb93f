"""Numeric traits: what a scalar type must provide to plug into this package.

The literal parser and the linear-algebra helpers never hard-code a scalar
type. They look up a :class:`NumTraits` record instead, so any type that
registers one (``QuadFloat`` and ``float`` ship with the package) can be used.
"""
from __future__ import annotations

import math
import sys
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, Callable, ContextManager

__all__ = ["NumTraits", "numeric_traits", "register_traits"]


def _identity(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class NumTraits:
    """Capability set of a real scalar type."""

    scalar_type: type
    epsilon: Any
    highest: Any
    lowest: Any
    smallest_normal: Any
    infinity: Any
    quiet_nan: Any
    digits10: int
    max_digits10: int
    min_exponent10: int
    max_exponent10: int
    from_int: Callable[[int], Any]
    power: Callable[[Any, int], Any]
    working_precision: Callable[[], ContextManager[Any]] = nullcontext
    rounded: Callable[[Any], Any] = _identity

    @property
    def dummy_precision(self) -> Any:
        """Threshold below which a value counts as zero relative to 1."""
        return self.epsilon * 1000


_REGISTRY: dict[type, NumTraits] = {}


def register_traits(traits: NumTraits) -> NumTraits:
    _REGISTRY[traits.scalar_type] = traits
    return traits


def numeric_traits(scalar_type: type) -> NumTraits:
    """Return the traits registered for ``scalar_type`` or one of its bases."""
    for klass in getattr(scalar_type, "__mro__", (scalar_type,)):
        traits = _REGISTRY.get(klass)
        if traits is not None:
            return traits
    raise TypeError(f"no numeric traits registered for {scalar_type!r}")


def _float_power(base: float, exponent: int) -> float:
    try:
        return base ** exponent
    except OverflowError:
        return math.copysign(math.inf, base) if exponent % 2 else math.inf


register_traits(
    NumTraits(
        scalar_type=float,
        epsilon=sys.float_info.epsilon,
        highest=sys.float_info.max,
        lowest=-sys.float_info.max,
        smallest_normal=sys.float_info.min,
        infinity=math.inf,
        quiet_nan=math.nan,
        digits10=sys.float_info.dig,
        max_digits10=17,
        min_exponent10=sys.float_info.min_10_exp,
        max_exponent10=sys.float_info.max_10_exp,
        from_int=float,
        power=_float_power,
    )
)
