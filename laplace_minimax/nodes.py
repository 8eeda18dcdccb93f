"""Immutable result of a converged minimax run."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from quadfloat import QuadFloat, exp
from quadfloat.linalg import to_float_array

from .error_function import ErrorNorm

__all__ = ["NodeSet"]


def _read_only(values: tuple[QuadFloat, ...]) -> np.ndarray:
    arr = to_float_array(values)
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True)
class NodeSet:
    """k ``(weight, exponent)`` pairs with exponents in ascending order.

    ``max_error`` is the largest error magnitude of the approximation at its
    alternation ``points`` (measured in ``norm``), ``iterations`` the number
    of exchange steps that produced it.
    """

    weights: tuple[QuadFloat, ...]
    exponents: tuple[QuadFloat, ...]
    max_error: QuadFloat
    iterations: int
    points: tuple[QuadFloat, ...]
    norm: ErrorNorm = ErrorNorm.ABSOLUTE

    def __post_init__(self) -> None:
        if len(self.weights) != len(self.exponents) or not self.weights:
            raise ValueError("weights and exponents must be non-empty and of equal length")
        if any(b <= a for a, b in zip(self.exponents, self.exponents[1:])):
            raise ValueError("exponents must be strictly increasing")

    @property
    def order(self) -> int:
        return len(self.weights)

    def scaled(self, factor: Any) -> "NodeSet":
        """Map a solution on ``[1, R]`` to ``[factor, factor * R]``."""
        factor = QuadFloat(factor)
        error = self.max_error / factor if self.norm is ErrorNorm.ABSOLUTE else self.max_error
        return NodeSet(
            weights=tuple(w / factor for w in self.weights),
            exponents=tuple(a / factor for a in self.exponents),
            max_error=error,
            iterations=self.iterations,
            points=tuple(p * factor for p in self.points),
            norm=self.norm,
        )

    def weights_array(self) -> np.ndarray:
        return _read_only(self.weights)

    def exponents_array(self) -> np.ndarray:
        return _read_only(self.exponents)

    def evaluate(self, x: Any) -> QuadFloat:
        """``sum_i w_i exp(-a_i x)``"""
        x = QuadFloat(x)
        total = QuadFloat(0)
        for w, a in zip(self.weights, self.exponents):
            total += w * exp(-a * x)
        return total
