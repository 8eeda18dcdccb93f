"""Published reference solutions and the comparison used to check against them."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from . import constants as C

if TYPE_CHECKING:  # pragma: no cover
    from .solver import MinimaxSolver

__all__ = [
    "DEMO_CASE",
    "K3_CASE",
    "REFERENCE_CASES",
    "ReferenceCase",
    "check_against_reference",
    "float_equal",
]


def float_equal(a: float, b: float, digits: int = 10) -> bool:
    """``|a - b| <= 10**-digits * 2**e`` with ``e`` the binary exponent of ``max(|a|, |b|)``."""
    _, exponent = math.frexp(max(abs(a), abs(b)))
    return abs(a - b) <= 10.0 ** -digits * 2.0 ** exponent


@dataclass(frozen=True)
class ReferenceCase:
    name: str
    energies: tuple[float, float, float, float]
    k: int
    weights: tuple[float, ...]
    exponents: tuple[float, ...]
    digits: int


# Tabulated with 10 decimals. Entries below 0.5 carry a rounding error larger
# than the 10-digit tolerance scaled by 2**e, hence digits=9.
K3_CASE = ReferenceCase(
    name="k3",
    energies=(-2.0, -1.0, 1.0, 2.0),
    k=3,
    weights=(0.1867648544, 0.4897225836, 1.0404470994),
    exponents=(0.0718733276, 0.4011592651, 1.1266216172),
    digits=9,
)

# Six significant digits.
DEMO_CASE = ReferenceCase(
    name="demo",
    energies=C.DEMO_ENERGIES,
    k=C.DEMO_ORDER,
    weights=(0.0505014, 0.156024, 0.396858, 0.965863, 2.41703),
    exponents=(0.0190711, 0.116085, 0.375278, 1.01659, 2.58142),
    digits=5,
)

REFERENCE_CASES = (K3_CASE, DEMO_CASE)


def check_against_reference(solver: "MinimaxSolver", case: ReferenceCase) -> list[str]:
    """Run ``case`` on ``solver`` and describe every entry that does not match."""
    solver.compute(*case.energies, case.k)
    mismatches = []
    for label, computed, expected in (
        ("weight", solver.weights(), case.weights),
        ("exponent", solver.exponents(), case.exponents),
    ):
        if len(computed) != len(expected):
            mismatches.append(f"{label}s: expected {len(expected)} values, got {len(computed)}")
            continue
        for i, (got, want) in enumerate(zip(computed, expected)):
            if not float_equal(float(got), want, case.digits):
                mismatches.append(f"{label}[{i}]: expected {want!r}, got {float(got)!r}")
    return mismatches
