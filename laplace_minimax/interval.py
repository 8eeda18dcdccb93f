"""The approximation interval ``[ymin, ymax]``."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from quadfloat import QuadFloat

__all__ = ["ApproximationInterval", "InvalidInputError", "to_quad"]


class InvalidInputError(ValueError):
    """Raised for malformed solver input (bad interval, energies or order)."""


def to_quad(value: Any, name: str) -> QuadFloat:
    """Convert ``value`` to a finite ``QuadFloat`` or raise :class:`InvalidInputError`."""
    try:
        quad = value if isinstance(value, QuadFloat) else QuadFloat(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name} must be a real number, got {value!r}") from exc
    if not quad.is_finite():
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    return quad


@dataclass(frozen=True)
class ApproximationInterval:
    """Positive interval with ``0 < ymin < ymax``."""

    ymin: QuadFloat
    ymax: QuadFloat

    def __post_init__(self) -> None:
        ymin = to_quad(self.ymin, "ymin")
        ymax = to_quad(self.ymax, "ymax")
        if not ymin > 0:
            raise InvalidInputError(f"ymin must be positive, got {ymin}")
        if not ymin < ymax:
            raise InvalidInputError(f"ymin must be smaller than ymax, got [{ymin}, {ymax}]")
        object.__setattr__(self, "ymin", ymin)
        object.__setattr__(self, "ymax", ymax)

    @classmethod
    def from_energies(cls, emin: Any, ehomo: Any, elumo: Any, emax: Any) -> "ApproximationInterval":
        """Interval of orbital-energy denominators.

        ``ymin`` is twice the HOMO-LUMO gap and ``ymax`` twice the full spread
        of the spectrum, which requires ``emin <= ehomo < elumo <= emax``.
        """
        emin = to_quad(emin, "emin")
        ehomo = to_quad(ehomo, "ehomo")
        elumo = to_quad(elumo, "elumo")
        emax = to_quad(emax, "emax")
        if not (emin <= ehomo < elumo <= emax):
            raise InvalidInputError(
                "energies must satisfy emin <= ehomo < elumo <= emax, got "
                f"({emin}, {ehomo}, {elumo}, {emax})"
            )
        return cls(2 * (elumo - ehomo), 2 * (emax - emin))

    @property
    def ratio(self) -> QuadFloat:
        return self.ymax / self.ymin

    def normalized(self) -> "ApproximationInterval":
        """The same problem on ``[1, ymax/ymin]``."""
        return ApproximationInterval(QuadFloat(1), self.ratio)

    def __str__(self) -> str:
        return f"[{float(self.ymin):.6g}, {float(self.ymax):.6g}]"
