"""Public solver facade: validation, normalization and result storage."""
from __future__ import annotations

import enum
import logging
import numbers
from typing import Any

import numpy as np

from quadfloat import QuadFloat

from . import constants as C
from .continuation import minimax
from .error_function import ErrorNorm
from .interval import ApproximationInterval, InvalidInputError
from .nodes import NodeSet
from .remez import IterationReport

__all__ = ["MinimaxSolver", "NotComputedError", "SolverMode"]


class NotComputedError(RuntimeError):
    """Raised when results are requested before a successful ``compute``."""


class SolverMode(enum.IntEnum):
    QUIET = 0
    REPORT = 1


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidInputError(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise InvalidInputError(f"{name} must be at least 1, got {value}")
    return int(value)


class MinimaxSolver:
    """Best approximation of ``1/x`` on ``[ymin, ymax]`` by k exponentials.

    ``mode`` only decides how loudly progress is reported: ``REPORT`` logs
    every exchange iteration at INFO, ``QUIET`` at DEBUG. The numbers are the
    same either way.

    >>> solver = MinimaxSolver(SolverMode.QUIET)
    >>> solver.compute(-2.0, -1.0, 1.0, 2.0, 3)
    >>> solver.weights().shape
    (3,)
    """

    def __init__(
        self,
        mode: SolverMode | int = SolverMode.QUIET,
        *,
        tolerance: float = C.DEFAULT_TOLERANCE,
        max_iterations: int = C.DEFAULT_MAX_ITERATIONS,
        norm: ErrorNorm | str = ErrorNorm.ABSOLUTE,
    ) -> None:
        try:
            self.mode = SolverMode(mode)
        except ValueError as exc:
            raise InvalidInputError(f"unknown solver mode {mode!r}") from exc
        if not tolerance > 0:
            raise InvalidInputError(f"tolerance must be positive, got {tolerance!r}")
        self.tolerance = tolerance
        self.max_iterations = _positive_int(max_iterations, "max_iterations")
        self.norm = ErrorNorm(norm)
        self.logger = logging.getLogger(__name__)
        self._progress_level = logging.INFO if self.mode is SolverMode.REPORT else logging.DEBUG
        self._nodes: NodeSet | None = None
        self._interval: ApproximationInterval | None = None

    # ------------------------------------------------------------------
    # computation

    def compute(self, *args: Any) -> None:
        """``compute(k, ymin, ymax)`` or ``compute(emin, ehomo, elumo, emax, k)``."""
        if len(args) == 3:
            k, ymin, ymax = args
            self.compute_interval(k, ApproximationInterval(ymin, ymax))
        elif len(args) == 5:
            self.compute_from_energies(*args)
        else:
            raise TypeError(
                "compute() takes (k, ymin, ymax) or (emin, ehomo, elumo, emax, k), "
                f"got {len(args)} arguments"
            )

    def compute_from_energies(self, emin: Any, ehomo: Any, elumo: Any, emax: Any, k: int) -> None:
        k = _positive_int(k, "order k")
        self.compute_interval(k, ApproximationInterval.from_energies(emin, ehomo, elumo, emax))

    def compute_interval(self, k: int, interval: ApproximationInterval) -> None:
        """Run the exchange for ``interval`` and keep the result.

        On failure the previous result, if any, stays in place.
        """
        k = _positive_int(k, "order k")
        ratio = interval.ratio
        self.logger.log(
            self._progress_level,
            "[laplace-minimax] k=%d on %s (R=%.6g, %s error)",
            k,
            interval,
            float(ratio),
            self.norm.value,
        )
        normalized = minimax(
            k,
            ratio,
            self.norm,
            tolerance=self.tolerance,
            max_iterations=self.max_iterations,
            on_iteration=self._report,
        )
        self._nodes = normalized.scaled(interval.ymin)
        self._interval = interval
        self.logger.log(
            self._progress_level,
            "[laplace-minimax] converged after %d iterations, max error %.6e",
            self._nodes.iterations,
            float(self._nodes.max_error),
        )

    def _report(self, report: IterationReport) -> None:
        self.logger.log(
            self._progress_level,
            "[laplace-minimax] iteration %d: max error %.10e, ripple %.3e",
            report.iteration,
            float(report.max_error),
            float(report.ripple),
        )

    # ------------------------------------------------------------------
    # results

    @property
    def nodes(self) -> NodeSet:
        if self._nodes is None:
            raise NotComputedError("no result yet; call compute() first")
        return self._nodes

    @property
    def interval(self) -> ApproximationInterval:
        if self._interval is None:
            raise NotComputedError("no result yet; call compute() first")
        return self._interval

    @property
    def max_error(self) -> QuadFloat:
        return self.nodes.max_error

    def weights(self) -> np.ndarray:
        """Read-only ``float64`` weights, aligned with :meth:`exponents`."""
        return self.nodes.weights_array()

    def exponents(self) -> np.ndarray:
        """Read-only ``float64`` exponents in ascending order."""
        return self.nodes.exponents_array()
