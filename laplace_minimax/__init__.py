"""Minimax exponential-sum approximation of ``1/x`` in quad precision.

The weights ``w_i`` and exponents ``a_i`` returned by the solver make
``sum_i w_i exp(-a_i x)`` the best approximation of ``1/x`` on an interval,
the quadrature behind Laplace-transformed energy denominators.

Typical usage
-------------
>>> from laplace_minimax import MinimaxSolver
>>> solver = MinimaxSolver()
>>> solver.compute(-2.0, -1.0, 1.0, 2.0, 3)
>>> solver.weights(), solver.exponents()
"""
from importlib.metadata import version as _version  # type: ignore

from .error_function import ErrorFunction, ErrorNorm
from .interval import ApproximationInterval, InvalidInputError
from .nodes import NodeSet
from .remez import ConvergenceError
from .roots import RootFindingError
from .solver import MinimaxSolver, NotComputedError, SolverMode

__all__ = [
    "ApproximationInterval",
    "ConvergenceError",
    "ErrorFunction",
    "ErrorNorm",
    "InvalidInputError",
    "MinimaxSolver",
    "NodeSet",
    "NotComputedError",
    "RootFindingError",
    "SolverMode",
    "__version__",
]

try:
    __version__ = _version("laplace_minimax")
except Exception:  # pragma: no cover – package not installed yet
    __version__ = "0.0.0"
