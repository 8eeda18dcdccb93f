"""Command-line interface around :class:`laplace_minimax.solver.MinimaxSolver`."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import numpy as np

from quadfloat import format_literal

from . import constants as C
from .error_function import ErrorFunction, ErrorNorm
from .interval import InvalidInputError
from .remez import ConvergenceError
from .solver import MinimaxSolver, SolverMode

__all__ = ["main"]

EXIT_OK = 0
EXIT_CONVERGENCE = 1
EXIT_INVALID = 2


def _plot_error_curve(solver: MinimaxSolver, path: str) -> str:
    """Write the error curve of the current result to a PNG file."""
    # Lazy import so the package works without matplotlib unless a plot is requested
    try:
        import matplotlib  # type: ignore

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt  # type: ignore
    except ImportError as exc:  # pragma: no cover - environment-dependent
        raise RuntimeError(
            "matplotlib is required for --plot. Install it or run without a plot."
        ) from exc

    interval = solver.interval
    fn = ErrorFunction.from_nodes(solver.nodes)
    xs = np.geomspace(float(interval.ymin), float(interval.ymax), C.ERROR_CURVE_SAMPLES)
    ys = np.array([float(fn(x)) for x in xs])
    level = float(solver.max_error)

    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(xs, ys, linewidth=1.2)
    ax.axhline(level, color="grey", linestyle="--", linewidth=0.8)
    ax.axhline(-level, color="grey", linestyle="--", linewidth=0.8)
    points = [float(p) for p in solver.nodes.points]
    ax.plot(points, [float(fn(p)) for p in points], "o", markersize=3)
    ax.set_xscale("log")
    ax.set_xlabel("x")
    ax.set_ylabel(f"{fn.norm.value} error")
    ax.set_title(f"k = {solver.nodes.order}, max error {level:.3e}")
    fig.tight_layout()
    fig.savefig(path, dpi=120)
    plt.close(fig)
    return path


def _parse_cli(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Minimax exponential-sum approximation of 1/x (Laplace quadrature)"
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--interval",
        nargs=2,
        metavar=("YMIN", "YMAX"),
        help="Approximation interval (0 < YMIN < YMAX)",
    )
    source.add_argument(
        "--energies",
        nargs=4,
        metavar=("EMIN", "EHOMO", "ELUMO", "EMAX"),
        help="Orbital-energy bounds; the interval is [2(ELUMO-EHOMO), 2(EMAX-EMIN)]",
    )
    source.add_argument("--demo", action="store_true", help="Run the k=5 demo case")
    parser.add_argument("--k", type=int, help="Number of exponential terms")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument(
        "--digits",
        type=int,
        default=20,
        help="Fractional digits when printing weights and exponents (default: 20)",
    )
    parser.add_argument("--plot", metavar="PATH", help="Write the error curve to a PNG file")
    parser.add_argument(
        "--norm",
        choices=[n.value for n in ErrorNorm],
        default=ErrorNorm.ABSOLUTE.value,
        help="Error to minimize (default: absolute)",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=C.DEFAULT_TOLERANCE,
        help="Relative ripple at which the exchange stops",
    )
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=C.DEFAULT_MAX_ITERATIONS,
        help="Exchange iteration budget",
    )
    parser.add_argument(
        "--log-level",
        choices=["WARNING", "INFO", "DEBUG"],
        default="WARNING",
        help="Logging level for laplace_minimax",
    )
    return parser.parse_args(argv)


def _result_dict(solver: MinimaxSolver, digits: int) -> dict[str, Any]:
    nodes = solver.nodes
    return {
        "k": nodes.order,
        "ymin": format_literal(solver.interval.ymin, digits),
        "ymax": format_literal(solver.interval.ymax, digits),
        "norm": nodes.norm.value,
        "iterations": nodes.iterations,
        "max_error": format_literal(nodes.max_error, digits),
        "weights": [format_literal(w, digits) for w in nodes.weights],
        "exponents": [format_literal(a, digits) for a in nodes.exponents],
    }


def main(argv: list[str] | None = None) -> int:
    ns = _parse_cli(argv)

    level = getattr(logging, ns.log_level)
    pkg_logger = logging.getLogger("laplace_minimax")
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(logging.BASIC_FORMAT))
    handler.setLevel(level)
    pkg_logger.addHandler(handler)
    pkg_logger.propagate = False
    pkg_logger.setLevel(level)

    try:
        if ns.digits < 0:
            raise InvalidInputError("--digits must be non-negative")
        solver = MinimaxSolver(
            SolverMode.REPORT if ns.log_level in {"INFO", "DEBUG"} else SolverMode.QUIET,
            tolerance=ns.tolerance,
            max_iterations=ns.max_iterations,
            norm=ns.norm,
        )
        if ns.demo:
            solver.compute(*C.DEMO_ENERGIES, ns.k if ns.k is not None else C.DEMO_ORDER)
        elif ns.k is None:
            raise InvalidInputError("--k is required unless --demo is given")
        elif ns.energies:
            solver.compute(*ns.energies, ns.k)
        elif ns.interval:
            solver.compute(ns.k, *ns.interval)
        else:
            raise InvalidInputError("give --interval, --energies or --demo")
    except InvalidInputError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_INVALID
    except ConvergenceError as exc:
        print(f"Error: no convergence: {exc}", file=sys.stderr)
        return EXIT_CONVERGENCE
    finally:
        pkg_logger.removeHandler(handler)

    result = _result_dict(solver, ns.digits)
    if ns.plot:
        result["plot"] = _plot_error_curve(solver, str(Path(ns.plot)))

    if ns.json:
        print(json.dumps(result, separators=(",", ":")))
    else:
        print(f"k = {result['k']}, interval [{result['ymin']}, {result['ymax']}]")
        print(f"{result['norm']} error {result['max_error']} after {result['iterations']} iterations")
        print(f"{'weight':>{ns.digits + 8}}  {'exponent':>{ns.digits + 8}}")
        for w, a in zip(result["weights"], result["exponents"]):
            print(f"{w:>{ns.digits + 8}}  {a:>{ns.digits + 8}}")
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
