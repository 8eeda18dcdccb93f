"""Tabulated absolute-norm solutions used as starting points.

``data/absolute_starts.json`` holds, for every tabulated order k, converged
solutions on ``[1, 2**j]``. Each order runs from the shortest interval whose
error is still well above quad rounding up to the first interval on which
the last alternation point has moved inside; that entry is the solution on
every longer interval as well.

A start for an arbitrary ``R`` is interpolated in ``log R`` from the
neighbouring entries, component by component in ``[log w, log a, log x_j]``.
"""
from __future__ import annotations

import functools
import json
import math
from dataclasses import dataclass
from importlib import resources
from typing import Any

import numpy as np

from . import constants as C
from .initial_guess import StartingPoint

__all__ = ["TableEntry", "entries", "interpolated_start", "nearest_entry", "orders"]

_DATA_FILE = "absolute_starts.json"


@dataclass(frozen=True)
class TableEntry:
    ratio: float
    error: float
    detached: bool
    vector: np.ndarray

    def start(self, ratio: float | None = None) -> StartingPoint:
        """The entry as a start on ``[1, ratio]`` (its own interval by default)."""
        if ratio is None:
            ratio = self.ratio
        k = (len(self.vector) - 1) // 3
        points = np.exp(self.vector[2 * k:])
        points[0] = 1.0
        if not self.detached or points[-1] > ratio:
            points[-1] = ratio
        return StartingPoint(self.vector[:k], self.vector[k:2 * k], points, ratio, self.error)


def _entry(raw: dict[str, Any]) -> TableEntry:
    vector = np.array(raw["log_weights"] + raw["log_exponents"] + raw["log_points"])
    return TableEntry(2.0 ** raw["j"], raw["error"], raw["detached"], vector)


@functools.lru_cache(maxsize=None)
def _load() -> dict[int, tuple[TableEntry, ...]]:
    path = resources.files(__package__).joinpath("data").joinpath(_DATA_FILE)
    data = json.loads(path.read_text(encoding="utf-8"))
    return {
        int(k): tuple(sorted((_entry(raw) for raw in rows), key=lambda e: e.ratio))
        for k, rows in data["orders"].items()
    }


def orders() -> tuple[int, ...]:
    return tuple(sorted(_load()))


def entries(k: int) -> tuple[TableEntry, ...]:
    """Entries for ``k`` terms by increasing ratio; empty if ``k`` is not tabulated."""
    return _load().get(k, ())


def _lagrange_weights(nodes: np.ndarray, t: float) -> np.ndarray:
    weights = np.ones(len(nodes))
    for i, ti in enumerate(nodes):
        for j, tj in enumerate(nodes):
            if i != j:
                weights[i] *= (t - tj) / (ti - tj)
    return weights


def interpolated_start(k: int, ratio: float) -> StartingPoint | None:
    """Start on ``[1, ratio]`` interpolated from the table.

    ``None`` outside the tabulated range or where the interpolated points do
    not increase. Beyond the last entry of an order whose last point has
    moved inside, that entry is returned unchanged.
    """
    table = entries(k)
    if not table or ratio < table[0].ratio:
        return None
    last = table[-1]
    if ratio >= last.ratio:
        return last.start(ratio) if last.detached else None

    upper = next(i for i, e in enumerate(table) if e.ratio > ratio)
    if table[upper - 1].ratio == ratio:
        return table[upper - 1].start(ratio)
    width = min(C.TABLE_INTERPOLATION_ENTRIES, len(table))
    lo = min(max(upper - width // 2, 0), len(table) - width)
    window = table[lo:lo + width]
    logs = np.array([math.log(e.ratio) for e in window])
    weights = _lagrange_weights(logs, math.log(ratio))
    vector = sum(w * e.vector for w, e in zip(weights, window))
    start = StartingPoint.from_vector(vector, ratio)
    if np.any(np.diff(start.points) <= 0):
        return None
    return start


def nearest_entry(k: int, ratio: float) -> StartingPoint | None:
    """The tabulated solution closest to ``ratio`` in ``log R``, on its own interval."""
    table = entries(k)
    if not table:
        return None
    best = min(table, key=lambda e: abs(math.log(e.ratio / ratio)))
    if best is table[-1] and best.detached and ratio > best.ratio:
        return best.start(ratio)
    return best.start()
