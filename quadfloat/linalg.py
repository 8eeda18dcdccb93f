"""Dense linear algebra over :class:`QuadFloat` (and plain ``float``).

Matrices and vectors are numpy arrays. Arrays with a native float/int dtype
go straight to :mod:`numpy.linalg`; object arrays are treated as ``QuadFloat``
data and factorized by mpmath in the 113-bit context, so nothing is narrowed
to double on the way.
"""
from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from .context import QUAD
from .scalar import QuadFloat
from .traits import numeric_traits

__all__ = [
    "SingularMatrixError",
    "as_array",
    "lstsq",
    "matmul",
    "solve",
    "svd",
    "to_float_array",
]


class SingularMatrixError(ArithmeticError):
    """Raised when a linear system has no unique solution."""


def as_array(values: Any) -> np.ndarray:
    """Return ``values`` as an object array whose entries are all ``QuadFloat``."""
    arr = np.asarray(values, dtype=object)
    out = np.empty(arr.shape, dtype=object)
    for index, value in np.ndenumerate(arr):
        out[index] = value if isinstance(value, QuadFloat) else QuadFloat(value)
    return out


def to_float_array(values: Any) -> np.ndarray:
    """Narrow an array of ``QuadFloat`` to ``float64``."""
    arr = np.asarray(values, dtype=object)
    out = np.empty(arr.shape, dtype=np.float64)
    for index, value in np.ndenumerate(arr):
        out[index] = float(value)
    return out


def _is_native(arr: np.ndarray) -> bool:
    return arr.dtype.kind in "fiu"


def _vector(items: Sequence[Any]) -> np.ndarray:
    out = np.empty(len(items), dtype=object)
    for i, item in enumerate(items):
        out[i] = item
    return out


def _mp_matrix(arr: np.ndarray) -> Any:
    if arr.ndim == 1:
        return QUAD.matrix([value.to_mpf() for value in arr])
    return QUAD.matrix([[value.to_mpf() for value in row] for row in arr])


def _from_mp_matrix(mat: Any) -> np.ndarray:
    out = np.empty((mat.rows, mat.cols), dtype=object)
    for i in range(mat.rows):
        for j in range(mat.cols):
            out[i, j] = QuadFloat.from_mpf(mat[i, j])
    return out


def _check_square(arr: np.ndarray) -> None:
    if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
        raise ValueError(f"expected a square matrix, got shape {arr.shape}")


def solve(a: Any, b: Any) -> np.ndarray:
    """Solve ``a @ x = b`` by LU decomposition with partial pivoting.

    ``b`` may be a vector or a matrix of right-hand sides.

    Raises:
        SingularMatrixError: ``a`` is (numerically) singular.
    """
    a_arr, b_arr = np.asarray(a), np.asarray(b)
    _check_square(a_arr)
    if b_arr.shape[0] != a_arr.shape[0]:
        raise ValueError(f"shape mismatch: {a_arr.shape} and {b_arr.shape}")

    if _is_native(a_arr) and _is_native(b_arr):
        try:
            return np.linalg.solve(a_arr.astype(np.float64), b_arr.astype(np.float64))
        except np.linalg.LinAlgError as exc:
            raise SingularMatrixError(str(exc)) from exc

    matrix = _mp_matrix(as_array(a_arr))
    rhs = as_array(b_arr)
    columns = [rhs] if rhs.ndim == 1 else [rhs[:, j] for j in range(rhs.shape[1])]
    solutions = []
    for column in columns:
        try:
            x = QUAD.lu_solve(matrix, _mp_matrix(column))
        except (ZeroDivisionError, TypeError) as exc:
            # an all-zero pivot column leaves mpmath's pivot index at None (TypeError)
            raise SingularMatrixError("matrix is numerically singular") from exc
        solutions.append([QuadFloat.from_mpf(x[i]) for i in range(x.rows)])

    if rhs.ndim == 1:
        return _vector(solutions[0])
    out = np.empty(rhs.shape, dtype=object)
    for j, solution in enumerate(solutions):
        out[:, j] = _vector(solution)
    return out


def svd(a: Any) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Thin singular value decomposition ``a = U @ diag(s) @ Vt``.

    Singular values come back in descending order.
    """
    arr = np.asarray(a)
    if arr.ndim != 2:
        raise ValueError(f"expected a matrix, got shape {arr.shape}")
    if _is_native(arr):
        return np.linalg.svd(arr.astype(np.float64), full_matrices=False)

    u, s, v = QUAD.svd_r(_mp_matrix(as_array(arr)), full_matrices=False, compute_uv=True)
    u_arr, v_arr = _from_mp_matrix(u), _from_mp_matrix(v)
    values = [QuadFloat.from_mpf(s[i]) for i in range(s.rows)]
    order = sorted(range(len(values)), key=lambda i: values[i], reverse=True)
    return (
        u_arr[:, order],
        _vector([values[i] for i in order]),
        v_arr[order, :],
    )


def lstsq(a: Any, b: Any) -> np.ndarray:
    """Minimum-norm least-squares solution of ``a @ x = b``.

    Singular values below ``dummy_precision * s_max`` are treated as zero.
    """
    arr = np.asarray(a)
    rhs = np.asarray(b)
    native = _is_native(arr) and _is_native(rhs)
    traits = numeric_traits(float if native else QuadFloat)
    if not native:
        rhs = as_array(rhs)

    u, s, vt = svd(arr if native else as_array(arr))
    if len(s) == 0:
        raise ValueError("empty matrix")
    cutoff = traits.dummy_precision * s[0]
    inverse = np.empty(len(s), dtype=np.float64 if native else object)
    for i, value in enumerate(s):
        inverse[i] = 1 / value if value > cutoff else traits.from_int(0)

    projected = matmul(u.T, rhs)
    if projected.ndim == 1:
        projected = projected * inverse
    else:
        projected = projected * inverse[:, None]
    return matmul(vt.T, projected)


def matmul(a: Any, b: Any) -> Any:
    """Matrix/vector product; ``QuadFloat`` dot products are accumulated by mpmath."""
    a_arr, b_arr = np.asarray(a), np.asarray(b)
    if _is_native(a_arr) and _is_native(b_arr):
        return a_arr @ b_arr
    a_arr, b_arr = as_array(a_arr), as_array(b_arr)
    if a_arr.shape[-1] != b_arr.shape[0]:
        raise ValueError(f"shape mismatch: {a_arr.shape} and {b_arr.shape}")

    def dot(row: np.ndarray, col: np.ndarray) -> QuadFloat:
        return QuadFloat.from_mpf(QUAD.fdot(
            (x.to_mpf(), y.to_mpf()) for x, y in zip(row, col)
        ))

    if a_arr.ndim == 1 and b_arr.ndim == 1:
        return dot(a_arr, b_arr)
    if a_arr.ndim == 1:
        return _vector([dot(a_arr, b_arr[:, j]) for j in range(b_arr.shape[1])])
    if b_arr.ndim == 1:
        return _vector([dot(row, b_arr) for row in a_arr])
    out = np.empty((a_arr.shape[0], b_arr.shape[1]), dtype=object)
    for i in range(a_arr.shape[0]):
        for j in range(b_arr.shape[1]):
            out[i, j] = dot(a_arr[i], b_arr[:, j])
    return out
