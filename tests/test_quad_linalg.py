import numpy as np
import pytest

from quadfloat import QuadFloat, SingularMatrixError
from quadfloat.linalg import as_array, lstsq, matmul, solve, svd, to_float_array

TIGHT = QuadFloat("1e-28")


def _hilbert(n: int) -> np.ndarray:
    return as_array([[QuadFloat(1) / (i + j + 1) for j in range(n)] for i in range(n)])


def _max_abs(values) -> QuadFloat:
    return max(abs(v) for v in np.asarray(values, dtype=object).ravel())


def test_as_array_converts_every_entry() -> None:
    arr = as_array([[1, "0.5"], [2.5, QuadFloat(3)]])
    assert arr.dtype == object
    assert all(isinstance(v, QuadFloat) for v in arr.ravel())
    assert to_float_array(arr).tolist() == [[1.0, 0.5], [2.5, 3.0]]


def test_matmul_accumulates_in_quad() -> None:
    assert matmul(as_array([1, 2, 3]), as_array([4, 5, 6])) == 32
    product = matmul(as_array([[1, 2], [3, 4]]), as_array([1, 1]))
    assert list(product) == [3, 7]
    with pytest.raises(ValueError):
        matmul(as_array([1, 2]), as_array([1, 2, 3]))


def test_solve_ill_conditioned_hilbert_system() -> None:
    h = _hilbert(8)
    expected = as_array([1] * 8)
    x = solve(h, matmul(h, expected))
    assert _max_abs(x - expected) < QuadFloat("1e-20")


def test_solve_multiple_right_hand_sides() -> None:
    a = as_array([[4, 1], [2, 3]])
    b = as_array([[1, 0], [0, 1]])
    inverse = solve(a, b)
    assert _max_abs(matmul(a, inverse) - b) < TIGHT


def test_solve_singular_matrix_raises() -> None:
    with pytest.raises(SingularMatrixError):
        solve(as_array([[1, 2], [2, 4]]), as_array([1, 2]))
    with pytest.raises(SingularMatrixError):
        solve(np.array([[1.0, 2.0], [2.0, 4.0]]), np.array([1.0, 2.0]))


def test_solve_zero_pivot_column_raises_singular() -> None:
    with pytest.raises(SingularMatrixError):
        solve(as_array([[0, 1], [0, 2]]), as_array([1, 1]))
    # the second column only vanishes after the first elimination step
    with pytest.raises(SingularMatrixError):
        solve(as_array([[1, 2, 3], [2, 4, 1], [3, 6, 2]]), as_array([1, 2, 3]))


def test_solve_native_arrays_stay_native() -> None:
    x = solve(np.array([[2.0, 0.0], [0.0, 4.0]]), np.array([1.0, 1.0]))
    assert x.dtype == np.float64
    np.testing.assert_allclose(x, [0.5, 0.25])


def test_solve_rejects_non_square() -> None:
    with pytest.raises(ValueError):
        solve(as_array([[1, 2, 3]]), as_array([1]))


def test_svd_reconstructs_matrix() -> None:
    a = as_array([[(i + 1) * (j + 2) + (1 if i == j else 0) for j in range(3)] for i in range(4)])
    u, s, vt = svd(a)
    assert u.shape == (4, 3) and s.shape == (3,) and vt.shape == (3, 3)
    assert s[0] >= s[1] >= s[2] > 0
    rebuilt = matmul(u * s[None, :], vt)
    assert _max_abs(rebuilt - a) < TIGHT * _max_abs(a)
    identity = as_array(np.eye(3))
    assert _max_abs(matmul(u.T, u) - identity) < TIGHT


def test_lstsq_overdetermined_consistent_system() -> None:
    a = as_array([[1, t] for t in range(5)])
    expected = as_array([2, -3])
    x = lstsq(a, matmul(a, expected))
    assert _max_abs(x - expected) < TIGHT


def test_lstsq_rank_deficient_gives_minimum_norm() -> None:
    a = as_array([[1, 1], [1, 1], [1, 1]])
    x = lstsq(a, as_array([2, 2, 2]))
    assert _max_abs(x - as_array([1, 1])) < TIGHT


def test_lstsq_native_path() -> None:
    a = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    x = lstsq(a, np.array([1.0, 2.0, 3.0]))
    assert x.dtype == np.float64
    np.testing.assert_allclose(x, [1.0, 2.0])
