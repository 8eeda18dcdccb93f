import math

import numpy as np
import pytest

from laplace_minimax import tables
from laplace_minimax.initial_guess import exchange


def test_every_order_up_to_25_is_tabulated() -> None:
    assert tables.orders() == tuple(range(1, 26))


@pytest.mark.parametrize("k", [1, 2, 8, 16, 25])
def test_entries_are_ordered_and_end_detached(k: int) -> None:
    table = tables.entries(k)
    assert len(table) >= 3
    ratios = [e.ratio for e in table]
    errors = [e.error for e in table]
    assert ratios == sorted(ratios)
    assert all(later > earlier for earlier, later in zip(errors, errors[1:]))
    assert table[-1].detached
    assert not any(e.detached for e in table[:-1])
    for entry in table:
        assert entry.vector.shape == (3 * k + 1,)
        start = entry.start()
        assert start.order == k
        assert np.all(np.diff(start.points) > 0)


def test_grid_hit_returns_the_entry() -> None:
    start = tables.interpolated_start(1, 8.0)
    assert start.ratio == 8.0 and start.points[-1] == 8.0
    assert start.error == pytest.approx(8.516e-2, rel=1e-3)


def test_beyond_the_last_entry_keeps_the_inner_point() -> None:
    start = tables.interpolated_start(8, 57500.0)
    assert start.ratio == 57500.0
    assert start.detached
    assert start.points[-1] == pytest.approx(13749.119, rel=1e-6)
    assert start.error == pytest.approx(5.3924676e-5, rel=1e-6)


def test_interpolated_start_is_close() -> None:
    start = tables.interpolated_start(2, 10.0)
    assert start.ratio == 10.0
    assert np.all(np.diff(start.points) > 0)
    solved = exchange(start)
    assert 6.8779e-3 < solved.error < 1.2740e-2
    np.testing.assert_allclose(solved.log_exponents, start.log_exponents, atol=5e-2)


def test_outside_the_table() -> None:
    assert tables.interpolated_start(1, 1.5) is None
    assert tables.interpolated_start(99, 10.0) is None
    assert tables.entries(99) == ()
    assert tables.nearest_entry(99, 10.0) is None


def test_nearest_entry_is_on_its_own_interval() -> None:
    start = tables.nearest_entry(4, 100.0)
    assert start.ratio == 128.0
    assert start.error == pytest.approx(1.2136e-3, rel=1e-3)
    far = tables.nearest_entry(1, 1000.0)
    assert far.ratio == 1000.0
    assert far.points[-1] == pytest.approx(8.667, rel=1e-3)
    assert math.isclose(far.error, tables.entries(1)[-1].error)
