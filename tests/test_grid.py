import numpy as np
import pytest

from aeroplan.grid import Grid


def test_size_from_grid_and_cell_size():
    grid = Grid(10.0, 1.0)
    assert grid.row_col_size == 10
    assert grid.mean.shape == (10, 10)
    assert grid.land.shape == (10, 10)


def test_size_rounds_up():
    assert Grid(10.0, 3.0).row_col_size == 4


def test_new_grid_is_zeroed():
    grid = Grid(40.0, 1.0)
    for array in (grid.mean, grid.variance, grid.semantics, grid.counter, grid.land):
        assert not array.any()


def test_increase_counter():
    grid = Grid(10.0, 1.0)
    grid.increase_counter((2, 3))
    grid.increase_counter((2, 3))
    assert grid.counter[2, 3] == 2
    assert grid.counter.sum() == 2


def test_increase_counter_accepts_array_index():
    grid = Grid(10.0, 1.0)
    grid.increase_counter(np.array([1, 4]))
    assert grid.counter[1, 4] == 1


def test_reset_clears_values():
    grid = Grid(10.0, 1.0)
    grid.mean[1, 1] = 5.0
    grid.variance[1, 1] = 2.0
    grid.land[0, 0] = 1
    grid.increase_counter((3, 3))
    grid.reset()
    assert not grid.mean.any()
    assert not grid.variance.any()
    assert not grid.land.any()
    assert not grid.counter.any()


def test_resize_changes_shape_and_clears():
    grid = Grid(10.0, 1.0)
    grid.mean[0, 0] = 1.0
    grid.resize(20.0, 2.0)
    assert grid.row_col_size == 10
    assert grid.grid_size == 20.0
    assert grid.cell_size == 2.0
    assert grid.mean.shape == (10, 10)
    assert not grid.mean.any()


@pytest.mark.parametrize("pos", [(0.0, 0.0, 0.0), (5.0, -3.0, 2.0), (-12.5, 7.25, 1.0)])
def test_filter_limits_centred_on_position(pos):
    grid = Grid(10.0, 1.0)
    grid.set_filter_limits(pos)
    (min_x, min_y), (max_x, max_y) = grid.limits()
    assert max_x - min_x == pytest.approx(grid.grid_size)
    assert max_y - min_y == pytest.approx(grid.grid_size)
    assert (min_x + max_x) / 2 == pytest.approx(pos[0])
    assert (min_y + max_y) / 2 == pytest.approx(pos[1])


@pytest.mark.parametrize("alpha", [0.0, 0.3, 0.8, 1.0])
def test_combine_weights_previous_grid(alpha):
    prev = Grid(10.0, 1.0)
    prev.mean.fill(1.0)
    prev.variance.fill(1.0)
    grid = Grid(10.0, 1.0)
    grid.combine(prev, alpha)
    assert np.allclose(grid.mean, alpha)
    assert np.allclose(grid.variance, alpha)
    assert np.allclose(prev.mean, 1.0)


def test_combine_identical_grids_is_stable():
    prev = Grid(10.0, 1.0)
    grid = Grid(10.0, 1.0)
    prev.mean[2, 2] = grid.mean[2, 2] = 3.5
    grid.combine(prev, 0.8)
    assert grid.mean[2, 2] == pytest.approx(3.5)


def test_combine_rejects_different_shapes():
    with pytest.raises(ValueError):
        Grid(10.0, 1.0).combine(Grid(1.0, 1.0), 0.5)