import numpy as np
import pytest

from fluid.grid import Grid, GridIndexError


class TestGrid:
    def test_new_grid_is_zero_filled(self):
        g = Grid(4, 3)
        assert g.shape == (4, 3)
        assert g.data.shape == (4, 3)
        assert np.all(g.data == 0.0)

    def test_filled(self):
        g = Grid.filled(1.5, 2, 5)
        assert g.shape == (2, 5)
        assert np.all(g.data == 1.5)

    def test_get_set_roundtrip(self):
        g = Grid(4, 3)
        g[3, 2] = 7.0
        g.set(0, 1, -2.0)
        assert g[3, 2] == 7.0
        assert g.get(0, 1) == -2.0
        assert g.data[3, 2] == 7.0

    @pytest.mark.parametrize("x, y", [(4, 0), (0, 3), (4, 3), (-1, 0), (0, -1)])
    def test_out_of_bounds_access_raises(self, x, y):
        g = Grid(4, 3)
        with pytest.raises(GridIndexError):
            g[x, y]
        with pytest.raises(IndexError):
            g[x, y] = 1.0

    def test_zero_and_reset_overwrite_everything(self):
        g = Grid(3, 3)
        g[1, 1] = 4.0
        g.reset(2.5)
        assert np.all(g.data == 2.5)
        g.zero()
        assert np.all(g.data == 0.0)

    def test_flatten_is_row_major(self):
        g = Grid(3, 2)
        g[2, 1] = 7.0
        g[1, 0] = 3.0
        flat = g.flatten()
        assert flat.shape == (6,)
        assert flat[1 * 3 + 2] == 7.0
        assert flat[0 * 3 + 1] == 3.0

    def test_flatten_returns_a_copy(self):
        g = Grid(2, 2)
        flat = g.flatten()
        flat[0] = 9.0
        assert g[0, 0] == 0.0

    def test_copy_is_independent(self):
        g = Grid(2, 2)
        c = g.copy()
        c[0, 0] = 1.0
        assert g[0, 0] == 0.0
        assert c != g

    def test_equality(self):
        assert Grid(3, 2) == Grid(3, 2)
        assert Grid(3, 2) != Grid(2, 3)
        assert Grid.filled(1.0, 2, 2) != Grid(2, 2)

    def test_from_array_wraps_without_copy(self):
        arr = np.zeros((5, 4))
        g = Grid.from_array(arr)
        assert g.shape == (5, 4)
        g[4, 3] = 1.0
        assert arr[4, 3] == 1.0

    def test_invalid_construction(self):
        with pytest.raises(ValueError):
            Grid(0, 3)
        with pytest.raises(ValueError):
            Grid.from_array(np.zeros(5))
