import numpy as np
import pytest

from fluid import FluidSimulation, SimulationConfig
from fluid.solver import neighbour_openness, project

DT = 1.0 / 12.0


def max_fluid_divergence(sim):
    return np.abs(sim.divergence()[sim.fluid_mask()]).max()


class TestNeighbourOpenness:
    def test_border_neighbours_are_closed(self):
        s = np.ones((4, 3))
        s_left, s_right, s_up, s_down = neighbour_openness(s)
        assert np.all(s_left[0, :] == 0.0)
        assert np.all(s_right[-1, :] == 0.0)
        assert np.all(s_up[:, 0] == 0.0)
        assert np.all(s_down[:, -1] == 0.0)
        assert s_left[1, 1] == s_right[1, 1] == s_up[1, 1] == s_down[1, 1] == 1.0

    def test_matches_boundary_aware_query(self):
        sim = FluidSimulation(12, 8)
        s_left, s_right, s_up, s_down = neighbour_openness(sim.s.data)
        for x in range(12):
            for y in range(8):
                assert s_left[x, y] == sim.openness(x - 1, y)
                assert s_right[x, y] == sim.openness(x + 1, y)
                assert s_up[x, y] == sim.openness(x, y - 1)
                assert s_down[x, y] == sim.openness(x, y + 1)


class TestVelocityProjection:
    """Validate the projection step removes divergence around obstacles."""

    def setup_method(self):
        self.sim = FluidSimulation(20, 10)

    def test_projection_reduces_divergence(self):
        before = max_fluid_divergence(self.sim)
        metrics = project(self.sim, DT)
        after = max_fluid_divergence(self.sim)

        assert before == pytest.approx(30.0)
        assert after < before
        assert metrics["divergence_before_max"] == pytest.approx(before)
        assert metrics["divergence_after_max"] == pytest.approx(after)
        assert metrics["iterations"] == 40

    def test_divergence_tightens_with_more_iterations(self):
        coarse = FluidSimulation(20, 10)
        fine = FluidSimulation(20, 10)
        project(coarse, DT, iterations=5)
        project(fine, DT, iterations=400)
        assert max_fluid_divergence(fine) < max_fluid_divergence(coarse)
        assert max_fluid_divergence(fine) < 1e-6

    def test_inflow_columns_untouched(self):
        project(self.sim, DT)
        W = self.sim.width
        assert np.all(self.sim.u.data[0, :] == 30.0)
        assert np.all(self.sim.u.data[W, :] == 30.0)

    def test_domain_border_v_faces_untouched(self):
        project(self.sim, DT)
        H = self.sim.height
        assert np.all(self.sim.v.data[:, 0] == 0.0)
        assert np.all(self.sim.v.data[:, H] == 0.0)

    def test_solid_cells_are_never_updated(self):
        project(self.sim, DT)
        solid = self.sim.s.data == 0.0
        assert solid.any()
        assert np.all(self.sim.p.data[solid] == 0.0)
        # Faces of a solid cell's closed side stay at their initial zero
        u, v = self.sim.u.data, self.sim.v.data
        xs, ys = np.nonzero(solid)
        for x, y in zip(xs, ys):
            if self.sim.openness(x - 1, y) == 0.0:
                assert u[x, y] == 0.0
            if self.sim.openness(x, y - 1) == 0.0:
                assert v[x, y] == 0.0

    def test_pressure_is_recomputed_not_accumulated(self):
        project(self.sim, DT, iterations=1000)
        assert np.abs(self.sim.p.data).max() > 1.0
        # Field is now divergence-free, so a second solve finds (almost) no pressure
        project(self.sim, DT, iterations=1000)
        assert np.abs(self.sim.p.data).max() < 1e-6

    def test_walled_in_cell_is_skipped(self):
        sim = FluidSimulation(5, 5, SimulationConfig(draw_obstacle=False))
        for x, y in [(1, 2), (3, 2), (2, 1), (2, 3)]:
            sim.s[x, y] = 0.0
        assert sim.s[2, 2] == 1.0
        assert not sim.fluid_mask()[2, 2]

        project(sim, DT)

        assert sim.p[2, 2] == 0.0
        assert np.all(np.isfinite(sim.u.data))
        assert np.all(np.isfinite(sim.v.data))
        assert np.all(np.isfinite(sim.p.data))

    def test_zero_iterations_only_clears_pressure(self):
        self.sim.p.reset(5.0)
        u_before = self.sim.u.data.copy()
        project(self.sim, DT, iterations=0)
        assert np.all(self.sim.p.data == 0.0)
        np.testing.assert_array_equal(self.sim.u.data, u_before)

    def test_non_positive_dt_raises(self):
        with pytest.raises(ValueError):
            project(self.sim, 0.0)
