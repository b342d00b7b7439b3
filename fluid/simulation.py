"""
simulation.py — Master Physics Loop
====================================
One call to `step()` advances the smoke tunnel by dt seconds.

Physics pipeline per frame:
  1. Gravity (optional, off by default)
  2. Project velocity (enforce incompressibility around the obstacles)
  3. Advect velocity (self-advection)
  4. Advect smoke (passive scalar)

The front end only ever talks to this class: it calls `step()` once per
displayed frame, reads the flattened field snapshots to render, and sends
obstacle-painting / reset commands back in.

Scene at construction:
  - inflow of `windspeed` on both u boundary columns (left and right)
  - a circular obstacle near (W/3 + 5, H/2 - 1), radius W/7 (optional)
  - an 11-row smoke inlet band at column 0, centred vertically
"""

import time

import numpy as np

from .advect import advect_smoke, advect_velocity
from .config import SimulationConfig
from .forces import apply_gravity
from .grid import Grid
from .obstacles import draw_filled_circle, seed_inlet
from .solver import neighbour_openness, project


class MaskQueryError(IndexError):
    """Raised when the openness mask is queried more than one cell outside the domain."""


class FluidSimulation:
    """
    The complete 2D smoke simulation on a W × H MAC grid.

    Usage:
        sim = FluidSimulation(160, 90)
        for frame in range(100):
            sim.step(1 / 12)
            smoke = sim.get_smoke()        # Hand to renderer
        sim.draw_filled_circle(40, 45, 3)  # User painted a wall
    """

    def __init__(self, width: int, height: int, config: SimulationConfig = None):
        """
        Args:
            width, height : Grid resolution in cells (fixed for the lifetime)
            config        : Tunables; defaults to SimulationConfig()
        """
        if width < 1 or height < 1:
            raise ValueError(f"Simulation size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.config = config if config is not None else SimulationConfig()
        self._build_state(keep_mask=None)

    def _build_state(self, keep_mask):
        """(Re)allocate every field. Passing `keep_mask` skips the obstacle carve."""
        W, H = self.width, self.height
        cfg = self.config

        # ── Velocity fields (face-centred, staggered) ─────────────────────
        # u: x-component on vertical faces   → (W+1, H)
        # v: y-component on horizontal faces → (W, H+1)
        self.u = Grid(W + 1, H)
        self.v = Grid(W, H + 1)
        self.u.data[0, :] = cfg.windspeed
        self.u.data[W, :] = cfg.windspeed

        # ── Scalar fields (cell-centred) ──────────────────────────────────
        if keep_mask is not None:
            self.s = keep_mask
        else:
            self.s = Grid.filled(1.0, W, H)
            if cfg.draw_obstacle:
                draw_filled_circle(self.s, W // 3 + 5, H // 2 - 1, W / 7.0, 0.0)
        self.p = Grid(W, H)
        self.smoke = Grid(W, H)
        seed_inlet(self.smoke, cfg.smoke_band_half_height)

        self.frame = 0
        self.perf_log = []   # stores timing data per frame

    # ── Openness queries ──────────────────────────────────────────────────────

    def openness(self, x: int, y: int) -> float:
        """
        Mask value extended one cell past the domain.

        Inside the grid this is the stored value; on the lines just outside
        (x = -1, x = W, y = -1, y = H) it is 0.0, the closed border. Anything
        else is a caller bug.
        """
        if 0 <= x < self.width and 0 <= y < self.height:
            return self.s[x, y]
        if x in (-1, self.width) or y in (-1, self.height):
            return 0.0
        raise MaskQueryError(
            f"({x},{y}) not in [-1, {self.width}]x[-1, {self.height}]"
        )

    def open_u(self, x: int, y: int) -> bool:
        """u-face (x, y) sits between cells (x-1, y) and (x, y); both must be open."""
        return self.openness(x, y) != 0.0 and self.openness(x - 1, y) != 0.0

    def open_v(self, x: int, y: int) -> bool:
        """v-face (x, y) sits between cells (x, y-1) and (x, y); both must be open."""
        return self.openness(x, y) != 0.0 and self.openness(x, y - 1) != 0.0

    def open_u_mask(self) -> np.ndarray:
        """open_u for every u-face at once → bool array (W+1, H)."""
        padded = np.pad(self.s.data, 1, mode="constant") != 0.0
        return padded[1:, 1:-1] & padded[:-1, 1:-1]

    def open_v_mask(self) -> np.ndarray:
        """open_v for every v-face at once → bool array (W, H+1)."""
        padded = np.pad(self.s.data, 1, mode="constant") != 0.0
        return padded[1:-1, 1:] & padded[1:-1, :-1]

    # ── Time stepping ─────────────────────────────────────────────────────────

    def step(self, dt: float = None) -> dict:
        """
        Advance simulation by one timestep.

        Returns performance metrics dict for benchmarking.

        Args:
            dt : Timestep in seconds (default: config.dt)
        """
        if dt is None:
            dt = self.config.dt
        if dt <= 0.0:
            raise ValueError(f"dt must be positive, got {dt}")

        t_total_start = time.perf_counter()

        # ── Step 1: Gravity ───────────────────────────────────────────────
        t0 = time.perf_counter()
        if self.config.with_gravity:
            apply_gravity(self, dt)
        t_gravity = (time.perf_counter() - t0) * 1000

        # ── Step 2: Project velocity (enforce incompressibility) ──────────
        proj_metrics = project(self, dt)

        # ── Step 3: Advect velocity ───────────────────────────────────────
        t0 = time.perf_counter()
        advect_velocity(self, dt)
        t_advect_vel = (time.perf_counter() - t0) * 1000

        # ── Step 4: Advect smoke ──────────────────────────────────────────
        t0 = time.perf_counter()
        advect_smoke(self, dt)
        t_advect_smoke = (time.perf_counter() - t0) * 1000

        # ── Frame bookkeeping ─────────────────────────────────────────────
        self.frame += 1
        t_total = (time.perf_counter() - t_total_start) * 1000

        metrics = {
            "frame"             : self.frame,
            "dt"                : dt,
            "total_ms"          : t_total,
            "fps"               : 1000.0 / t_total if t_total > 0 else 0,
            "gravity_ms"        : t_gravity,
            "project_ms"        : proj_metrics["time_ms"],
            "advect_vel_ms"     : t_advect_vel,
            "advect_smoke_ms"   : t_advect_smoke,
            "divergence_before" : proj_metrics["divergence_before_max"],
            "divergence_max"    : proj_metrics["divergence_after_max"],
            "divergence_mean"   : proj_metrics["divergence_after_mean"],
            "smoke_total"       : float(self.smoke.data.sum()),
        }
        self.perf_log.append(metrics)
        return metrics

    # ── Derived fields ────────────────────────────────────────────────────────

    def divergence(self) -> np.ndarray:
        """
        Net outflow of every cell: u[x+1,y] - u[x,y] + v[x,y+1] - v[x,y].

        For an incompressible fluid this should be ~0 in every fluid cell.
        Returns: (W, H) array.
        """
        u, v = self.u.data, self.v.data
        return (u[1:, :] - u[:-1, :]) + (v[:, 1:] - v[:, :-1])

    def fluid_mask(self) -> np.ndarray:
        """Open cells with at least one open neighbour, i.e. where projection acts."""
        s = self.s.data
        s_total = sum(neighbour_openness(s))
        return (s != 0.0) & (s_total != 0.0)

    def get_velocity_at_center(self) -> tuple:
        """
        Interpolate staggered face velocities to cell centres.

        Returns (uc, vc) each of shape (W, H).
        """
        uc = 0.5 * (self.u.data[:-1, :] + self.u.data[1:, :])
        vc = 0.5 * (self.v.data[:, :-1] + self.v.data[:, 1:])
        return uc, vc

    # ── Accessors for the front end (row-major, flattened copies) ─────────────

    def get_smoke(self) -> np.ndarray:
        return self.smoke.flatten()

    def get_pressure(self) -> np.ndarray:
        return self.p.flatten()

    def get_s(self) -> np.ndarray:
        return self.s.flatten()

    def get_u(self) -> np.ndarray:
        """Cell-centred x-velocity."""
        uc, _ = self.get_velocity_at_center()
        return uc.flatten(order="F")

    def get_v(self) -> np.ndarray:
        """Cell-centred y-velocity."""
        _, vc = self.get_velocity_at_center()
        return vc.flatten(order="F")

    def get_speed(self) -> np.ndarray:
        """Cell-centred speed magnitude."""
        uc, vc = self.get_velocity_at_center()
        return np.sqrt(uc * uc + vc * vc).flatten(order="F")

    # ── Editing / resets ──────────────────────────────────────────────────────

    def draw_filled_circle(self, center_x: int, center_y: int, radius: float = None):
        """Paint a solid obstacle. Parts outside the grid are ignored."""
        if radius is None:
            radius = self.config.brush_radius
        draw_filled_circle(self.s, center_x, center_y, radius, 0.0)

    def reset_walls(self):
        """Remove every obstacle. Velocity, pressure and smoke are untouched."""
        self.s.reset(1.0)

    def reset_velocities(self):
        """Discard everything and rebuild the initial scene (same size and config)."""
        self._build_state(keep_mask=None)

    def reset(self):
        self.reset_velocities()

    def reset_except_walls(self):
        """Rebuild velocity, pressure and smoke but keep the painted obstacles."""
        self._build_state(keep_mask=self.s)

    # ── Diagnostics ───────────────────────────────────────────────────────────

    def cell_info(self, x: int, y: int) -> str:
        """Text dump of the state at one cell. Raises GridIndexError off-grid."""
        u_flow = 0.5 * (self.u[x, y] + self.u[x + 1, y])
        v_flow = 0.5 * (self.v[x, y] + self.v[x, y + 1])
        return (
            f"(x,y) = ({x},{y}):\n"
            f"u-flow: {u_flow:.5f}\n"
            f"v-flow: {v_flow:.5f}\n"
            f"s: {self.s[x, y]:.5f}\n"
            f"p: {self.p[x, y]:.5f}\n"
            f"smoke: {self.smoke[x, y]:.5f}"
        )

    def print_info(self, x: int, y: int):
        """Print cell_info(); clicks outside the grid just report and return."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            print(f"[Simulation] ({x},{y}) is outside the {self.width}x{self.height} grid")
            return
        print(self.cell_info(x, y))

    def snapshot(self) -> dict:
        """Copies of every raw field plus the current divergence."""
        return {
            "frame"      : self.frame,
            "u"          : self.u.data.copy(),
            "v"          : self.v.data.copy(),
            "s"          : self.s.data.copy(),
            "pressure"   : self.p.data.copy(),
            "smoke"      : self.smoke.data.copy(),
            "divergence" : self.divergence(),
        }

    def print_status(self):
        """Pretty-print current simulation state."""
        fluid = self.fluid_mask()
        div = np.abs(self.divergence()[fluid]) if fluid.any() else np.zeros(1)
        uc, vc = self.get_velocity_at_center()
        print(f"\n{'='*50}")
        print(f"  Frame: {self.frame}  |  Grid: {self.width}x{self.height}")
        print(f"  Smoke     : max={self.smoke.data.max():.4f}, total={self.smoke.data.sum():.2f}")
        print(f"  Velocity  : max_u={np.abs(uc).max():.4f}, max_v={np.abs(vc).max():.4f}")
        print(f"  Divergence: max={div.max():.6f}, mean={div.mean():.8f}")
        print(f"  Pressure  : max={self.p.data.max():.4f}, min={self.p.data.min():.4f}")
        print(f"  Obstacles : {int((self.s.data == 0.0).sum())} solid cells")
        if self.perf_log:
            last = self.perf_log[-1]
            print(f"  Perf      : {last['total_ms']:.1f}ms/frame ({last['fps']:.1f} FPS)")
        print(f"{'='*50}")

    def __repr__(self):
        return (
            f"FluidSimulation({self.width}x{self.height}, frame={self.frame})\n"
            f"  smoke    : max={self.smoke.data.max():.4f}, sum={self.smoke.data.sum():.2f}\n"
            f"  pressure : max={self.p.data.max():.4f}, min={self.p.data.min():.4f}"
        )
