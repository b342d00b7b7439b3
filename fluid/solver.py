"""
solver.py — Pressure Projection
================================
The projection step enforces INCOMPRESSIBILITY:
  div(v) = 0 in every fluid cell

Instead of assembling a Poisson system for p and subtracting its gradient,
we relax the velocity field directly. For each fluid cell:
  1. Measure the net outflow through its four faces (the divergence).
  2. Push that amount back through the faces that are OPEN, split evenly
     between them. Faces next to a solid or the domain border stay put.
  3. Accumulate the correction into the pressure (diagnostic only).

Updating in place while scanning is Gauss-Seidel; scaling the correction
by ω > 1 is successive over-relaxation (SOR). We run a FIXED number of
sweeps with no convergence check, so a step always costs the same.

The sweep is inherently sequential (each cell reads faces its left/up
neighbours just wrote), so unlike the rest of the package this stays a
Python loop rather than array slicing.
"""

import time

import numpy as np


def neighbour_openness(s: np.ndarray) -> tuple:
    """
    Openness of the left, right, up and down neighbour of every cell.

    The mask is padded with a closed (0.0) ring, so cells on the domain
    border see their out-of-domain neighbour as solid.

    Returns (s_left, s_right, s_up, s_down), each shaped like `s`.
    """
    padded = np.pad(s, 1, mode="constant", constant_values=0.0)
    s_left  = padded[:-2, 1:-1]
    s_right = padded[2:,  1:-1]
    s_up    = padded[1:-1, :-2]
    s_down  = padded[1:-1, 2:]
    return s_left, s_right, s_up, s_down


def project(sim, dt: float, iterations: int = None, overrelaxation: float = None) -> dict:
    """
    Make the velocity field of `sim` (approximately) divergence-free.

    Args:
        sim            : FluidSimulation to modify in-place (u, v, p)
        dt             : Timestep, only used to scale the pressure
        iterations     : Gauss-Seidel sweeps (default: sim.config.num_iterations)
        overrelaxation : SOR factor ω (default: sim.config.overrelaxation)

    Returns:
        dict with timing and divergence metrics (for benchmarking)
    """
    if dt <= 0.0:
        raise ValueError(f"dt must be positive, got {dt}")

    cfg = sim.config
    if iterations is None:
        iterations = cfg.num_iterations
    if overrelaxation is None:
        overrelaxation = cfg.overrelaxation

    t_start = time.perf_counter()
    fluid = sim.fluid_mask()
    div_before = np.abs(sim.divergence()[fluid])

    # p is a per-step diagnostic, never carried forward
    sim.p.zero()
    u, v, p = sim.u.data, sim.v.data, sim.p.data
    s = sim.s.data
    pressure_scale = cfg.density * cfg.cell_size / dt

    # The mask does not change during projection, so the per-face weights
    # are computed once. Cells walled in on all four sides have nothing to
    # push against and are left out.
    s_left, s_right, s_up, s_down = neighbour_openness(s)
    s_total = s_left + s_right + s_up + s_down
    cells = []
    for y in range(sim.height):
        for x in range(sim.width):
            if s[x, y] == 0.0 or s_total[x, y] == 0.0:
                continue
            n = s_total[x, y]
            cells.append((x, y,
                          s_left[x, y] / n, s_right[x, y] / n,
                          s_up[x, y] / n, s_down[x, y] / n,
                          pressure_scale / n))

    for _ in range(iterations):
        for x, y, w_left, w_right, w_up, w_down, w_p in cells:
            d = overrelaxation * (u[x + 1, y] - u[x, y] + v[x, y + 1] - v[x, y])
            u[x, y]     += d * w_left
            u[x + 1, y] -= d * w_right
            v[x, y]     += d * w_up
            v[x, y + 1] -= d * w_down
            p[x, y]     += d * w_p

    div_after = np.abs(sim.divergence()[fluid])
    t_end = time.perf_counter()

    return {
        "time_ms"               : (t_end - t_start) * 1000,
        "iterations"            : iterations,
        "divergence_before_max" : float(div_before.max()) if div_before.size else 0.0,
        "divergence_after_max"  : float(div_after.max()) if div_after.size else 0.0,
        "divergence_after_mean" : float(div_after.mean()) if div_after.size else 0.0,
    }
