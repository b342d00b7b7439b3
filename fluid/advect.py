"""
advect.py — Semi-Lagrangian Advection
======================================
This is what makes the smoke look like it's *actually flowing*.

The algorithm (per face / per cell):
  1. Take the position where the quantity is stored.
  2. Trace BACKWARD along the velocity field by one timestep (dt).
     → "Where did the stuff at this point come FROM?"
  3. Sample the field at the back-traced position with bilinear
     interpolation (it'll land between grid points).
  4. That sampled value becomes the new value.

Every pass reads only the PRE-pass fields and writes into a fresh buffer
that is swapped in after the whole sweep, so no update ever sees a
neighbour that was already advected this step.

Staggering (H = cell size):
  - u lives on vertical faces    → stored at (i·H,       j·H + H/2)
  - v lives on horizontal faces  → stored at (i·H + H/2, j·H)
  - smoke lives at cell centres  → stored at (i·H + H/2, j·H + H/2)

Key reference: Jos Stam, "Stable Fluids" (SIGGRAPH 1999)
"""

import numpy as np

from .grid import Grid


def sample_field(field: np.ndarray, x, y, dx: float, dy: float,
                 width: int, height: int, h: float):
    """
    Bilinear interpolation of a staggered field at arbitrary positions.

    The query point is clamped into [h, width·h] × [h, height·h], so we never
    sample past the outer half-cell. The 2×2 stencil is located on the
    field's OWN index grid after removing its (dx, dy) staggering offset;
    the high-index corner is clamped at the field's last row/column.

    Args:
        field         : (nx, ny) array of stored values
        x, y          : Query positions (scalars or same-shape arrays)
        dx, dy        : Staggering offset of `field`
        width, height : Simulation size in cells (clamp region)
        h             : Cell size

    Returns:
        Interpolated values, same shape as x/y
    """
    nx, ny = field.shape

    x = np.clip(x, h, width * h)
    y = np.clip(y, h, height * h)

    x0 = np.minimum(np.floor((x - dx) / h).astype(np.int64), nx - 1)
    tx = ((x - dx) - x0 * h) / h
    x1 = np.minimum(x0 + 1, nx - 1)

    y0 = np.minimum(np.floor((y - dy) / h).astype(np.int64), ny - 1)
    ty = ((y - dy) - y0 * h) / h
    y1 = np.minimum(y0 + 1, ny - 1)

    sx = 1.0 - tx
    sy = 1.0 - ty

    return (sx * sy * field[x0, y0]
            + tx * sy * field[x1, y0]
            + tx * ty * field[x1, y1]
            + sx * ty * field[x0, y1])


def sample_u(sim, x, y):
    h = sim.config.cell_size
    return sample_field(sim.u.data, x, y, 0.0, 0.5 * h, sim.width, sim.height, h)


def sample_v(sim, x, y):
    h = sim.config.cell_size
    return sample_field(sim.v.data, x, y, 0.5 * h, 0.0, sim.width, sim.height, h)


def sample_smoke(sim, x, y):
    h = sim.config.cell_size
    return sample_field(sim.smoke.data, x, y, 0.5 * h, 0.5 * h, sim.width, sim.height, h)


def _avg_v_at_u_faces(v: np.ndarray) -> np.ndarray:
    """Average of the 4 v-faces around every u-face → shape (W+1, H)."""
    # Pad one column of zeros on each side; those entries only ever feed
    # border u-faces, which are never advected.
    vp = np.pad(v, ((1, 1), (0, 0)), mode="constant")
    return 0.25 * (vp[:-1, :-1] + vp[1:, :-1] + vp[:-1, 1:] + vp[1:, 1:])


def _avg_u_at_v_faces(u: np.ndarray) -> np.ndarray:
    """Average of the 4 u-faces around every v-face → shape (W, H+1)."""
    up = np.pad(u, ((0, 0), (1, 1)), mode="constant")
    return 0.25 * (up[:-1, :-1] + up[:-1, 1:] + up[1:, :-1] + up[1:, 1:])


def advect_velocity(sim, dt: float):
    """
    Self-advection of the staggered velocity field.

    Only faces that pass open_u / open_v are traced; that excludes the two
    inflow columns of u, the top/bottom rows of v and every face touching a
    solid cell. All other faces keep their value.

    Modifies: sim.u, sim.v (swapped for fresh grids)
    """
    W, H = sim.width, sim.height
    h = sim.config.cell_size
    u_old, v_old = sim.u.data, sim.v.data

    # ── u-faces, shape (W+1, H) ──────────────────────────────────────────
    iu, ju = np.meshgrid(np.arange(W + 1, dtype=np.float64),
                         np.arange(H, dtype=np.float64), indexing="ij")
    x_back = iu * h - dt * u_old
    y_back = ju * h + 0.5 * h - dt * _avg_v_at_u_faces(v_old)
    new_u = np.where(sim.open_u_mask(),
                     sample_field(u_old, x_back, y_back, 0.0, 0.5 * h, W, H, h),
                     u_old)

    # ── v-faces, shape (W, H+1) ──────────────────────────────────────────
    iv, jv = np.meshgrid(np.arange(W, dtype=np.float64),
                         np.arange(H + 1, dtype=np.float64), indexing="ij")
    x_back = iv * h + 0.5 * h - dt * _avg_u_at_v_faces(u_old)
    y_back = jv * h - dt * v_old
    new_v = np.where(sim.open_v_mask(),
                     sample_field(v_old, x_back, y_back, 0.5 * h, 0.0, W, H, h),
                     v_old)

    sim.u = Grid.from_array(new_u)
    sim.v = Grid.from_array(new_v)


def advect_smoke(sim, dt: float):
    """
    Advect the smoke density through the (already advected) velocity field.

    Only interior cells (1 ≤ x < W, 1 ≤ y < H-1) that are FULLY open
    (s == 1.0) are updated. Partially open cells are skipped, not blended,
    and column 0 keeps its inlet band.

    Modifies: sim.smoke (swapped for a fresh grid)
    """
    W, H = sim.width, sim.height
    h = sim.config.cell_size
    u, v = sim.u.data, sim.v.data
    smoke_old = sim.smoke.data

    # Cell-centred velocity from the bounding faces
    uc = 0.5 * (u[:-1, :] + u[1:, :])
    vc = 0.5 * (v[:, :-1] + v[:, 1:])

    i, j = np.meshgrid(np.arange(W, dtype=np.float64),
                       np.arange(H, dtype=np.float64), indexing="ij")
    x_back = i * h + 0.5 * h - dt * uc
    y_back = j * h + 0.5 * h - dt * vc

    update = sim.s.data == 1.0
    update[0, :] = False
    update[:, 0] = False
    update[:, H - 1] = False

    new_smoke = np.where(update,
                         sample_field(smoke_old, x_back, y_back, 0.5 * h, 0.5 * h, W, H, h),
                         smoke_old)
    sim.smoke = Grid.from_array(new_smoke)
