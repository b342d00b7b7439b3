"""
forces.py — External Forces
============================
Body forces applied to the velocity field before projection.

The only one this model needs is gravity. The grid uses screen
coordinates (row 0 at the top), so "down" is +y and gravity is ADDED to v.
Faces touching a solid cell or the domain border are left alone.
"""


def apply_gravity(sim, dt: float):
    """
    v += gravity * dt on every v-face that passes open_v.

    Modifies: sim.v (in-place)
    """
    sim.v.data[sim.open_v_mask()] += sim.config.gravity * dt
