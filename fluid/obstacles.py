"""
obstacles.py — Painting Into the Openness Mask
===============================================
The mask `s` is 1.0 for fluid cells and 0.0 for solid ones. Obstacles are
plain pixel-rasterized disks (no anti-aliasing), used both for the
pre-carved obstacle and for interactive painting from the front end.
"""

import math

from .grid import Grid


def draw_filled_circle(mask: Grid, center_x: int, center_y: int,
                       radius: float, value: float):
    """
    Set every in-bounds cell whose squared distance to (center_x, center_y)
    is <= ceil(radius)² to `value`.

    Cells of the bounding box that fall outside the grid are skipped, so a
    brush dragged past the window edge simply paints less.
    """
    r = math.ceil(radius)
    r_squared = r * r
    center_x, center_y = int(center_x), int(center_y)

    for y in range(center_y - r, center_y + r + 1):
        for x in range(center_x - r, center_x + r + 1):
            if 0 <= x < mask.width and 0 <= y < mask.height:
                dx = x - center_x
                dy = y - center_y
                if dx * dx + dy * dy <= r_squared:
                    mask[x, y] = value


def seed_inlet(smoke: Grid, half_height: int, value: float = 1.0):
    """
    Fill the smoke inlet: column 0, rows centre±half_height (clipped to the
    grid). The advector never writes column 0, so this band keeps emitting.
    """
    center = smoke.height // 2
    y0 = max(0, center - half_height)
    y1 = min(smoke.height - 1, center + half_height)
    for y in range(y0, y1 + 1):
        smoke[0, y] = value
