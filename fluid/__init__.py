"""
fluid/ — 2D Smoke Tunnel Physics Package
=========================================
Exports the interfaces a front end needs.

Renderer imports : FluidSimulation → step(), get_smoke(), get_speed(), ...
Tuning / tests   : SimulationConfig
Low-level        : Grid, project, sample_field, draw_filled_circle
"""

from .advect import advect_smoke, advect_velocity, sample_field
from .config import SimulationConfig
from .grid import Grid, GridIndexError
from .obstacles import draw_filled_circle
from .simulation import FluidSimulation, MaskQueryError
from .solver import project

__all__ = [
    "FluidSimulation",
    "SimulationConfig",
    "Grid",
    "GridIndexError",
    "MaskQueryError",
    "project",
    "advect_velocity",
    "advect_smoke",
    "sample_field",
    "draw_filled_circle",
]
