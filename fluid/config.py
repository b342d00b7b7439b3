"""
config.py — Simulation Tunables
================================
All the knobs that used to be hard-wired module constants, gathered into one
value passed at construction time. Two simulations with different configs
can live side by side (handy for tests and A/B benchmarks).
"""

from dataclasses import dataclass


# ── Defaults ──────────────────────────────────────────────────────────────────
OVERRELAXATION = 1.9     # SOR factor for the Gauss-Seidel projection
NUM_ITERATIONS = 40      # projection sweeps per step (no convergence check)
GRAVITY        = 7.2     # +y is DOWN (screen coordinates)
DENSITY        = 10.0    # only scales the reported pressure
WINDSPEED      = 30.0    # inflow on both u boundary columns
CELL_SIZE      = 1.0     # H
DEFAULT_DT     = 1.0 / 12.0


@dataclass(frozen=True)
class SimulationConfig:
    overrelaxation: float = OVERRELAXATION
    num_iterations: int = NUM_ITERATIONS
    with_gravity: bool = False
    gravity: float = GRAVITY
    density: float = DENSITY
    windspeed: float = WINDSPEED
    cell_size: float = CELL_SIZE

    # Initial scene
    draw_obstacle: bool = True
    smoke_band_half_height: int = 5   # inlet band is 2*half+1 rows tall

    # Front-end defaults
    dt: float = DEFAULT_DT
    brush_radius: float = 2.5

    def __post_init__(self):
        if not 0.0 < self.overrelaxation < 2.0:
            raise ValueError(f"overrelaxation must lie in (0, 2), got {self.overrelaxation}")
        if self.num_iterations < 0:
            raise ValueError(f"num_iterations must be >= 0, got {self.num_iterations}")
        if self.density <= 0.0:
            raise ValueError(f"density must be positive, got {self.density}")
        if self.cell_size <= 0.0:
            raise ValueError(f"cell_size must be positive, got {self.cell_size}")
        if self.dt <= 0.0:
            raise ValueError(f"dt must be positive, got {self.dt}")
        if self.smoke_band_half_height < 0:
            raise ValueError(
                f"smoke_band_half_height must be >= 0, got {self.smoke_band_half_height}"
            )
