"""
main.py — Command-Line Entry Point
===================================
Runs the smoke tunnel without a window. The interactive viewer is a
separate front end; this script is for quick checks and timing.

Usage:
    python main.py                           # Headless run, stats every 10 frames
    python main.py --mode benchmark          # Per-stage timing breakdown
    python main.py --mode probe --x 20 --y 9 # Dump one cell after N frames
"""

import argparse

import numpy as np


def build_simulation(args):
    from fluid import FluidSimulation, SimulationConfig

    config = SimulationConfig(
        num_iterations=args.iterations,
        with_gravity=args.gravity,
        draw_obstacle=not args.no_obstacle,
        dt=args.dt,
    )
    return FluidSimulation(args.width, args.height, config)


def run_headless(args):
    """Run simulation without display — prints stats every 10 frames."""
    sim = build_simulation(args)

    print(f"\nHeadless simulation | {sim.width}x{sim.height} | {args.frames} frames")
    print(f"{'─'*60}")

    total_times = []
    for f in range(args.frames):
        metrics = sim.step()
        total_times.append(metrics["total_ms"])

        if f % 10 == 0:
            print(f"  Frame {f:03d} | {metrics['total_ms']:6.1f}ms "
                  f"({metrics['fps']:.1f} FPS) | "
                  f"div_max={metrics['divergence_max']:.5f} | "
                  f"smoke={metrics['smoke_total']:.1f}")

    print(f"\n{'─'*60}")
    print(f"  Average: {np.mean(total_times):.1f}ms/frame ({1000/np.mean(total_times):.1f} FPS)")
    print(f"  Min:     {np.min(total_times):.1f}ms")
    print(f"  Max:     {np.max(total_times):.1f}ms")
    sim.print_status()


def run_benchmark(args):
    """
    Detailed performance breakdown.
    Shows how long each physics stage takes.
    """
    sim = build_simulation(args)

    print(f"\n{'='*60}")
    print(f"  BENCHMARK | {sim.width}x{sim.height} | {args.frames} frames")
    print(f"{'='*60}")

    # Warm up
    for _ in range(3):
        sim.step()

    logs = [sim.step() for _ in range(args.frames)]

    keys = ["gravity_ms", "project_ms", "advect_vel_ms", "advect_smoke_ms", "total_ms"]

    print(f"\n{'Stage':<20} {'Mean':>8} {'Min':>8} {'Max':>8}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in logs]
        print(f"  {k:<18} {np.mean(vals):>7.1f}ms {np.min(vals):>7.1f}ms {np.max(vals):>7.1f}ms")

    total_vals = [m["total_ms"] for m in logs]
    print(f"\n{'─'*50}")
    print(f"  FPS (physics only): {1000/np.mean(total_vals):.1f}")


def run_probe(args):
    """Step the simulation, then dump the state of one cell."""
    sim = build_simulation(args)
    for _ in range(args.frames):
        sim.step()
    print(f"\n[Probe] after {sim.frame} frames")
    sim.print_info(args.x, args.y)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="2D Eulerian Smoke Simulation")
    parser.add_argument(
        "--mode", choices=["headless", "benchmark", "probe"],
        default="headless",
        help="Run mode (default: headless)"
    )
    parser.add_argument("--width",      type=int,   default=80,   help="Grid width in cells (default: 80)")
    parser.add_argument("--height",     type=int,   default=45,   help="Grid height in cells (default: 45)")
    parser.add_argument("--frames",     type=int,   default=50,   help="Number of frames")
    parser.add_argument("--dt",         type=float, default=1/12, help="Timestep (default: 1/12)")
    parser.add_argument("--iterations", type=int,   default=40,   help="Projection sweeps per step")
    parser.add_argument("--gravity",    action="store_true",      help="Enable gravity")
    parser.add_argument("--no-obstacle", action="store_true",     help="Skip the initial obstacle")
    parser.add_argument("--x",          type=int,   default=0,    help="Probe column")
    parser.add_argument("--y",          type=int,   default=0,    help="Probe row")

    args = parser.parse_args()

    if args.mode == "headless":
        run_headless(args)
    elif args.mode == "benchmark":
        run_benchmark(args)
    elif args.mode == "probe":
        run_probe(args)
