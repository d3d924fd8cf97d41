"""
Command-line entry point.

Usage:
    bh-nbody inputs/planets.txt --threads 4 --duration 10
    bh-nbody - --steps 200 --svg-dir frames < inputs/galaxy.txt
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from .config import SimulationConfig
from .export.svg import write_svg_frames
from .simulation import Simulation, SimulationError
from .universe import load_universe, read_universe
from .validation import ValidationError


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    defaults = SimulationConfig()
    parser = argparse.ArgumentParser(
        prog="bh-nbody",
        description="Barnes-Hut N-body simulation of a 2D universe.",
    )
    parser.add_argument("input", help="universe description file, or '-' for stdin")
    parser.add_argument("-t", "--threads", type=int, default=defaults.threads)
    parser.add_argument(
        "-d",
        "--duration",
        type=float,
        default=defaults.duration,
        help="wall-clock seconds to run (default: %(default)s)",
    )
    parser.add_argument("-n", "--steps", type=int, default=None, help="stop after this many steps")
    parser.add_argument("--dt", type=float, default=defaults.dt, help="time quantum per step")
    parser.add_argument("--theta", type=float, default=defaults.theta, help="opening angle")
    parser.add_argument("--svg-dir", default=None, help="write one SVG frame per step here")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run a simulation from the command line. Returns the exit code."""
    args = parse_args(argv)

    try:
        if args.input == "-":
            universe = read_universe(sys.stdin)
        else:
            universe = load_universe(args.input)

        config = SimulationConfig(
            threads=args.threads,
            dt=args.dt,
            theta=args.theta,
            duration=args.duration,
            max_steps=args.steps,
        )
        simulation = Simulation(universe.bodies, universe.radius, config=config)
        if args.svg_dir:
            write_svg_frames(simulation, args.svg_dir)
        simulation.run()
    except (OSError, ValidationError, SimulationError) as e:
        print(f"bh-nbody: error: {e}", file=sys.stderr)
        return 1

    print(f"time passed: {simulation.time}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
