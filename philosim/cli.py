"""Command-line entry point for the simulation."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from .args import USAGE, ArgumentError, parse_args
from .simulation import Simulation


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments, run the simulation and return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        settings = parse_args(args)
    except ArgumentError:
        print(USAGE)
        return 1
    try:
        simulation = Simulation(settings)
    except (ValueError, MemoryError):
        print("Error: Memory allocation failed.")
        return 1
    try:
        simulation.run()
    except RuntimeError:
        return 1
    finally:
        sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())