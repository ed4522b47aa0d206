"""Command that runs the semaphore-driven simulation."""

from __future__ import annotations

import sys

from .bonus import run_philosophers
from .parsing import ArgumentError, parse_bonus_settings, usage
from .status import RED, RESET

_PROGRAM = "./philo_bonus"


def main(argv: list[str] | None = None) -> int:
    """Run the simulation with ``argv`` (program name excluded); return the exit code."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        settings = parse_bonus_settings(argv)
    except ArgumentError as error:
        if error.show_usage:
            print(f"{RED}Error:{RESET} {error.message}")
            print()
            print(usage(_PROGRAM))
            return 0
        print(f"Error: {error.message}")
        return 1
    run_philosophers(settings, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())