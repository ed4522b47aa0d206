"""Command that runs the thread-based simulation."""

from __future__ import annotations

import sys

from .parsing import ArgumentError, parse_settings, usage
from .status import RED, RESET
from .table import Table

_PROGRAM = "./philo"
_NOT_NUMERIC = "Arguments must be numeric"


def main(argv: list[str] | None = None) -> int:
    """Run the simulation with ``argv`` (program name excluded); return the exit code."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        settings = parse_settings(argv)
    except ArgumentError as error:
        if error.message == _NOT_NUMERIC:
            print(f"{RED}{error.message}{RESET}")
        else:
            print(f"{RED}Error:{RESET} {error.message}")
        if error.show_usage:
            print()
            print(usage(_PROGRAM))
        return 1
    Table(settings, sys.stdout).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())