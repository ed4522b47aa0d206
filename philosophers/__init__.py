"""Dining philosophers simulation with a lock-per-fork and a counting-semaphore variant."""

__version__ = "1.0.0"
__all__ = ["__version__"]