"""Philosopher states and the log line format shared by both simulations."""

from enum import Enum

RED = "\033[1;31m"
GREEN = "\033[1;32m"
YELLOW = "\033[1;33m"
RESET = "\033[0m"
GRAY = "\033[1;30m"
DARK_GREEN = "\033[0;32m"
DARK_BLUE = "\033[0;34m"
CYAN = "\033[0;36m"
BLUE = "\033[0;34m"


class Status(Enum):
    """Something a philosopher can report doing."""

    TAKEN_FORK = "has taken a fork"
    EATING = "is eating"
    SLEEPING = "is sleeping"
    THINKING = "is thinking"
    DIED = "died"

    @property
    def color(self) -> str:
        """Colour used by the thread-based simulation."""
        return _COLORS[self]

    @property
    def bonus_color(self) -> str:
        """Colour used by the process-based simulation."""
        return _BONUS_COLORS[self]


_COLORS = {
    Status.TAKEN_FORK: DARK_GREEN,
    Status.EATING: GREEN,
    Status.SLEEPING: GRAY,
    Status.THINKING: YELLOW,
    Status.DIED: RED,
}

_BONUS_COLORS = {
    Status.TAKEN_FORK: CYAN,
    Status.EATING: GREEN,
    Status.SLEEPING: GRAY,
    Status.THINKING: DARK_BLUE,
    Status.DIED: RED,
}


def format_line(timestamp: int, philosopher_id: int, status: Status, color: str | None) -> str:
    """Return one log line, ``"<ms> <id> <status>"``, optionally coloured."""
    text = f"{color}{status.value}{RESET}" if color else status.value
    return f"{timestamp} {philosopher_id} {text}"