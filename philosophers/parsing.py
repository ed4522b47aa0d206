"""Command-line argument checking and conversion for both simulations."""

from dataclasses import dataclass

from .status import GREEN, RESET

INT_MAX = 2**31 - 1
INT_MIN = -(2**31)

_WHITESPACE = " \t\n\v\f\r"


class ArgumentError(ValueError):
    """Invalid command-line arguments; ``show_usage`` asks for the usage text."""

    def __init__(self, message: str, show_usage: bool = False):
        super().__init__(message)
        self.message = message
        self.show_usage = show_usage


@dataclass(frozen=True)
class Settings:
    """Simulation parameters; times are in milliseconds."""

    count: int
    time_to_die: int
    time_to_eat: int
    time_to_sleep: int
    must_eat: int | None = None


def _wrap_int32(value: int) -> int:
    return (value - INT_MIN) % 2**32 + INT_MIN


def atoi(text: str) -> int:
    """Read a leading signed decimal integer, wrapping like a 32-bit int."""
    stripped = text.lstrip(_WHITESPACE)
    sign = 1
    if stripped[:1] in ("-", "+"):
        if stripped[0] == "-":
            sign = -1
        stripped = stripped[1:]
    result = 0
    for char in stripped:
        if not "0" <= char <= "9":
            break
        result = _wrap_int32(result * 10 + ord(char) - ord("0"))
    return _wrap_int32(result * sign)


def is_numeric(text: str) -> bool:
    """True for an optional sign followed by one or more ASCII digits."""
    digits = text[1:] if text[:1] in ("+", "-") else text
    return bool(digits) and all("0" <= char <= "9" for char in digits)


def is_int_range(text: str) -> bool:
    """True unless the leading number falls outside the 32-bit int range."""
    sign = 1
    rest = text
    if rest[:1] == "-":
        sign = -1
        rest = rest[1:]
    elif rest[:1] == "+":
        rest = rest[1:]
    number = 0
    for char in rest:
        if not "0" <= char <= "9":
            break
        number = number * 10 + ord(char) - ord("0")
        if (sign == 1 and number > INT_MAX) or (sign == -1 and -number < INT_MIN):
            return False
    return True


def usage(program: str) -> str:
    """Return the usage text for ``program``."""
    if program.endswith("bonus"):
        count_help = "number of philosophers (and forks)"
    else:
        count_help = "number of threads"
    lines = [
        f"Usage: {GREEN}{program}{RESET} N T_DIE T_EAT T_SLEEP [EAT_COUNT]",
        "",
        "Arguments:",
        f"  N         - {count_help}",
        "  T_DIE     - time to die (ms)",
        "  T_EAT     - time to eat (ms)",
        "  T_SLEEP   - time to sleep (ms)",
        "  EAT_COUNT - (optional) times each philosopher must eat",
        "",
        "Example:",
        f"  {GREEN}{program} 5 800 200 200{RESET}",
        f"  {GREEN}{program} 5 800 200 200 7{RESET}",
        "",
    ]
    return "\n".join(lines)


def _check_count(argv: list[str]) -> None:
    if len(argv) not in (4, 5):
        raise ArgumentError("Invalid number of arguments.", show_usage=True)


def parse_settings(argv: list[str]) -> Settings:
    """Validate the thread simulation's arguments (program name excluded)."""
    _check_count(argv)
    if not all(is_numeric(arg) for arg in argv):
        raise ArgumentError("Arguments must be numeric")
    names = ["Philosopher count", "Time to die", "Time to eat", "Time to sleep", "Eat count"]
    values = [atoi(arg) for arg in argv]
    for name, value in zip(names, values):
        if value <= 0:
            raise ArgumentError(
                f"{name} is out of range. Must be a positive integer within the range of int."
            )
    return Settings(*values[:4], must_eat=values[4] if len(values) == 5 else None)


def parse_bonus_settings(argv: list[str]) -> Settings:
    """Validate the process simulation's arguments (program name excluded)."""
    _check_count(argv)
    for arg in argv:
        if not is_numeric(arg):
            raise ArgumentError("Arguments must be numeric")
        if not is_int_range(arg):
            raise ArgumentError("Arguments must be within integer range")
    values = [atoi(arg) for arg in argv]
    must_eat = None
    if len(values) == 5:
        if values[4] <= 0:
            raise ArgumentError("Number of times each philosopher must eat must be positive")
        must_eat = values[4]
    if any(value <= 0 for value in values[:4]):
        raise ArgumentError("All arguments must be positive")
    return Settings(*values[:4], must_eat=must_eat)


def semaphore_name(prefix: str, number: int) -> str:
    """Return a per-philosopher semaphore name such as ``/sem_local_finish_3``."""
    return f"{prefix}{number}"