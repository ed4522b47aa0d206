# philosophers

A simulation of the dining philosophers problem. Philosophers sit around a
table with one fork between each pair of neighbours. Each must hold two forks
to eat, then sleeps, then thinks. The simulation stops as soon as a
philosopher starves, or, when a meal count is given, once every philosopher
has eaten at least that many times.

Two variants are included:

- `philo` (`philosophers.table`) — every philosopher is a thread; each fork
  is its own lock, and a monitor thread checks every millisecond for
  starvation and for finished meals. Even-numbered seats pick up their
  neighbour's fork first, which prevents deadlock.
- `philo-bonus` (`philosophers.bonus`) — the forks are a single counting
  semaphore shared by all philosophers. Each philosopher has its own death
  watcher and, with a meal count, its own meal watcher; two supervisor
  threads end the whole run.

## Installation

```
pip install .
```

## Usage

```
philo N T_DIE T_EAT T_SLEEP [EAT_COUNT]
philo-bonus N T_DIE T_EAT T_SLEEP [EAT_COUNT]
```

- `N` — number of philosophers (and forks)
- `T_DIE` — milliseconds a philosopher survives without starting a meal
- `T_EAT` — milliseconds a meal takes
- `T_SLEEP` — milliseconds of sleep after a meal
- `EAT_COUNT` — optional; the run ends when every philosopher has eaten this often

Examples:

```
philo 5 800 200 200
philo 5 800 200 200 7
philo-bonus 4 410 200 200
```

Each event is printed as one coloured line: milliseconds since the start, the
philosopher's number (counting from 1) and what happened — `has taken a fork`,
`is eating`, `is sleeping`, `is thinking` or `died`. Once the simulation has
stopped, only a death is still reported.

All arguments must be numeric (an optional sign followed by digits) and
positive. `philo-bonus` also rejects numbers outside the 32-bit signed int
range. With the wrong number of arguments a usage message is printed;
`philo` then exits with status 1, `philo-bonus` with status 0. Other argument
errors exit with status 1.

## Using it from Python

```python
import sys

from philosophers.parsing import parse_settings
from philosophers.table import Table

settings = parse_settings(["5", "800", "200", "200", "3"])
Table(settings, sys.stdout).run()
```

`parse_settings` and `parse_bonus_settings` take the arguments without the
program name and return a `Settings` (`count`, `time_to_die`, `time_to_eat`,
`time_to_sleep`, `must_eat`). They raise `ArgumentError` for malformed input;
its `show_usage` attribute is set when the argument count is wrong, and
`usage(program)` returns the usage text.

`philosophers.bonus.run_philosophers(settings, out)` runs the semaphore
variant and returns the `BonusPhilosopher` objects, whose `meals_eaten` can be
inspected afterwards. `philosophers.bonus.calculate_think_time` gives the
think time that variant uses.

## What it does not do

Both variants run inside a single Python process. In `philo-bonus` the
philosophers are threads that share in-process semaphores, not separate
operating-system processes with named system semaphores; ending the run sets
a shared flag that every waiting philosopher notices, rather than killing
processes.

## Development

```
pip install -e ".[test]"
pytest
```