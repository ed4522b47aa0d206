"""Thread-based dining philosophers: one thread per philosopher plus a monitor."""

from __future__ import annotations

import sys
import threading
import time
from typing import TextIO

from .clock import now_ms, wait_until
from .parsing import Settings
from .status import Status, format_line

_CHECK_INTERVAL_S = 0.00005
_MONITOR_INTERVAL_S = 0.001
_APPETITE_PAUSE_S = 0.0005
_START_DELAY_PER_PHILOSOPHER_MS = 20


def fork_order(index: int, count: int) -> tuple[int, int]:
    """Return the forks a philosopher picks up, first one first.

    Odd seats take their own fork first; even seats take their neighbour's,
    which breaks the circular wait.
    """
    left, right = index, (index + 1) % count
    if index % 2 == 0:
        return right, left
    return left, right


class Philosopher:
    """One diner: its forks, its meal record and its thread body."""

    def __init__(self, index: int, table: Table):
        self.index = index
        self.table = table
        self.forks = fork_order(index, table.settings.count)
        self.times_ate = 0
        self.last_meal = 0
        self.meal_lock = threading.Lock()

    @property
    def number(self) -> int:
        """The one-based number shown in the log."""
        return self.index + 1

    def close_to_death(self) -> bool:
        """True once three quarters of the time to die have passed since eating."""
        with self.meal_lock:
            since_meal = now_ms() - self.last_meal
        return since_meal > self.table.settings.time_to_die * 0.75

    def think(self, silent: bool) -> None:
        """Think for half of the slack left before starving, within limits."""
        settings = self.table.settings
        with self.meal_lock:
            think_ms = (
                settings.time_to_die - (now_ms() - self.last_meal) - settings.time_to_eat
            ) // 2
        think_ms = max(think_ms, 0)
        if think_ms == 0 and silent:
            think_ms = 1
        if think_ms > 600:
            think_ms = 200
        if not silent and not self.table.stopped():
            self.table.print_status(self, Status.THINKING)
        self.table.check_sleep(think_ms)

    def eat_and_sleep(self) -> bool:
        """Take both forks, eat, put them down and sleep.

        Returns False if the simulation stopped before the meal began.
        """
        table = self.table
        if table.stopped():
            return False
        first, second = (table.fork_locks[fork] for fork in self.forks)
        with first:
            table.print_status(self, Status.TAKEN_FORK)
            if table.stopped():
                return False
            with second:
                table.print_status(self, Status.TAKEN_FORK)
                if table.stopped():
                    return False
                with self.meal_lock:
                    self.last_meal = now_ms()
                    self.times_ate += 1
                table.print_status(self, Status.EATING)
                table.check_sleep(table.settings.time_to_eat)
        table.print_status(self, Status.SLEEPING)
        table.check_sleep(table.settings.time_to_sleep)
        return True

    def _alone(self) -> None:
        table = self.table
        with table.fork_locks[self.forks[0]]:
            table.print_status(self, Status.TAKEN_FORK)
            table.check_sleep(table.settings.time_to_die)
            table.print_status(self, Status.DIED)

    def routine(self) -> None:
        """Thread body: eat, sleep and think until the simulation stops."""
        table = self.table
        if table.settings.must_eat == 0:
            return
        with self.meal_lock:
            self.last_meal = table.start_time
        wait_until(table.start_time)
        if table.settings.count == 1:
            self._alone()
            return
        if self.index % 2:
            self.think(silent=True)
        while not table.stopped():
            if not self.close_to_death():
                time.sleep(_APPETITE_PAUSE_S)
            self.eat_and_sleep()
            if table.stopped():
                break
            self.think(silent=False)


class Table:
    """Shared state of one simulation: forks, stop flag and output."""

    def __init__(self, settings: Settings, out: TextIO | None = None):
        self.settings = settings
        self.out = out if out is not None else sys.stdout
        self.start_time = now_ms()
        self._stopped = False
        self._stop_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self.fork_locks = [threading.Lock() for _ in range(settings.count)]
        self.philosophers = [Philosopher(index, self) for index in range(settings.count)]

    def stopped(self) -> bool:
        """True once someone died or everyone has eaten enough."""
        with self._stop_lock:
            return self._stopped

    def stop(self) -> None:
        """Raise the stop flag."""
        with self._stop_lock:
            self._stopped = True

    def print_status(self, philosopher: Philosopher, status: Status) -> None:
        """Log ``status``; after the stop only a death is still reported."""
        with self._write_lock:
            if status is Status.DIED or not self.stopped():
                line = format_line(
                    now_ms() - self.start_time, philosopher.number, status, status.color
                )
                self.out.write(line + "\n")
                self.out.flush()

    def check_sleep(self, duration_ms: int) -> None:
        """Sleep for ``duration_ms`` milliseconds, waking early on stop."""
        wake_up = now_ms() + duration_ms
        while not self.stopped() and now_ms() < wake_up:
            time.sleep(_CHECK_INTERVAL_S)

    def end_condition_reached(self) -> bool:
        """Stop the simulation if someone starved or all have eaten enough."""
        must_eat = self.settings.must_eat
        all_ate_enough = True
        for philosopher in self.philosophers:
            with philosopher.meal_lock:
                if now_ms() - philosopher.last_meal >= self.settings.time_to_die:
                    self.stop()
                    self.print_status(philosopher, Status.DIED)
                    return True
                if must_eat is not None and philosopher.times_ate < must_eat:
                    all_ate_enough = False
        if must_eat is not None and all_ate_enough:
            self.stop()
            return True
        return False

    def monitor(self) -> None:
        """Monitor thread body: poll the end condition every millisecond."""
        wait_until(self.start_time)
        while not self.end_condition_reached():
            time.sleep(_MONITOR_INTERVAL_S)

    def run(self) -> None:
        """Start every thread, then wait for all of them to finish."""
        self.start_time = now_ms() + self.settings.count * _START_DELAY_PER_PHILOSOPHER_MS
        threads = [
            threading.Thread(target=philosopher.routine, name=f"philosopher-{philosopher.number}")
            for philosopher in self.philosophers
        ]
        if self.settings.count > 1:
            threads.append(threading.Thread(target=self.monitor, name="monitor"))
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()