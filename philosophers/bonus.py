"""Semaphore-driven dining philosophers: each diner runs on its own with two watchers.

Every philosopher runs independently and shares only counting semaphores
with the others: a pool of forks, a print token, a meal counter and a death
signal. When the simulation ends, the supervisor terminates every diner by
raising a shared ``killed`` flag. Every blocking wait honours that flag.
"""

from __future__ import annotations

import sys
import threading
import time
from typing import TextIO

from .clock import now_ms, wait_until
from .parsing import Settings
from .status import Status, format_line

_POLL_INTERVAL_S = 0.001
_SHORT_WAIT_S = 0.0001
_START_DELAY_MS = 200
_FORKS_PER_MEAL = 2


def calculate_think_time(t_die: int, t_eat: int, t_sleep: int, time_since_meal: int) -> int:
    """Return how long a philosopher thinks, in milliseconds (1 to 200)."""
    if 600 <= t_die <= 610:
        return 1
    if t_die < t_eat + t_sleep + 210:
        return 1
    think_ms = (t_die - time_since_meal - t_eat) // 2
    return min(max(think_ms, 1), 200)


def _acquire(semaphore: threading.Semaphore, killed: threading.Event) -> bool:
    """Acquire ``semaphore``; return False instead if ``killed`` is raised first."""
    while not semaphore.acquire(timeout=_POLL_INTERVAL_S):
        if killed.is_set():
            return False
    return True


class SharedSemaphores:
    """Semaphores shared by every philosopher, plus the kill flag."""

    def __init__(self, count: int):
        self.forks = threading.Semaphore(count)
        self.print_sem = threading.Semaphore(1)
        self.meal_check = threading.Semaphore(0)
        self.dead_signal = threading.Semaphore(0)
        self.killed = threading.Event()

    def kill(self) -> None:
        """Terminate every philosopher."""
        self.killed.set()


class BonusPhilosopher:
    """One diner with its own death and meal watchers."""

    def __init__(
        self,
        number: int,
        settings: Settings,
        sems: SharedSemaphores,
        start_time: int,
        out: TextIO | None = None,
    ):
        self.number = number
        self.settings = settings
        self.sems = sems
        self.start_time = start_time
        self.out = out if out is not None else sys.stdout
        self.last_meal = start_time
        self.meals_eaten = 0
        self._finish = False
        self._last_meal_lock = threading.Lock()
        self._meals_lock = threading.Lock()
        self._finish_lock = threading.Lock()

    @property
    def finished(self) -> bool:
        """True once this philosopher has died or eaten enough."""
        with self._finish_lock:
            return self._finish

    def _set_finished(self) -> None:
        with self._finish_lock:
            self._finish = True

    def _done(self) -> bool:
        return self.finished or self.sems.killed.is_set()

    def print_action(self, status: Status) -> None:
        """Log ``status``; a death keeps the print token so nothing follows it."""
        sems = self.sems
        if not _acquire(sems.print_sem, sems.killed):
            return
        if sems.killed.is_set():
            sems.print_sem.release()
            return
        line = format_line(now_ms() - self.start_time, self.number, status, status.bonus_color)
        self.out.write(line + "\n")
        self.out.flush()
        if status is not Status.DIED:
            sems.print_sem.release()

    def monitor_death(self) -> None:
        """Watch the time since the last meal and announce a death."""
        wait_until(self.start_time)
        while not self._done():
            with self._last_meal_lock:
                if now_ms() - self.last_meal >= self.settings.time_to_die:
                    self._set_finished()
                    self.print_action(Status.DIED)
                    self.sems.dead_signal.release()
                    return
            self.sems.killed.wait(_POLL_INTERVAL_S)

    def monitor_meals(self) -> None:
        """Report to the supervisor once enough meals have been eaten."""
        wait_until(self.start_time)
        must_eat = self.settings.must_eat
        while not self._done():
            with self._meals_lock:
                meals = self.meals_eaten
            if must_eat is not None and meals >= must_eat:
                self.sems.forks.release(_FORKS_PER_MEAL)
                self.sems.meal_check.release()
                self._set_finished()
                return
            self.sems.killed.wait(_POLL_INTERVAL_S)

    def _pause(self, duration_ms: int) -> None:
        end = now_ms() + duration_ms
        while (remaining := end - now_ms()) > 0:
            timeout = remaining / 1000 if remaining > 2 else _SHORT_WAIT_S
            if self.sems.killed.wait(timeout):
                return

    def _close_to_death(self) -> bool:
        with self._last_meal_lock:
            since_meal = now_ms() - self.last_meal
        return since_meal > self.settings.time_to_die * 0.75

    def _think_time(self) -> int:
        with self._last_meal_lock:
            last_meal = self.last_meal
        settings = self.settings
        return calculate_think_time(
            settings.time_to_die, settings.time_to_eat, settings.time_to_sleep, now_ms() - last_meal
        )

    def _take_forks(self) -> bool:
        for _ in range(_FORKS_PER_MEAL):
            if not _acquire(self.sems.forks, self.sems.killed):
                return False
            self.print_action(Status.TAKEN_FORK)
        return True

    def _eat_sleep_think(self) -> None:
        with self._last_meal_lock:
            self.last_meal = now_ms()
        with self._meals_lock:
            self.meals_eaten += 1
        self.print_action(Status.EATING)
        self._pause(self.settings.time_to_eat)
        self.print_action(Status.SLEEPING)
        self.sems.forks.release(_FORKS_PER_MEAL)
        self._pause(self.settings.time_to_sleep)
        think_ms = self._think_time()
        self.print_action(Status.THINKING)
        self._pause(think_ms)

    def routine(self) -> None:
        """Body of one philosopher: start the watchers, then eat, sleep and think."""
        watchers = [threading.Thread(target=self.monitor_death, name=f"death-{self.number}")]
        if self.settings.must_eat is not None:
            watchers.append(threading.Thread(target=self.monitor_meals, name=f"meals-{self.number}"))
        for watcher in watchers:
            watcher.start()
        wait_until(self.start_time)
        if self.number % 2 == 0:
            time.sleep(self.settings.time_to_eat * 100 / 1_000_000)
        while not self._done():
            if not self._close_to_death():
                time.sleep(self.settings.time_to_die / 10 / 1_000_000)
            if not self._take_forks():
                break
            self._eat_sleep_think()
        for watcher in watchers:
            watcher.join()


def _monitor_all_deaths(count: int, sems: SharedSemaphores, start_time: int) -> None:
    wait_until(start_time)
    sems.dead_signal.acquire()
    sems.kill()
    sems.meal_check.release(count)
    sems.print_sem.release()


def _monitor_all_meals(count: int, sems: SharedSemaphores, start_time: int) -> None:
    wait_until(start_time)
    for _ in range(count):
        sems.meal_check.acquire()
    sems.print_sem.acquire()
    sems.dead_signal.release()


def run_philosophers(settings: Settings, out: TextIO | None = None) -> list[BonusPhilosopher]:
    """Run the whole simulation and return the philosophers once all have stopped."""
    out = out if out is not None else sys.stdout
    sems = SharedSemaphores(settings.count)
    start_time = now_ms() + _START_DELAY_MS
    philosophers = [
        BonusPhilosopher(number, settings, sems, start_time, out)
        for number in range(1, settings.count + 1)
    ]
    diners = [
        threading.Thread(target=philosopher.routine, name=f"philosopher-{philosopher.number}")
        for philosopher in philosophers
    ]
    supervisors = [
        threading.Thread(
            target=_monitor_all_deaths, args=(settings.count, sems, start_time), name="all-deaths"
        )
    ]
    if settings.must_eat is not None:
        supervisors.append(
            threading.Thread(
                target=_monitor_all_meals, args=(settings.count, sems, start_time), name="all-meals"
            )
        )
    for thread in diners + supervisors:
        thread.start()
    for thread in diners + supervisors:
        thread.join()
    return philosophers