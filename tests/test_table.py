import io
import re

import pytest

from philosophers.clock import now_ms
from philosophers.parsing import Settings
from philosophers.status import Status
from philosophers.table import Table, fork_order

_ANSI = re.compile(r"\033\[[0-9;]*m")


def _lines(out):
    return [_ANSI.sub("", line) for line in out.getvalue().splitlines()]


def _parse(line):
    stamp, number, text = line.split(" ", 2)
    return int(stamp), int(number), text


@pytest.mark.parametrize("count", [2, 3, 4, 5, 7])
def test_fork_order_every_fork_shared_by_two(count):
    uses = [0] * count
    for index in range(count):
        first, second = fork_order(index, count)
        assert first != second
        uses[first] += 1
        uses[second] += 1
    assert uses == [2] * count


@pytest.mark.parametrize("index", range(6))
def test_fork_order_parity(index):
    first, second = fork_order(index, 6)
    if index % 2 == 0:
        assert second == index
    else:
        assert first == index


def test_fork_order_single_philosopher():
    assert fork_order(0, 1) == (0, 0)


def test_stop_flag():
    table = Table(Settings(2, 100, 10, 10), io.StringIO())
    assert table.stopped() is False
    table.stop()
    assert table.stopped() is True


def test_print_status_after_stop_only_reports_death():
    out = io.StringIO()
    table = Table(Settings(2, 100, 10, 10), out)
    philosopher = table.philosophers[1]
    table.print_status(philosopher, Status.EATING)
    table.stop()
    table.print_status(philosopher, Status.SLEEPING)
    table.print_status(philosopher, Status.DIED)
    texts = [_parse(line)[2] for line in _lines(out)]
    assert texts == [Status.EATING.value, Status.DIED.value]
    assert all(_parse(line)[1] == 2 for line in _lines(out))


def test_end_condition_detects_starvation():
    out = io.StringIO()
    table = Table(Settings(3, 100, 10, 10), out)
    now = now_ms()
    for philosopher in table.philosophers:
        philosopher.last_meal = now
    table.philosophers[2].last_meal = now - 1000
    assert table.end_condition_reached() is True
    assert table.stopped() is True
    lines = _lines(out)
    assert len(lines) == 1
    assert _parse(lines[0])[1:] == (3, Status.DIED.value)


def test_end_condition_everyone_fed():
    out = io.StringIO()
    table = Table(Settings(3, 1000, 10, 10, must_eat=2), out)
    now = now_ms()
    for philosopher in table.philosophers:
        philosopher.last_meal = now
        philosopher.times_ate = 2
    assert table.end_condition_reached() is True
    assert table.stopped() is True
    assert out.getvalue() == ""


def test_end_condition_not_reached():
    table = Table(Settings(3, 1000, 10, 10, must_eat=2), io.StringIO())
    now = now_ms()
    for philosopher in table.philosophers:
        philosopher.last_meal = now
    table.philosophers[0].times_ate = 5
    assert table.end_condition_reached() is False
    assert table.stopped() is False


def test_close_to_death():
    table = Table(Settings(2, 400, 10, 10), io.StringIO())
    philosopher = table.philosophers[0]
    philosopher.last_meal = now_ms()
    assert philosopher.close_to_death() is False
    philosopher.last_meal = now_ms() - 400
    assert philosopher.close_to_death() is True


def test_eat_and_sleep_when_stopped():
    out = io.StringIO()
    table = Table(Settings(2, 100, 10, 10), out)
    table.stop()
    philosopher = table.philosophers[0]
    assert philosopher.eat_and_sleep() is False
    assert philosopher.times_ate == 0
    assert out.getvalue() == ""


def test_eat_and_sleep_logs_a_full_cycle():
    out = io.StringIO()
    table = Table(Settings(2, 1000, 5, 5), out)
    philosopher = table.philosophers[0]
    before = now_ms()
    assert philosopher.eat_and_sleep() is True
    assert philosopher.times_ate == 1
    assert philosopher.last_meal >= before
    texts = [_parse(line)[2] for line in _lines(out)]
    assert texts == [
        Status.TAKEN_FORK.value,
        Status.TAKEN_FORK.value,
        Status.EATING.value,
        Status.SLEEPING.value,
    ]
    assert all(not lock.locked() for lock in table.fork_locks)


def test_think_silent_when_stopped():
    out = io.StringIO()
    table = Table(Settings(2, 1000, 10, 10), out)
    philosopher = table.philosophers[0]
    philosopher.last_meal = now_ms()
    table.stop()
    philosopher.think(silent=False)
    assert out.getvalue() == ""


def test_check_sleep_returns_early_when_stopped():
    table = Table(Settings(2, 100, 10, 10), io.StringIO())
    table.stop()
    before = now_ms()
    table.check_sleep(5000)
    assert now_ms() - before < 1000


def test_single_philosopher_dies():
    out = io.StringIO()
    table = Table(Settings(1, 60, 10, 10), out)
    table.run()
    lines = [_parse(line) for line in _lines(out)]
    assert [text for _, _, text in lines] == [Status.TAKEN_FORK.value, Status.DIED.value]
    assert all(number == 1 for _, number, _ in lines)
    assert lines[1][0] >= 60


def test_starving_table_reports_one_death_last():
    out = io.StringIO()
    table = Table(Settings(3, 100, 200, 100), out)
    table.run()
    lines = [_parse(line) for line in _lines(out)]
    deaths = [line for line in lines if line[2] == Status.DIED.value]
    assert len(deaths) == 1
    assert lines[-1] == deaths[0]
    stamps = [stamp for stamp, _, _ in lines]
    assert stamps == sorted(stamps)


def test_everyone_eats_enough():
    out = io.StringIO()
    table = Table(Settings(4, 1000, 20, 20, must_eat=3), out)
    table.run()
    assert table.stopped() is True
    assert all(philosopher.times_ate >= 3 for philosopher in table.philosophers)
    texts = [_parse(line)[2] for line in _lines(out)]
    assert Status.DIED.value not in texts
    assert all(not lock.locked() for lock in table.fork_locks)