import io
import time

import pytest

from philosim.args import INT_MAX, Settings
from philosim.clock import Event
from philosim.simulation import Simulation


def _parse(out):
    lines = []
    for line in out.getvalue().splitlines():
        ms, philo_id, text = line.split(" ", 2)
        lines.append((int(ms), int(philo_id), text))
    return lines


def test_zero_philosophers_rejected():
    with pytest.raises(ValueError):
        Simulation(Settings(0, 100, 10, 10), out=io.StringIO())


def test_forks_are_shared_between_neighbours():
    sim = Simulation(Settings(3, 100, 10, 10), out=io.StringIO(), start_delay=0)
    philos = sim.philosophers
    assert [p.id for p in philos] == [1, 2, 3]
    for index, philo in enumerate(philos):
        assert philo.right is philos[(index + 1) % len(philos)].left


def test_lone_philosopher_has_one_fork():
    sim = Simulation(Settings(1, 100, 10, 10), out=io.StringIO(), start_delay=0)
    assert sim.philosophers[0].left is sim.philosophers[0].right


def test_lone_philosopher_dies():
    out = io.StringIO()
    settings = Settings(1, 60, 10, 10)
    died = Simulation(settings, out=out, start_delay=0).run()
    lines = _parse(out)
    assert died == 1
    assert [(pid, text) for _, pid, text in lines] == [
        (1, Event.FORK.value),
        (1, Event.DIED.value),
    ]
    assert lines[-1][0] >= settings.time_to_die


def test_everyone_eats_required_meals():
    out = io.StringIO()
    settings = Settings(3, 1000, 20, 20, 2)
    sim = Simulation(settings, out=out, start_delay=0)
    assert sim.run() is None
    lines = _parse(out)
    assert all(text != Event.DIED.value for _, _, text in lines)
    for philo_id in range(1, settings.philos + 1):
        meals = [l for l in lines if l[1] == philo_id and l[2] == Event.EAT.value]
        assert len(meals) == settings.max_cycles
    assert sim.all_fed()


def test_starving_philosopher_ends_log():
    out = io.StringIO()
    sim = Simulation(Settings(2, 100, 200, 50), out=out, start_delay=0)
    died = sim.run()
    lines = _parse(out)
    assert died in (1, 2)
    assert lines[-1][1:] == (died, Event.DIED.value)
    assert sum(1 for l in lines if l[2] == Event.DIED.value) == 1
    stamps = [l[0] for l in lines]
    assert stamps == sorted(stamps)
    assert sim.is_over()


def test_nothing_due_before_start():
    out = io.StringIO()
    settings = Settings(2, 1000, 10, 10)
    sim = Simulation(settings, out=out, start_delay=5)
    assert sim.next_deadline_ms() > settings.time_to_die
    assert sim.check_death() is False
    assert out.getvalue() == ""


def test_fed_philosophers_have_no_deadline():
    settings = Settings(2, 1000, 10, 10, 3)
    sim = Simulation(settings, out=io.StringIO(), start_delay=0)
    assert sim.all_fed() is False
    for philo in sim.philosophers:
        philo.cycles = settings.max_cycles
    assert sim.all_fed() is True
    assert sim.next_deadline_ms() == INT_MAX


def test_all_fed_false_without_limit():
    sim = Simulation(Settings(2, 1000, 10, 10), out=io.StringIO(), start_delay=0)
    for philo in sim.philosophers:
        philo.cycles = 100
    assert sim.all_fed() is False


def test_check_death_after_deadline():
    out = io.StringIO()
    sim = Simulation(Settings(2, 10, 10, 10), out=out, start_delay=0)
    time.sleep(0.05)
    assert sim.next_deadline_ms() < 0
    assert sim.check_death() is True
    assert sim.died == 1
    assert _parse(out)[-1][1:] == (1, Event.DIED.value)
    assert sim.is_over()
    assert sim.check_death() is False