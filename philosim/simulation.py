"""The dining-philosophers simulation: philosopher threads and their monitor."""

from __future__ import annotations

import sys
import threading
import time
from dataclasses import dataclass
from typing import List, Optional, TextIO

from .args import INT_MAX, Settings
from .clock import Clock, Event, format_event, precise_sleep

# Extra slack, in milliseconds, added to the time a philosopher waits
# before trying to eat again.
_FOOD_SLACK_MS = 3


def _now_us() -> int:
    return time.time_ns() // 1000


@dataclass(eq=False)
class Philosopher:
    """One philosopher seated between two forks."""

    id: int
    left: threading.Lock
    right: threading.Lock
    last_meal: int
    cycles: int = 0
    food_delay: int = 0


class Simulation:
    """Runs philosophers in threads until one dies or all have eaten enough."""

    def __init__(
        self,
        settings: Settings,
        out: Optional[TextIO] = None,
        start_delay: float = 2.0,
    ) -> None:
        if settings.philos <= 0:
            raise ValueError("at least one philosopher is required")
        self.settings = settings
        self.out = sys.stdout if out is None else out
        self.clock = Clock(_now_us() + round(start_delay * 1_000_000))
        self._state_lock = threading.Lock()
        self._meal_lock = threading.Lock()
        self._over = False
        self.died: Optional[int] = None
        count = settings.philos
        self.forks = [threading.Lock() for _ in range(count)]
        self.philosophers: List[Philosopher] = [
            Philosopher(
                id=index + 1,
                left=self.forks[index],
                right=self.forks[(index + 1) % count],
                last_meal=self.clock.start,
            )
            for index in range(count)
        ]

    # -- shared state ------------------------------------------------------

    def is_over(self) -> bool:
        """Tell whether the simulation has been stopped."""
        with self._state_lock:
            return self._over

    def _finish(self) -> None:
        with self._state_lock:
            self._over = True

    def _stamp(self, philo: Philosopher, event: Event) -> None:
        with self._state_lock:
            if self._over and event is not Event.DIED:
                return
            ms = self.clock.elapsed_ms(round_up=True)
            self.out.write(format_event(ms, philo.id, event) + "\n")

    def _is_fed(self, philo: Philosopher) -> bool:
        limit = self.settings.max_cycles
        return limit > 0 and philo.cycles >= limit

    def _fed(self, philo: Philosopher) -> bool:
        with self._meal_lock:
            return self._is_fed(philo)

    def _since_meal(self, philo: Philosopher) -> int:
        with self._meal_lock:
            last = philo.last_meal
        return self.clock.elapsed_ms(last)

    def _sleep_ms(self, ms: int) -> None:
        precise_sleep(ms / 1000, self.is_over)

    # -- philosopher side --------------------------------------------------

    def _wait_for_start(self) -> None:
        while True:
            remaining_us = self.clock.start - _now_us()
            if remaining_us < 1000:
                return
            time.sleep(max(remaining_us - 1000, 50) / 1_000_000)

    def _grab_forks(self, philo: Philosopher) -> None:
        if philo.id % 2 == 0:
            first, second = philo.right, philo.left
        else:
            first, second = philo.left, philo.right
        first.acquire()
        self._stamp(philo, Event.FORK)
        second.acquire()
        self._stamp(philo, Event.FORK)

    def _eat(self, philo: Philosopher) -> None:
        if self.is_over():
            return
        self._grab_forks(philo)
        try:
            with self._meal_lock:
                philo.last_meal = _now_us()
            elapsed = self.clock.elapsed_ms()
            philo.food_delay = (
                elapsed
                + self.settings.time_to_eat
                + self.settings.time_to_sleep
                + _FOOD_SLACK_MS
            )
            self._stamp(philo, Event.EAT)
            self._sleep_ms(self.settings.time_to_eat)
            with self._meal_lock:
                philo.cycles += 1
        finally:
            philo.left.release()
            philo.right.release()

    def _step(self, philo: Philosopher) -> None:
        if self.is_over() or self._fed(philo):
            return
        delay = philo.food_delay - self.clock.elapsed_ms()
        if delay > 0:
            self._sleep_ms(delay)
        if self.is_over():
            return
        self._eat(philo)
        self._stamp(philo, Event.SLEEP)
        self._sleep_ms(self.settings.time_to_sleep)
        self._stamp(philo, Event.THINK)

    def _run_philosopher(self, philo: Philosopher) -> None:
        self._wait_for_start()
        if self.is_over():
            return
        if philo.left is philo.right:
            # A lone philosopher holds the only fork and can never eat.
            self._stamp(philo, Event.FORK)
            time.sleep(self.settings.time_to_die / 1000)
            return
        if philo.id % 2 == 1 and philo.cycles == 0:
            self._stamp(philo, Event.THINK)
            self._sleep_ms(self.settings.time_to_eat // 2)
        while True:
            self._step(philo)
            if self.is_over() or self._fed(philo):
                return

    # -- monitor side ------------------------------------------------------

    def next_deadline_ms(self) -> int:
        """Milliseconds until the hungriest philosopher starves, or INT_MAX."""
        soon = INT_MAX
        for philo in self.philosophers:
            if self._fed(philo):
                continue
            soon = min(soon, self.settings.time_to_die - self._since_meal(philo))
        return soon

    def check_death(self) -> bool:
        """Report the first philosopher found starved and stop the simulation."""
        for philo in self.philosophers:
            with self._state_lock, self._meal_lock:
                if self._is_fed(philo):
                    continue
                over = self._over
            if over:
                continue
            if self._since_meal(philo) > self.settings.time_to_die:
                with self._state_lock:
                    self._over = True
                    self.died = philo.id
                self._stamp(philo, Event.DIED)
                return True
        return False

    def all_fed(self) -> bool:
        """Tell whether every philosopher has eaten the required number of meals."""
        limit = self.settings.max_cycles
        if limit <= 0:
            return False
        with self._meal_lock:
            return all(philo.cycles >= limit for philo in self.philosophers)

    def _monitor(self) -> None:
        while not self.is_over() and not (self.check_death() or self.all_fed()):
            soon = self.next_deadline_ms()
            if soon == INT_MAX:
                time.sleep(0.005)
            elif soon > 2:
                time.sleep((soon - 1) / 1000)
            else:
                time.sleep(0.0005)
        self._finish()

    def run(self) -> Optional[int]:
        """Run to completion; return the id of the philosopher who died, if any."""
        threads: List[threading.Thread] = []
        try:
            for philo in self.philosophers:
                thread = threading.Thread(
                    target=self._run_philosopher,
                    args=(philo,),
                    name=f"philosopher-{philo.id}",
                    daemon=True,
                )
                thread.start()
                threads.append(thread)
            monitor = threading.Thread(target=self._monitor, name="monitor", daemon=True)
            monitor.start()
        except BaseException:
            self._finish()
            for thread in threads:
                thread.join()
            raise
        for thread in threads:
            thread.join()
        monitor.join()
        return self.died