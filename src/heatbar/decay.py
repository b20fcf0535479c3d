"""Periodic decay of every address's heat."""

import threading
import time

from src.utils.logger import get_logger

from .registry import HeatRegistry

logger = get_logger(__name__)


def next_deadline(deadline: float, interval: float, now: float) -> float:
    """Next tick time on the fixed grid deadline + k * interval after now.

    Ticks missed by a slow decay pass are dropped rather than run back to back.
    """
    deadline += interval
    if deadline <= now:
        missed = int((now - deadline) // interval) + 1
        deadline += missed * interval
    return deadline


class DecayScheduler(threading.Thread):
    """Calls registry.decay_all(rate) every interval seconds until stopped."""

    daemon = True

    def __init__(self, registry: HeatRegistry, rate: float, interval: float):
        super().__init__(name="heat-decay")
        self.registry = registry
        self.rate = rate
        self.interval = interval
        self.ticks = 0
        self._stopped = threading.Event()

    def tick(self) -> None:
        """Run a single decay step."""
        self.registry.decay_all(self.rate)
        self.ticks += 1

    def stop(self) -> None:
        self._stopped.set()

    def run(self) -> None:
        logger.info(f"Decay scheduler starting: rate={self.rate} interval={self.interval}s")
        # Deadlines are on a monotonic grid so tick duration does not accumulate as drift
        deadline = time.monotonic() + self.interval
        while not self._stopped.wait(max(0.0, deadline - time.monotonic())):
            self.tick()
            deadline = next_deadline(deadline, self.interval, time.monotonic())
        logger.info(f"Decay scheduler stopped after {self.ticks} ticks")
