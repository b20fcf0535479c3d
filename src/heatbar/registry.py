"""
Thread-safe per-address heat store.

Two-level locking: a coarse registry lock guards the key set (inserts,
evictions, copying the entry list) and each entry carries its own lock for
heat updates, so traffic for unrelated addresses is never serialized.
Snapshots copy entry references under the registry lock and read values
afterwards, so no lock is held while callers sort or format the result.
"""

import math
import threading
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Tuple

from src.utils.logger import get_logger

logger = get_logger(__name__)


class HeatSample(NamedTuple):
    """One (address, heat) pair taken from a snapshot."""
    address: str
    heat: float


@dataclass
class HeatEntry:
    """Mutable heat state for a single address."""
    address: str
    heat: float = 0.0
    idle_ticks: int = 0
    evicted: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


def _sanitize_amount(value: float) -> float:
    """Clamp a byte count or decay rate to a finite non-negative number."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or value < 0:
        return 0.0
    return value


class HeatRegistry:
    """Keyed store mapping address -> heat bounded to [0, max_heat]."""

    def __init__(self, max_heat: float = 1000000, evict_after_ticks: int = 0):
        self.max_heat = float(max_heat)
        self.evict_after_ticks = int(evict_after_ticks)
        self._entries: Dict[str, HeatEntry] = {}
        self._lock = threading.Lock()
        self._generation = 0
        self._generation_lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, address: str) -> bool:
        with self._lock:
            return address in self._entries

    @property
    def generation(self) -> int:
        """Counter bumped on every mutation; used by the renderer as a dirty flag."""
        return self._generation

    def _touch(self) -> None:
        with self._generation_lock:
            self._generation += 1

    def _get_or_create(self, address: str) -> HeatEntry:
        with self._lock:
            entry = self._entries.get(address)
            if entry is None:
                entry = HeatEntry(address=address)
                self._entries[address] = entry
            return entry

    def record_traffic(self, address: str, byte_count: float) -> None:
        """Add byte_count to the address's heat, creating the entry on first sight.

        Heat is clamped to max_heat. Never raises: negative or invalid byte
        counts are treated as zero.
        """
        amount = _sanitize_amount(byte_count)

        while True:
            entry = self._get_or_create(address)
            with entry.lock:
                if entry.evicted:
                    # Lost a race with eviction; retry against the new entry
                    continue
                entry.heat = min(entry.heat + amount, self.max_heat)
                entry.idle_ticks = 0
                break

        self._touch()

    def decay_all(self, rate: float) -> None:
        """Subtract rate from every entry's heat, flooring at zero.

        Only one entry lock is held at a time, so ingestion is never blocked
        for longer than a single entry update.
        """
        amount = _sanitize_amount(rate)

        with self._lock:
            entries = list(self._entries.values())

        idle: List[HeatEntry] = []
        for entry in entries:
            with entry.lock:
                entry.heat = max(entry.heat - amount, 0.0)
                if entry.heat == 0.0:
                    entry.idle_ticks += 1
                    if self.evict_after_ticks > 0 and entry.idle_ticks >= self.evict_after_ticks:
                        idle.append(entry)

        if idle:
            self._evict(idle)

        self._touch()

    def _evict(self, candidates: List[HeatEntry]) -> None:
        evicted = 0
        # One candidate per acquisition so inserts wait for a single removal at most
        for entry in candidates:
            with self._lock, entry.lock:
                # Traffic may have arrived since the decay pass
                if entry.heat != 0.0 or entry.idle_ticks < self.evict_after_ticks:
                    continue
                if self._entries.get(entry.address) is entry:
                    del self._entries[entry.address]
                    entry.evicted = True
                    evicted += 1
        if evicted:
            logger.debug(f"Evicted {evicted} idle addresses")

    def reset(self) -> None:
        """Set every entry's heat to zero."""
        with self._lock:
            entries = list(self._entries.values())
        for entry in entries:
            with entry.lock:
                entry.heat = 0.0
        self._touch()

    def snapshot(self) -> Tuple[HeatSample, ...]:
        """Return an immutable copy of (address, heat) pairs at one instant."""
        with self._lock:
            entries = list(self._entries.values())

        samples = []
        for entry in entries:
            with entry.lock:
                samples.append(HeatSample(entry.address, entry.heat))
        return tuple(samples)

    def heat_of(self, address: str) -> float:
        """Current heat for an address, 0 if it has never been seen."""
        with self._lock:
            entry = self._entries.get(address)
        if entry is None:
            return 0.0
        with entry.lock:
            return entry.heat
