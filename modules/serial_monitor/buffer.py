"""Capacity-capped entry storage for the two display lanes."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from utils import common

from .models import LaneKind, LogEntry

logger = common.get_logger('serial_buffer')

DEFAULT_LANE_CAPACITY = 1000


class BufferLane:
    """Append-only ordered entries with oldest-first eviction past ``capacity``."""

    def __init__(self, capacity: int = DEFAULT_LANE_CAPACITY, name: str = 'lane') -> None:
        if capacity <= 0:
            raise ValueError('capacity must be positive')
        self._capacity = capacity
        self._name = name
        self._entries: List[LogEntry] = []
        self._evicted = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def evicted_count(self) -> int:
        """Total number of entries dropped by eviction so far."""
        return self._evicted

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)
        self._trim()

    def extend(self, entries: Iterable[LogEntry]) -> None:
        """Append several entries, evicting once at the end."""
        self._entries.extend(entries)
        self._trim()

    def snapshot(self) -> Tuple[LogEntry, ...]:
        """Return the current entries, oldest first, as an immutable tuple."""
        return tuple(self._entries)

    def _trim(self) -> None:
        overflow = len(self._entries) - self._capacity
        if overflow <= 0:
            return
        del self._entries[:overflow]
        self._evicted += overflow
        logger.debug('Evicted %s entries from %s lane', overflow, self._name)


class DualBuffer:
    """Routes INFO entries to the main lane and WARNING/ERROR to the alert lane."""

    def __init__(self, capacity: int = DEFAULT_LANE_CAPACITY) -> None:
        self.main = BufferLane(capacity, name=LaneKind.MAIN.value)
        self.alert = BufferLane(capacity, name=LaneKind.ALERT.value)

    def lane(self, kind: LaneKind) -> BufferLane:
        return self.main if kind is LaneKind.MAIN else self.alert

    def append(self, entry: LogEntry) -> LaneKind:
        """Store ``entry`` in the lane matching its severity and return that lane."""
        kind = entry.lane
        self.lane(kind).append(entry)
        return kind

    def lengths(self) -> Tuple[int, int]:
        return len(self.main), len(self.alert)
