"""
Read-through TTL cache for the income read path.

Scoped by (user, year), with three independent slots per key (raw entries,
monthly stats, yearly stats) and one user-scoped slot for all-time stats.
Expired values are reported as misses, never returned stale.
"""

import enum
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


class CacheSlot(str, enum.Enum):
    ENTRIES = "entries"
    MONTHLY_STATS = "monthly_stats"
    YEARLY_STATS = "yearly_stats"


@dataclass(frozen=True)
class CacheKey:
    user_id: str
    year: int


class IncomeCache:
    """Thread-safe TTL cache. Constructed once per application."""

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        # (key, slot) -> (value, written_at)
        self._slots: dict[tuple[CacheKey, CacheSlot], tuple[Any, float]] = {}
        # user_id -> (value, written_at)
        self._all_time: dict[str, tuple[Any, float]] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def _fresh(self, written_at: float) -> bool:
        return self._clock() - written_at < self._ttl

    def get(self, key: CacheKey, slot: CacheSlot) -> Any | None:
        with self._lock:
            cached = self._slots.get((key, slot))
            if cached is None:
                return None
            value, written_at = cached
            if not self._fresh(written_at):
                del self._slots[(key, slot)]
                return None
            return value

    def set(self, key: CacheKey, slot: CacheSlot, value: Any) -> None:
        with self._lock:
            self._slots[(key, slot)] = (value, self._clock())

    def get_all_time(self, user_id: str) -> Any | None:
        with self._lock:
            cached = self._all_time.get(user_id)
            if cached is None:
                return None
            value, written_at = cached
            if not self._fresh(written_at):
                del self._all_time[user_id]
                return None
            return value

    def set_all_time(self, user_id: str, value: Any) -> None:
        with self._lock:
            self._all_time[user_id] = (value, self._clock())

    def invalidate(self, key: CacheKey) -> None:
        """Drop every slot for one (user, year) plus that user's all-time stats."""
        with self._lock:
            for slot in CacheSlot:
                self._slots.pop((key, slot), None)
            self._all_time.pop(key.user_id, None)
        logger.debug("Invalidated income cache for user=%s year=%s", key.user_id, key.year)

    def clear(self) -> None:
        with self._lock:
            self._slots.clear()
            self._all_time.clear()
        logger.debug("Cleared income cache")
