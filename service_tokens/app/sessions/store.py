"""
Session store capability.

A keyed time-to-live map: session identifier -> principal id. The token
service never holds session state itself; it only reads and writes records
through this interface.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Callable, Dict, Optional, Tuple


class SessionStore(ABC):
    """Abstract session store."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        """Write ``value`` under ``key``, expiring after ``ttl``."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the live value under ``key`` or None."""

    @abstractmethod
    async def delete(self, key: str) -> Optional[str]:
        """Atomically remove ``key``, returning the value it held or None."""

    async def ping(self) -> bool:
        """Return True when the store is reachable."""
        return True

    async def close(self) -> None:
        """Release any underlying connection."""


class InMemorySessionStore(SessionStore):
    """Process-local store with lazy expiry. Used for tests and local runs."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._records: Dict[str, Tuple[str, float]] = {}
        self._lock = asyncio.Lock()

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        seconds = ttl.total_seconds()
        if seconds <= 0:
            raise ValueError(f"ttl must be positive, got {seconds}s")
        async with self._lock:
            self._records[key] = (value, self._clock() + seconds)

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            return self._live_value(key)

    async def delete(self, key: str) -> Optional[str]:
        async with self._lock:
            value = self._live_value(key)
            self._records.pop(key, None)
            return value

    def ttl(self, key: str) -> Optional[float]:
        """Remaining lifetime in seconds, or None when absent or expired."""
        record = self._records.get(key)
        if record is None:
            return None
        remaining = record[1] - self._clock()
        return remaining if remaining > 0 else None

    def __contains__(self, key: str) -> bool:
        return self.ttl(key) is not None

    def __len__(self) -> int:
        return sum(1 for key in list(self._records) if key in self)

    def _live_value(self, key: str) -> Optional[str]:
        record = self._records.get(key)
        if record is None:
            return None
        value, expires_at = record
        if self._clock() >= expires_at:
            del self._records[key]
            return None
        return value
