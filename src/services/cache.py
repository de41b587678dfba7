"""
Single-slot TTL cache for the aggregate report
"""
import asyncio
import logging
import time
from dataclasses import replace
from threading import Lock
from typing import Awaitable, Callable, Optional

from core.entities import AggregateReport, CacheEntry

logger = logging.getLogger(__name__)


class ResponseCache:
    """
    Memoizes the last successful report for `ttl_seconds`.

    There is one global slot: the report takes no request parameters.
    With `single_flight`, concurrent misses share one aggregation instead
    of each paying for their own.
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        *,
        single_flight: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.single_flight = single_flight
        self.clock = clock
        self._entry: Optional[CacheEntry] = None
        self._lock = Lock()
        self._load_lock: Optional[asyncio.Lock] = None

    def _fresh_entry(self) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entry
        if entry is None:
            return None
        if self.clock() - entry.captured_at >= self.ttl_seconds:
            return None
        return entry

    def get(self) -> Optional[AggregateReport]:
        """Cached report flagged `served_from_cache`, or None when absent or expired."""
        entry = self._fresh_entry()
        if entry is None:
            return None
        return replace(entry.payload, served_from_cache=True)

    def set(self, report: AggregateReport) -> None:
        entry = CacheEntry(
            payload=replace(report, served_from_cache=False),
            captured_at=self.clock(),
        )
        with self._lock:
            self._entry = entry

    def clear(self) -> None:
        with self._lock:
            self._entry = None

    def age(self) -> Optional[float]:
        """Seconds since the current entry was captured, expired or not."""
        with self._lock:
            entry = self._entry
        if entry is None:
            return None
        return self.clock() - entry.captured_at

    async def get_or_load(self, loader: Callable[[], Awaitable[AggregateReport]]) -> AggregateReport:
        """
        Serve from cache, or run `loader`, store its report and return it.
        """
        cached = self.get()
        if cached is not None:
            logger.info("Cache hit")
            return cached

        if not self.single_flight:
            return await self._load(loader)

        if self._load_lock is None:
            self._load_lock = asyncio.Lock()

        async with self._load_lock:
            # Another request may have refreshed the slot while we waited
            cached = self.get()
            if cached is not None:
                logger.info("Cache filled by concurrent request")
                return cached
            return await self._load(loader)

    async def _load(self, loader: Callable[[], Awaitable[AggregateReport]]) -> AggregateReport:
        logger.info("Cache miss, running aggregation")
        report = await loader()
        self.set(report)
        return replace(report, served_from_cache=False)
