"""
Per-client fixed-window request limiter
"""
import asyncio
import logging
import math
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Mapping

from core.entities import RateWindow

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_in: int  # Whole seconds until the window resets


def client_identifier(headers: Mapping[str, str]) -> str:
    """
    Resolve the client key from proxy headers.
    Clients without either header share the "unknown" bucket.
    """
    forwarded = headers.get("x-forwarded-for") or headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = headers.get("x-real-ip") or headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return UNKNOWN_CLIENT


class RateLimiter:
    """
    Allows `max_requests` per `window_seconds` for each client key.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 60,
        *,
        clock: Callable[[], float] = time.time,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, RateWindow] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def _reset_in(self, window: RateWindow, now: float) -> int:
        return max(0, math.ceil(window.window_reset_at - now))

    def check(self, key: str) -> RateLimitDecision:
        """Count one request for `key` and decide whether it may proceed."""
        now = self.clock()

        with self._lock:
            window = self._windows.get(key)

            if window is None or now >= window.window_reset_at:
                window = RateWindow(request_count=1, window_reset_at=now + self.window_seconds)
                self._windows[key] = window
                return RateLimitDecision(
                    allowed=True,
                    remaining=self.max_requests - 1,
                    reset_in=self._reset_in(window, now),
                )

            if window.request_count >= self.max_requests:
                return RateLimitDecision(
                    allowed=False,
                    remaining=0,
                    reset_in=self._reset_in(window, now),
                )

            window.request_count += 1
            return RateLimitDecision(
                allowed=True,
                remaining=self.max_requests - window.request_count,
                reset_in=self._reset_in(window, now),
            )

    def sweep(self) -> int:
        """Drop expired windows. Returns how many were removed."""
        now = self.clock()
        with self._lock:
            expired = [key for key, window in self._windows.items() if now >= window.window_reset_at]
            for key in expired:
                del self._windows[key]

        if expired:
            logger.debug(f"Swept {len(expired)} expired rate windows")
        return len(expired)

    async def run_sweeper(self, interval: float) -> None:
        """Sweep every `interval` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            try:
                self.sweep()
            except Exception as e:
                logger.error(f"Rate window sweep failed: {e}")
