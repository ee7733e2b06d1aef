"""Sliding-window rate limiter for the match provider's quotas."""
import asyncio
import time
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable, Deque, Dict, Optional, Sequence, Tuple
import logging

from config import settings

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]

DEFAULT_BUCKET = "default"


@dataclass(frozen=True)
class RateWindow:
    """At most ``limit`` requests inside any ``seconds``-long window."""

    seconds: float
    limit: int


class RateLimiter:
    """
    One rolling log of issue timestamps, checked against per-bucket windows.

      - default   : 20 requests / 1 s  and  100 requests / 60 s
      - match_ids : 2000 requests / 10 s  (id listing only)

    Every request lands in the same log, so id listing calls still count
    against the default windows seen by the account and match calls.

    ``acquire`` is a critical section: concurrent fetches inside a batch
    queue on the lock in arrival order, so the count they see always
    includes the requests issued just before them.
    """

    def __init__(
        self,
        profiles: Dict[str, Sequence[RateWindow]],
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        if DEFAULT_BUCKET not in profiles:
            raise ValueError("a 'default' profile is required")
        self._profiles: Dict[str, Tuple[RateWindow, ...]] = {
            name: tuple(windows) for name, windows in profiles.items()
        }
        self._horizon = max(w.seconds for ws in self._profiles.values() for w in ws)
        self._clock = clock
        self._sleep = sleep
        self._times: Deque[float] = deque()
        self._lock = asyncio.Lock()

        self.total_calls = 0
        self.total_waits = 0

    @classmethod
    def from_settings(cls, *, clock: Clock = time.monotonic, sleep: Sleep = asyncio.sleep) -> "RateLimiter":
        return cls(
            {
                DEFAULT_BUCKET: (
                    RateWindow(1.0, settings.RATE_LIMIT_PER_1_SEC),
                    RateWindow(60.0, settings.RATE_LIMIT_PER_1_MIN),
                ),
                settings.MATCH_IDS_BUCKET: (
                    RateWindow(10.0, settings.MATCH_IDS_RATE_LIMIT_PER_10_SEC),
                ),
            },
            clock=clock,
            sleep=sleep,
        )

    def _windows(self, bucket: Optional[str]) -> Tuple[RateWindow, ...]:
        return self._profiles.get(bucket or DEFAULT_BUCKET, self._profiles[DEFAULT_BUCKET])

    def _prune(self, now: float) -> None:
        while self._times and now - self._times[0] >= self._horizon:
            self._times.popleft()

    def _in_window(self, now: float, seconds: float) -> list[float]:
        return [t for t in self._times if now - t < seconds]

    def _wait_time(self, now: float, windows: Tuple[RateWindow, ...]) -> float:
        """Seconds until every window has room, or 0 if a request may go now."""
        wait = 0.0
        for window in windows:
            inside = self._in_window(now, window.seconds)
            if len(inside) >= window.limit:
                # The request may go once enough of the oldest entries have
                # aged out to leave limit - 1 behind.
                exiting = inside[len(inside) - window.limit]
                wait = max(wait, exiting + window.seconds - now)
        return wait

    async def acquire(self, bucket: Optional[str] = None) -> None:
        windows = self._windows(bucket)
        async with self._lock:
            while True:
                now = self._clock()
                self._prune(now)
                wait = self._wait_time(now, windows)
                if wait <= 0:
                    self._times.append(now)
                    self.total_calls += 1
                    return
                self.total_waits += 1
                logger.debug(f"Rate limit ({bucket or DEFAULT_BUCKET}): waiting {wait:.3f}s")
                await self._sleep(wait)

    def get_status(self) -> Dict[str, int]:
        now = self._clock()
        status: Dict[str, int] = {}
        for name, windows in self._profiles.items():
            for window in windows:
                key = f"{name}_{window.seconds:g}s"
                status[f"{key}_used"] = len(self._in_window(now, window.seconds))
                status[f"{key}_limit"] = window.limit
        status["total_calls"] = self.total_calls
        status["total_waits"] = self.total_waits
        return status

    async def reset(self) -> None:
        async with self._lock:
            self._times.clear()
