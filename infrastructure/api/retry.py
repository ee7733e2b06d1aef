from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from config import settings
from core.logging.logger import StructuredLogger, get_logger
from domain.errors import RateLimitedError


T = TypeVar("T")
TransientPredicate = Callable[[BaseException], bool]
Supplier = Callable[[], Awaitable[T]]
Sleep = Callable[[float], Awaitable[None]]

_log = get_logger(__name__, service="retry")


def is_rate_limited(exc: BaseException) -> bool:
    return isinstance(exc, RateLimitedError)


@dataclass(slots=True)
class RetryPolicy:
    """Bounded retry with exponential backoff.

    ``max_retries`` counts retries, not attempts: with 3 retries a call is
    tried at most 4 times, sleeping base, 2*base and 4*base in between.
    """

    max_retries: int
    base_delay: float
    backoff_factor: float = 2.0

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(max_retries=settings.MAX_RETRIES, base_delay=settings.RETRY_BASE_DELAY)

    def delay_for(self, attempt: int, exc: Optional[BaseException] = None) -> float:
        delay = self.base_delay * math.pow(self.backoff_factor, attempt)
        retry_after = getattr(exc, "retry_after", None)
        if isinstance(retry_after, (int, float)) and retry_after > delay:
            delay = float(retry_after)
        return delay

    async def run(
        self,
        supplier: Supplier[T],
        *,
        is_transient: TransientPredicate = is_rate_limited,
        sleep: Sleep = asyncio.sleep,
        logger: StructuredLogger = _log,
        context: dict[str, Any] | None = None,
    ) -> T:
        attempt = 0
        while True:
            try:
                return await supplier()
            except Exception as e:
                if not is_transient(e) or attempt >= self.max_retries:
                    raise
                delay = self.delay_for(attempt, e)
                logger.warning(
                    lambda: f"retry {attempt + 1}/{self.max_retries} in {delay:.2f}s: {e}",
                    extra={"context": {**(context or {}), "attempt": attempt + 1}},
                )
                await sleep(delay)
                attempt += 1
