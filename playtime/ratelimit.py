from __future__ import annotations

import logging
import time
from typing import Iterable, Protocol

from .http import HttpResponse

logger = logging.getLogger(__name__)


class Clock(Protocol):
    def monotonic(self) -> float: ...

    def sleep(self, seconds: float) -> None: ...


class SystemClock:
    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


class RateLimitRetryPolicy:
    """Request pacing and retry decision for a rate-limited service.

    Every request is padded out to ``min_interval`` seconds, whatever its
    outcome. Responses whose status is in ``retry_statuses`` are reissued
    without limit and without backoff growth.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        retry_statuses: Iterable[int] = (503,),
        clock: Clock | None = None,
    ) -> None:
        self.min_interval = min_interval
        self.retry_statuses = frozenset(retry_statuses)
        self.clock = clock or SystemClock()

    def is_retryable(self, response: HttpResponse) -> bool:
        return response.status in self.retry_statuses

    def pace(self, elapsed: float) -> None:
        wait = self.min_interval - elapsed
        if wait > 0:
            logger.debug("Rate limiting: sleeping %.3fs", wait)
            self.clock.sleep(wait)
