# typeahead/security/rate_limit.py

import threading
import time
from datetime import datetime, timezone
from typing import Callable, Dict, NamedTuple

from typeahead.config import (
    RATE_LIMIT_CLEANUP_INTERVAL_SECONDS,
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_WINDOW_SECONDS,
)


class RateLimitResult(NamedTuple):
    allowed: bool
    remaining: int
    reset_at: float  # epoch seconds

    @property
    def reset_at_iso(self) -> str:
        return datetime.fromtimestamp(self.reset_at, tz=timezone.utc).isoformat()


class RateLimiter:
    """
    Process-wide fixed-window request counters keyed by caller identity.

    Read-and-increment happens under one lock that is never held across
    I/O. Expired windows are dropped lazily: a sweep runs on access at
    most once per cleanup_interval.
    """

    def __init__(
        self,
        cleanup_interval: float = RATE_LIMIT_CLEANUP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self._records: Dict[str, list] = {}  # identifier -> [count, reset_at]
        self._lock = threading.Lock()
        self._cleanup_interval = cleanup_interval
        self._clock = clock
        self._last_cleanup = clock()

    def check(
        self,
        identifier: str,
        limit: int = RATE_LIMIT_DEFAULT,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
    ) -> RateLimitResult:

        now = self._clock()

        with self._lock:

            self._maybe_cleanup(now)

            record = self._records.get(identifier)

            if record is None or record[1] < now:
                reset_at = now + window_seconds
                self._records[identifier] = [1, reset_at]
                return RateLimitResult(True, limit - 1, reset_at)

            count, reset_at = record

            if count >= limit:
                return RateLimitResult(False, 0, reset_at)

            record[0] = count + 1

            return RateLimitResult(True, limit - record[0], reset_at)

    def __len__(self) -> int:
        return len(self._records)

    def _maybe_cleanup(self, now: float):

        if now - self._last_cleanup < self._cleanup_interval:
            return

        expired = [key for key, (_, reset_at) in self._records.items() if reset_at < now]

        for key in expired:
            del self._records[key]

        self._last_cleanup = now
