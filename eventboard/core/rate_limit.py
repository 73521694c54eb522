"""Fixed-window admission control.

Each limiter instance owns its store and is bound to one ``RateLimitConfig``.
Counts reset at fixed window boundaries, so up to ``2 * max_requests``
admissions can land within ``window_ms`` when a burst straddles a boundary.

With ``max_entries`` set, the store never holds more than that many records.
Expired records are dropped to make room; when every record still has a live
window, new identifiers are rejected until one expires.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

Clock = Callable[[], int]


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    max_requests: int
    window_ms: int

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            raise ValueError("max_requests must be a positive integer.")
        if self.window_ms < 1:
            raise ValueError("window_ms must be a positive integer.")


@dataclass(slots=True)
class RateLimitRecord:
    count: int
    window_reset_at: int


class FixedWindowRateLimiter:
    def __init__(
        self,
        config: RateLimitConfig,
        *,
        clock: Clock | None = None,
        max_entries: int | None = None,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be a positive integer.")
        self._config = config
        self._clock = clock or epoch_millis
        self._max_entries = max_entries
        self._store: dict[str, RateLimitRecord] = {}
        self._lock = threading.Lock()

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    def __len__(self) -> int:
        return len(self._store)

    def is_allowed(self, identifier: str) -> bool:
        """Admit or reject one request for ``identifier``.

        Rejected calls leave the record untouched, so they never consume quota.
        """
        now = self._clock()
        with self._lock:
            record = self._store.get(identifier)
            if record is not None and record.window_reset_at > now:
                if record.count >= self._config.max_requests:
                    return False
                record.count += 1
                return True

            if record is None and not self._has_room(now):
                return False
            self._store[identifier] = RateLimitRecord(
                count=1,
                window_reset_at=now + self._config.window_ms,
            )
            return True

    def get_remaining_requests(self, identifier: str) -> int:
        record = self._live_record(identifier)
        if record is None:
            return self._config.max_requests
        return max(0, self._config.max_requests - record.count)

    def get_reset_time(self, identifier: str) -> int:
        record = self._live_record(identifier)
        if record is None:
            return 0
        return record.window_reset_at

    def sweep(self, grace_ms: int = 0) -> int:
        """Drop records whose window ended at least ``grace_ms`` ago."""
        cutoff = self._clock() - grace_ms
        with self._lock:
            return self._drop_expired(cutoff)

    def _live_record(self, identifier: str) -> RateLimitRecord | None:
        now = self._clock()
        with self._lock:
            record = self._store.get(identifier)
            if record is None or record.window_reset_at <= now:
                return None
            return RateLimitRecord(record.count, record.window_reset_at)

    def _has_room(self, now: int) -> bool:
        # Caller holds the lock.
        if self._max_entries is None or len(self._store) < self._max_entries:
            return True
        self._drop_expired(now)
        return len(self._store) < self._max_entries

    def _drop_expired(self, cutoff: int) -> int:
        # Caller holds the lock.
        expired = [
            identifier
            for identifier, record in self._store.items()
            if record.window_reset_at <= cutoff
        ]
        for identifier in expired:
            del self._store[identifier]
        return len(expired)
