"""In-memory cache of successful lookups.

Only successes are stored; a failed lookup is always retried by the next run.
Entries expire after `ttl_seconds`. An expired entry is dropped when it is
read, and the lookup clients call `purge()` before every lookup.
"""

from __future__ import annotations

import time
from typing import Callable

from core.domain.models import LookupSuccess


class LookupCache:
    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._items: dict[str, tuple[LookupSuccess, float]] = {}

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    def __len__(self) -> int:
        return len(self._items)

    def get(self, ip: str) -> LookupSuccess | None:
        item = self._items.get(ip)
        if item is None:
            return None
        outcome, stored_at = item
        if self._clock() - stored_at > self._ttl:
            del self._items[ip]
            return None
        return outcome

    def set(self, ip: str, outcome: LookupSuccess) -> None:
        if not self.enabled:
            return
        self._items[ip] = (outcome, self._clock())

    def purge(self) -> int:
        """Drop expired entries; returns how many were removed."""

        now = self._clock()
        expired = [ip for ip, (_, stored_at) in self._items.items() if now - stored_at > self._ttl]
        for ip in expired:
            del self._items[ip]
        return len(expired)
