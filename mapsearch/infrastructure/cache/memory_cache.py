"""In-process TTL cache for search payloads."""
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

from mapsearch.application.interfaces.result_cache import ResultCache

logger = structlog.get_logger(__name__)


@dataclass
class _Entry:
    value: dict[str, Any]
    expires_at: float


class InMemoryResultCache(ResultCache):
    """
    Dict-backed cache with absolute per-entry expiry.

    Expired entries are dropped lazily on read and in bulk by sweep(). There is
    no size bound; entries are small and TTL-limited. All access happens on the
    event loop thread, so no locking is needed.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> dict[str, Any] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: dict[str, Any], ttl_seconds: float) -> None:
        self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl_seconds)

    def sweep(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("cache_swept", removed=len(expired), remaining=len(self._entries))
        return len(expired)
