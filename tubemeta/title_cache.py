"""Positive and negative caches for oEmbed title lookups."""

import logging
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from whenever import Instant

from .config import settings

logger = logging.getLogger(__name__)


class LRUCache:
    """Bounded mapping that evicts the least recently used entry."""

    def __init__(self, max_size: int = 200):
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self._data: OrderedDict[str, str] = OrderedDict()

    def get(self, key: str) -> str | None:
        if key not in self._data:
            return None
        self._data.move_to_end(key)
        return self._data[key]

    def set(self, key: str, value: str) -> None:
        if key in self._data:
            self._data.move_to_end(key)
        elif len(self._data) >= self.max_size:
            evicted, _ = self._data.popitem(last=False)
            logger.debug(f"Evicted {evicted} from title cache")
        self._data[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


@dataclass(frozen=True)
class NegativeCacheEntry:
    """Record of a failed lookup, valid until ``expires_at``."""

    status: int | None
    error: str | None
    expires_at: Instant


class NegativeCache:
    """Time-bounded record of failed lookups."""

    def __init__(
        self,
        ttl_seconds: int = 600,
        now_func: Callable[[], Instant] = Instant.now,
    ):
        self.ttl_seconds = ttl_seconds
        self.now_func = now_func
        self._entries: dict[str, NegativeCacheEntry] = {}

    def get(self, key: str) -> NegativeCacheEntry | None:
        """Return the entry for ``key`` unless it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self.now_func() >= entry.expires_at:
            del self._entries[key]
            return None

        return entry

    def set(self, key: str, status: int | None, error: str | None) -> NegativeCacheEntry:
        now = self.now_func()
        self._purge_expired(now)
        entry = NegativeCacheEntry(
            status=status,
            error=error,
            expires_at=now.add(seconds=self.ttl_seconds),
        )
        self._entries[key] = entry
        return entry

    def _purge_expired(self, now: Instant) -> None:
        expired = [k for k, e in self._entries.items() if now >= e.expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired negative cache entries")

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class TitleCache:
    """Cache state shared by every lookup of one title source."""

    def __init__(
        self,
        max_size: int = settings.title_cache_size,
        negative_ttl_seconds: int = settings.negative_cache_ttl_seconds,
        now_func: Callable[[], Instant] = Instant.now,
    ):
        self.positive = LRUCache(max_size)
        self.negative = NegativeCache(negative_ttl_seconds, now_func)

    def store_title(self, video_id: str, title: str) -> None:
        self.positive.set(video_id, title)
        self.negative.delete(video_id)

    def store_failure(
        self, video_id: str, status: int | None, error: str | None
    ) -> NegativeCacheEntry:
        return self.negative.set(video_id, status, error)
