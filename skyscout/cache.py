from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .models import Offer

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CacheEntry:
    offers: List[Offer]
    created_at: float
    expires_at: float


class ResultCache:
    """In-memory fingerprint -> ranked offers map with a fixed TTL.

    Expired entries are dropped lazily when looked up. There is no explicit
    invalidation.
    """

    def __init__(
        self, ttl_s: float = 3600, clock: Callable[[], float] = time.monotonic
    ) -> None:
        if ttl_s <= 0:
            raise ValueError("ttl_s must be greater than 0")
        self.ttl_s = ttl_s
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, fingerprint: str) -> Optional[List[Offer]]:
        with self._lock:
            entry = self._entries.get(fingerprint)
            if entry is None:
                self.misses += 1
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[fingerprint]
                self.misses += 1
                logger.debug("Cache entry expired: %s", fingerprint)
                return None
            self.hits += 1
            return list(entry.offers)

    def put(self, fingerprint: str, offers: List[Offer]) -> None:
        now = self._clock()
        with self._lock:
            self._entries[fingerprint] = CacheEntry(
                offers=list(offers), created_at=now, expires_at=now + self.ttl_s
            )

    def purge_expired(self) -> int:
        """Drop every expired entry; return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, v in self._entries.items() if now >= v.expires_at]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def stats(self) -> dict:
        with self._lock:
            return {
                "keys": len(self._entries),
                "hits": self.hits,
                "misses": self.misses,
            }

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["CacheEntry", "ResultCache"]
