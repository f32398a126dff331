from __future__ import annotations

import time
from typing import Callable, Dict, Optional

from .base import Resource
from .errors import CacheIOError
from .store import CacheStore

RATES_TTL_SECONDS = 3600  # 1 hour
SYMBOLS_TTL_SECONDS = 86400  # 24 hours


class FreshnessPolicy:
    """TTL check driven by the cache file mtime and the local wall clock."""

    def __init__(
        self,
        store: CacheStore,
        ttls: Optional[Dict[Resource, float]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._ttls = {
            Resource.RATES: RATES_TTL_SECONDS,
            Resource.SYMBOLS: SYMBOLS_TTL_SECONDS,
        }
        if ttls:
            self._ttls.update(ttls)
        self._clock = clock

    def ttl(self, resource: Resource) -> float:
        return self._ttls[resource]

    def is_fresh(self, resource: Resource) -> bool:
        try:
            mtime = self._store.mtime(resource)
        except CacheIOError:
            return False
        return self._clock() - mtime < self.ttl(resource)
