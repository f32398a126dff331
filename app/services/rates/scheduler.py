from __future__ import annotations

"""Background refresh of the cached resources.

Three daemon threads are started:
    - a rates ticker firing every TTL(rates)
    - a symbols ticker firing every TTL(symbols)
    - a one-shot warm-up that refreshes whatever is not fresh at startup

A failed iteration is logged and the ticker keeps going. ``stop()`` wakes the
tickers through a shared event and joins them.
"""
import logging
import threading
from typing import List, Optional

from .base import Resource
from .cache_service import RateCacheService

logger = logging.getLogger("app.rates.scheduler")


class RefreshScheduler:
    def __init__(self, service: RateCacheService):
        self._service = service
        self._stop = threading.Event()
        self._threads: List[threading.Thread] = []

    @property
    def running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def _refresh(self, resource: Resource, origin: str) -> bool:
        try:
            self._service.refresh(resource)
        except Exception as e:
            logger.warning("%s: failed to update %s cache: %s", origin, resource.value, e)
            return False
        logger.info("%s: updated %s cache", origin, resource.value)
        return True

    def warm_up(self) -> None:
        for resource in (Resource.RATES, Resource.SYMBOLS):
            if self._stop.is_set():
                return
            if not self._service.freshness.is_fresh(resource):
                self._refresh(resource, "initial")

    def _tick(self, resource: Resource, interval: float) -> None:
        while not self._stop.wait(interval):
            self._refresh(resource, "background")

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        freshness = self._service.freshness
        specs = [
            ("rates-ticker", self._tick, (Resource.RATES, freshness.ttl(Resource.RATES))),
            (
                "symbols-ticker",
                self._tick,
                (Resource.SYMBOLS, freshness.ttl(Resource.SYMBOLS)),
            ),
            ("cache-warm-up", self.warm_up, ()),
        ]
        self._threads = [
            threading.Thread(target=fn, args=args, name=name, daemon=True)
            for name, fn, args in specs
        ]
        for t in self._threads:
            t.start()
        logger.info(
            "refresh scheduler started (rates every %ss, symbols every %ss)",
            freshness.ttl(Resource.RATES),
            freshness.ttl(Resource.SYMBOLS),
        )

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        for t in self._threads:
            t.join(timeout)
            if t.is_alive():
                logger.warning("thread %s did not stop within %ss", t.name, timeout)
        self._threads = []
        logger.info("refresh scheduler stopped")
