import logging
import threading
import time

from app.services.rates.base import Resource
from app.services.rates.cache_service import RateCacheService
from app.services.rates.errors import UpstreamTransportError
from app.services.rates.freshness import FreshnessPolicy
from app.services.rates.scheduler import RefreshScheduler

from conftest import SNAPSHOT, SYMBOLS, seed


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TestWarmUp:
    def test_populates_missing_cache(self, service, provider, store):
        RefreshScheduler(service).warm_up()
        assert provider.rates_calls == 1
        assert provider.symbols_calls == 1
        assert store.path(Resource.RATES).exists()
        assert store.path(Resource.SYMBOLS).exists()

    def test_skips_fresh_resources(self, service, provider, store):
        seed(store, Resource.RATES, SNAPSHOT)
        seed(store, Resource.SYMBOLS, SYMBOLS, age=2 * 3600)  # still fresh (24h TTL)
        RefreshScheduler(service).warm_up()
        assert provider.rates_calls == 0
        assert provider.symbols_calls == 0

    def test_failure_is_tolerated(self, service, provider, store, caplog):
        caplog.set_level(logging.INFO, logger="app.rates.scheduler")
        provider.rates_error = UpstreamTransportError("down")
        RefreshScheduler(service).warm_up()
        assert provider.symbols_calls == 1
        assert store.path(Resource.SYMBOLS).exists()
        assert not store.path(Resource.RATES).exists()
        assert "failed to update rates cache" in caplog.text


class TestTickers:
    def _service(self, provider, store, rates_ttl=0.05, symbols_ttl=0.05):
        policy = FreshnessPolicy(
            store, ttls={Resource.RATES: rates_ttl, Resource.SYMBOLS: symbols_ttl}
        )
        return RateCacheService(provider, store, policy)

    def test_tickers_refresh_periodically(self, provider, store):
        scheduler = RefreshScheduler(self._service(provider, store))
        scheduler.start()
        try:
            assert wait_for(lambda: provider.rates_calls >= 3 and provider.symbols_calls >= 3)
        finally:
            scheduler.stop()
        assert not scheduler.running

    def test_failing_ticker_does_not_stop_the_other(self, provider, store):
        provider.rates_error = RuntimeError("unexpected")
        scheduler = RefreshScheduler(self._service(provider, store))
        scheduler.start()
        try:
            assert wait_for(lambda: provider.rates_calls >= 3 and provider.symbols_calls >= 3)
            assert scheduler.running
        finally:
            scheduler.stop()
        assert store.path(Resource.SYMBOLS).exists()
        assert not store.path(Resource.RATES).exists()

    def test_each_refresh_bumps_mtime(self, provider, store):
        scheduler = RefreshScheduler(self._service(provider, store, symbols_ttl=3600))
        scheduler.start()
        try:
            assert wait_for(lambda: store.path(Resource.RATES).exists())
            first = store.mtime(Resource.RATES)
            assert wait_for(lambda: store.mtime(Resource.RATES) > first)
        finally:
            scheduler.stop()

    def test_stop_wakes_long_sleeping_tickers(self, provider, store):
        scheduler = RefreshScheduler(self._service(provider, store, 3600, 3600))
        scheduler.start()
        assert wait_for(lambda: provider.symbols_calls == 1)  # warm-up done
        started = time.monotonic()
        scheduler.stop(timeout=2)
        assert time.monotonic() - started < 2
        assert not scheduler.running
        names = {t.name for t in threading.enumerate()}
        assert not names & {"rates-ticker", "symbols-ticker", "cache-warm-up"}

    def test_start_is_idempotent(self, provider, store):
        scheduler = RefreshScheduler(self._service(provider, store, 3600, 3600))
        scheduler.start()
        try:
            threads = list(scheduler._threads)
            scheduler.start()
            assert scheduler._threads == threads
        finally:
            scheduler.stop()
