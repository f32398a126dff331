import json
import os
import time
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from app.models.rates import RateSnapshot, SymbolMap
from app.services.rates.base import RateProvider, Resource
from app.services.rates.cache_service import RateCacheService
from app.services.rates.freshness import FreshnessPolicy
from app.services.rates.store import CacheStore

AUTH_TOKEN = "test-token-123"  # nosec - test-only secret

SNAPSHOT = {
    "base": "USD",
    "timestamp": 1700000000,
    "rates": {"USD": 1, "EUR": 0.9, "JPY": 150},
}

SYMBOLS = {
    "USD": "United States Dollar",
    "EUR": "Euro",
    "JPY": "Japanese Yen",
}


class FakeProvider(RateProvider):
    """In-memory provider counting calls; set ``*_error`` to make fetches fail."""

    def __init__(self, snapshot: dict | None = None, symbols: dict | None = None):
        self.snapshot = RateSnapshot.model_validate(snapshot or SNAPSHOT)
        self.symbols = SymbolMap.model_validate(symbols or SYMBOLS)
        self.rates_calls = 0
        self.symbols_calls = 0
        self.rates_error: Exception | None = None
        self.symbols_error: Exception | None = None
        self.closed = False

    def fetch_rates(self) -> RateSnapshot:
        self.rates_calls += 1
        if self.rates_error is not None:
            raise self.rates_error
        return self.snapshot

    def fetch_symbols(self) -> SymbolMap:
        self.symbols_calls += 1
        if self.symbols_error is not None:
            raise self.symbols_error
        return self.symbols

    def close(self) -> None:
        self.closed = True


def seed(store: CacheStore, resource: Resource, payload: dict, age: float = 0) -> Path:
    """Write ``payload`` as the cached file, backdating its mtime by ``age`` seconds."""
    path = store.path(resource)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    if age:
        ts = time.time() - age
        os.utime(path, (ts, ts))
    return path


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    return Settings(
        oxr_app_id="test-app-id",
        auth_token=AUTH_TOKEN,
        data_dir=data_dir,
        enable_background_refresh=False,
    )


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def store(data_dir: Path) -> CacheStore:
    return CacheStore(data_dir)


@pytest.fixture
def service(provider: FakeProvider, store: CacheStore) -> RateCacheService:
    return RateCacheService(provider, store, FreshnessPolicy(store))


@pytest.fixture
def app(settings: Settings, provider: FakeProvider):
    return create_app(settings_override=settings, provider=provider)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {AUTH_TOKEN}"}
