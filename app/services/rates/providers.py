from __future__ import annotations

"""Open Exchange Rates client.

Two resources are consumed:
    - ``latest.json`` (authenticated with the app id, base pinned to USD)
    - ``currencies.json`` (public, called without the app id)

Payloads are returned as parsed, without filtering or normalization.
"""
import logging
import threading
from typing import Optional

import httpx
from pydantic import ValidationError

from app.models.rates import RateSnapshot, SymbolMap
from app.services.http_client import get_json
from .base import RateProvider
from .conversion import BASE_CURRENCY
from .errors import UpstreamDecodeError

logger = logging.getLogger("app.rates.provider")

DEFAULT_BASE_URL = "https://openexchangerates.org/api"


class OpenExchangeRatesProvider(RateProvider):
    def __init__(
        self,
        app_id: str,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = 10.0,
        retries: int = 2,
        backoff: float = 0.5,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not app_id:
            raise ValueError("app_id is required")
        self._app_id = app_id
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retries = retries
        self._backoff = backoff
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._client_lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client; a closed client is replaced."""
        with self._client_lock:
            if self._client is None or self._client.is_closed:
                self._client = httpx.Client(
                    timeout=self._timeout, transport=self._transport
                )
            return self._client

    def _get(self, path: str, params: Optional[dict] = None):
        return get_json(
            self._get_client(),
            f"{self._base_url}/{path}",
            params=params,
            retries=self._retries,
            backoff=self._backoff,
        )

    def fetch_rates(self) -> RateSnapshot:  # type: ignore[override]
        data = self._get(
            "latest.json", {"app_id": self._app_id, "base": BASE_CURRENCY}
        )
        try:
            snapshot = RateSnapshot.model_validate(data)
        except ValidationError as e:
            raise UpstreamDecodeError(f"unexpected rates payload: {e}") from e
        logger.debug(
            "fetched %d rates (timestamp=%s)", len(snapshot.rates), snapshot.timestamp
        )
        return snapshot

    def fetch_symbols(self) -> SymbolMap:  # type: ignore[override]
        data = self._get("currencies.json")
        try:
            symbols = SymbolMap.model_validate(data)
        except ValidationError as e:
            raise UpstreamDecodeError(f"unexpected currencies payload: {e}") from e
        logger.debug("fetched %d currency symbols", len(symbols))
        return symbols

    def close(self) -> None:
        """Close the HTTP client; the next fetch opens a new one."""
        with self._client_lock:
            if self._client is not None:
                self._client.close()
