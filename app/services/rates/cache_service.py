from __future__ import annotations

import logging
import math
from typing import Callable, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.models.conversion import ConversionRequest, ConversionResult
from app.models.rates import RateSnapshot, SymbolMap
from .base import RateProvider, Resource
from .conversion import BASE_CURRENCY, convert_amount
from .errors import CacheIOError, InvalidRequestError, UnknownCurrencyError
from .freshness import FreshnessPolicy
from .store import CacheStore

"""Request-path facade over the file cache (read-through, write-through).

Design:
    - Each read consults the freshness policy; a fresh, decodable file is
      served as-is.
    - Otherwise the provider is called synchronously and the result written
      back. A failed write is logged and the live data still returned.
    - Provider errors propagate unchanged.
    - There is no single-flight: concurrent misses may each fetch, the last
      writer wins. The background scheduler keeps the cache warm so the
      request path rarely fetches at all.
"""

logger = logging.getLogger("app.rates.cache")

M = TypeVar("M", bound=BaseModel)

INVALID_CONVERSION_MESSAGE = (
    "from_currency, to_currency are required and amount must be greater than 0"
)
RESULT_OUT_OF_RANGE_MESSAGE = "conversion result is out of range"


def encode(payload: BaseModel) -> bytes:
    return payload.model_dump_json(indent=2).encode("utf-8")


class RateCacheService:
    def __init__(
        self,
        provider: RateProvider,
        store: CacheStore,
        freshness: FreshnessPolicy,
    ):
        self.provider = provider
        self.store = store
        self.freshness = freshness

    # Internal --------------------------------------------------
    def _fetcher(self, resource: Resource) -> Callable[[], BaseModel]:
        if resource is Resource.RATES:
            return self.provider.fetch_rates
        return self.provider.fetch_symbols

    def _load_cached(self, resource: Resource, model: Type[M]) -> M | None:
        if not self.freshness.is_fresh(resource):
            return None
        try:
            data, _ = self.store.load(resource)
            return model.model_validate_json(data)
        except CacheIOError as e:
            logger.warning("cache read failed for %s: %s", resource.value, e)
        except ValidationError as e:
            logger.warning("cache file for %s is malformed: %s", resource.value, e)
        return None

    def _write_through(self, resource: Resource, payload: BaseModel) -> None:
        try:
            self.store.store(resource, encode(payload))
        except CacheIOError as e:
            logger.warning("failed to cache %s: %s", resource.value, e)

    def _get(self, resource: Resource, model: Type[M]) -> M:
        cached = self._load_cached(resource, model)
        if cached is not None:
            return cached
        logger.info("%s cache stale or missing, fetching from provider", resource.value)
        fresh = self._fetcher(resource)()
        self._write_through(resource, fresh)
        return fresh  # type: ignore[return-value]

    # Public API -----------------------------------------------
    def get_symbols(self) -> SymbolMap:
        return self._get(Resource.SYMBOLS, SymbolMap)

    def get_rates(self) -> RateSnapshot:
        return self._get(Resource.RATES, RateSnapshot)

    def refresh(self, resource: Resource) -> BaseModel:
        """Fetch unconditionally and overwrite the cache; errors propagate."""
        payload = self._fetcher(resource)()
        self.store.store(resource, encode(payload))
        return payload

    def convert(self, req: ConversionRequest) -> ConversionResult:
        if (
            not req.from_currency
            or not req.to_currency
            or not math.isfinite(req.amount)
            or not req.amount > 0
        ):
            raise InvalidRequestError(INVALID_CONVERSION_MESSAGE)

        snapshot = self.get_rates()
        for code in (req.from_currency, req.to_currency):
            if code not in snapshot.rates and code != BASE_CURRENCY:
                raise UnknownCurrencyError(code)

        conv = convert_amount(
            req.from_currency, req.to_currency, req.amount, snapshot.rates
        )
        if not (math.isfinite(conv.result) and math.isfinite(conv.rate)):
            raise InvalidRequestError(RESULT_OUT_OF_RANGE_MESSAGE)
        return ConversionResult(
            from_currency=req.from_currency,
            to_currency=req.to_currency,
            amount=req.amount,
            result=conv.result,
            rate=conv.rate,
            timestamp=snapshot.timestamp,
        )
