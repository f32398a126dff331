from __future__ import annotations

"""Provider abstraction and the cached resource names.

The cache subsystem deals with exactly two resources. Each one has a single
canonical file name in the data directory and its own TTL.
"""
from abc import ABC, abstractmethod
from enum import Enum

from app.models.rates import RateSnapshot, SymbolMap


class Resource(str, Enum):
    RATES = "rates"
    SYMBOLS = "symbols"

    @property
    def filename(self) -> str:
        return _FILENAMES[self]


_FILENAMES = {
    Resource.RATES: "rates.json",
    Resource.SYMBOLS: "currencies.json",
}


class RateProvider(ABC):
    @abstractmethod
    def fetch_rates(self) -> RateSnapshot:
        """Return the latest snapshot (units of each currency per 1 USD)."""
        raise NotImplementedError

    @abstractmethod
    def fetch_symbols(self) -> SymbolMap:
        """Return the currency code -> display name mapping."""
        raise NotImplementedError

    def close(self) -> None:
        """Release network resources. No-op by default."""
