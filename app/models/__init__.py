"""Pydantic models for the currency rates API."""

from .rates import RateSnapshot, SymbolMap
from .conversion import ConversionRequest, ConversionResult

__all__ = [
    "RateSnapshot",
    "SymbolMap",
    "ConversionRequest",
    "ConversionResult",
]
