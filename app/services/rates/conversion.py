from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .errors import InvalidRateError, UnknownCurrencyError

"""Cross-rate conversion over a USD based rate table.

rates[C] is the number of units of C per 1 USD. USD is treated as an implicit
1.0 when the table does not list it. No rounding is applied: results carry
native float precision.
"""

BASE_CURRENCY = "USD"


@dataclass(frozen=True)
class Conversion:
    result: float
    rate: float


def _rate_for(code: str, rates: Mapping[str, float]) -> float:
    rate = rates.get(code)
    if rate is None:
        if code == BASE_CURRENCY:
            return 1.0
        raise UnknownCurrencyError(code)
    if rate <= 0:
        raise InvalidRateError(f"invalid rate {rate!r} for currency {code}")
    return rate


def convert_amount(
    from_currency: str, to_currency: str, amount: float, rates: Mapping[str, float]
) -> Conversion:
    from_rate = _rate_for(from_currency, rates)
    to_rate = _rate_for(to_currency, rates)

    if from_currency == BASE_CURRENCY:
        return Conversion(result=amount * to_rate, rate=to_rate)
    if to_currency == BASE_CURRENCY:
        return Conversion(result=amount / from_rate, rate=1 / from_rate)
    # from -> USD -> to
    usd_amount = amount / from_rate
    return Conversion(result=usd_amount * to_rate, rate=to_rate / from_rate)
