from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ConversionRequest(BaseModel):
    # No string or bool coercion; infinities and NaN fail as a bad body.
    model_config = ConfigDict(strict=True, allow_inf_nan=False)

    # Presence and positivity are checked by the rate service so the
    # error message matches for every bad combination.
    from_currency: str = Field("", description="Source currency code (e.g. EUR)")
    to_currency: str = Field("", description="Target currency code (e.g. JPY)")
    amount: float = Field(0, description="Amount in the source currency")


class ConversionResult(BaseModel):
    success: bool = True
    from_currency: str
    to_currency: str
    amount: float
    result: float
    rate: float
    timestamp: int
