from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from app.models.conversion import ConversionRequest, ConversionResult
from app.services.rates.cache_service import RateCacheService

"""Currency endpoints backed by the file rate cache.

Endpoints (mounted under /api, bearer token required):
    - GET  /currencies -> {"success": true, "symbols": {CODE: NAME}}
    - GET  /rates      -> latest USD based snapshot, verbatim
    - POST /convert    -> {from_currency, to_currency, amount} conversion

Handlers are plain ``def`` so the blocking cache / provider I/O runs in the
threadpool instead of the event loop.
"""

router = APIRouter(tags=["rates"])


def get_rate_service(request: Request) -> RateCacheService:
    return request.app.state.rate_service


@router.get("/currencies", summary="List currency codes and display names")
def list_currencies(
    svc: RateCacheService = Depends(get_rate_service),
) -> Dict[str, Any]:
    symbols = svc.get_symbols()
    return {"success": True, "symbols": symbols.model_dump()}


@router.get("/rates", summary="Latest exchange rates (base USD)")
def get_rates(svc: RateCacheService = Depends(get_rate_service)) -> Dict[str, Any]:
    return svc.get_rates().model_dump()


@router.post(
    "/convert",
    response_model=ConversionResult,
    summary="Convert an amount between two currencies",
)
def convert(
    payload: ConversionRequest,
    svc: RateCacheService = Depends(get_rate_service),
) -> ConversionResult:
    return svc.convert(payload)
