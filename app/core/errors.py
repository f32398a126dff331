from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from app.services.rates.errors import RatesError, UpstreamError

logger = logging.getLogger("app.errors")


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


def http_error_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"No route for {request.method} {request.url.path}"
    else:
        message = str(exc.detail)
    return error_response(exc.status_code, message, getattr(exc, "headers", None))


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    logger.debug("invalid request body: %s", exc.errors())
    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body")


def rates_error_handler(request: Request, exc: RatesError):  # type: ignore
    if isinstance(exc, UpstreamError):
        logger.warning("upstream failure: %s", exc)
    elif exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc)
    return error_response(exc.status_code, str(exc))


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred."
    )
