import hmac
import logging

from app.core.errors import error_response
from app.services.rates.errors import AuthError

logger = logging.getLogger("app.auth")

BEARER_PREFIX = "Bearer "
PROTECTED_PREFIX = "/api"


def check_bearer_token(header: str, expected: str) -> None:
    """Validate an ``Authorization: Bearer <token>`` header value, raising AuthError."""
    if not header:
        raise AuthError("Authorization header is required")
    if not header.startswith(BEARER_PREFIX):
        raise AuthError("Authorization header must start with 'Bearer '")
    token = header[len(BEARER_PREFIX):]
    if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        logger.info("rejected request with invalid token")
        raise AuthError("Invalid authorization token")


def is_protected(path: str) -> bool:
    return path == PROTECTED_PREFIX or path.startswith(PROTECTED_PREFIX + "/")


async def bearer_auth_middleware(request, call_next):  # type: ignore
    """Reject unauthenticated ``/api`` requests before any route matching.

    Unknown paths and wrong methods under ``/api`` answer 401 like the real
    endpoints, so route existence is not revealed. The expected token is read
    from ``app.state.settings`` so each app instance checks its own config.
    """
    if is_protected(request.url.path):
        try:
            check_bearer_token(
                request.headers.get("Authorization", ""),
                request.app.state.settings.auth_token,
            )
        except AuthError as e:
            return error_response(e.status_code, str(e))
    return await call_next(request)
