from __future__ import annotations

"""Error taxonomy for the rate cache subsystem.

Every error carries the HTTP status the API layer answers with, so
``app.core.errors`` can render them without a lookup table.
"""


class RatesError(Exception):
    status_code: int = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidRequestError(RatesError):
    status_code = 400


class UnknownCurrencyError(RatesError):
    status_code = 400

    def __init__(self, code: str):
        super().__init__(f"currency {code} not found")
        self.code = code


class InvalidRateError(RatesError):
    status_code = 500


class AuthError(RatesError):
    status_code = 401


# Upstream ---------------------------------------------------
class UpstreamError(RatesError):
    status_code = 500


class UpstreamTransportError(UpstreamError):
    pass


class UpstreamStatusError(UpstreamError):
    def __init__(self, code: int, url: str = ""):
        super().__init__(f"API returned status {code}")
        self.code = code
        self.url = url


class UpstreamDecodeError(UpstreamError):
    pass


# Cache ------------------------------------------------------
class CacheIOError(RatesError):
    status_code = 500


class CacheNotFoundError(CacheIOError):
    pass
