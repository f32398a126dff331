from __future__ import annotations

"""Small JSON-over-HTTP helper with retry.

Wraps a shared ``httpx.Client``. Transport failures (connect errors, timeouts)
are retried with exponential backoff; a non-2xx status or an undecodable body
fails immediately since repeating the call would not change the answer.
"""
import logging
import time
from typing import Any, Dict, Optional

import httpx

from app.services.rates.errors import (
    UpstreamDecodeError,
    UpstreamStatusError,
    UpstreamTransportError,
)

logger = logging.getLogger("app.http")


def get_json(
    client: httpx.Client,
    url: str,
    *,
    params: Optional[Dict[str, str]] = None,
    retries: int = 2,
    backoff: float = 0.5,
) -> Any:
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            resp = client.get(url, params=params)
        except httpx.TransportError as e:  # includes timeouts
            last_err = e
            if attempt == retries:
                break
            logger.debug("GET %s failed (%s), retrying", url, e)
            time.sleep(backoff * (2**attempt))
            continue
        if not resp.is_success:
            raise UpstreamStatusError(resp.status_code, url)
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamDecodeError(f"failed to parse API response: {e}") from e
    raise UpstreamTransportError(f"failed to fetch {url}: {last_err}") from last_err
