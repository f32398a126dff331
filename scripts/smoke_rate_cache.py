"""Smoke script for the file rate cache against the live provider.

Demonstrates:
 1. First access with an empty data dir triggers a provider fetch and writes rates.json.
 2. Subsequent access within TTL is served from disk (mtime unchanged).
 3. Backdating the file mtime past the TTL forces a refresh on the next read.

Requires OXR_APP_ID (and AUTH_TOKEN, for settings validation) in the environment.
NOTE: This is a lightweight diagnostic and not a formal test.
"""

import os
import sys
import tempfile
import time
from pprint import pprint

from app.core.config import Settings
from app.main import build_rate_service
from app.models.conversion import ConversionRequest
from app.services.rates.base import Resource


def run():
    with tempfile.TemporaryDirectory() as d:
        svc = build_rate_service(Settings(data_dir=d, enable_background_refresh=False))
        out = {}

        snap = svc.get_rates()
        out["initial"] = {
            "timestamp": snap.timestamp,
            "currencies": len(snap.rates),
            "mtime": svc.store.mtime(Resource.RATES),
        }

        svc.get_rates()
        out["second"] = {"mtime": svc.store.mtime(Resource.RATES)}

        # Force refresh by backdating mtime beyond TTL
        stale = time.time() - svc.freshness.ttl(Resource.RATES) - 5
        os.utime(svc.store.path(Resource.RATES), (stale, stale))
        svc.get_rates()
        out["forced_refresh"] = {"mtime": svc.store.mtime(Resource.RATES)}

        res = svc.convert(
            ConversionRequest(from_currency="EUR", to_currency="JPY", amount=100)
        )
        out["eur_jpy_100"] = {"result": res.result, "rate": res.rate}

        svc.provider.close()
        pprint(out)


if __name__ == "__main__":
    sys.path.append(os.getcwd())
    run()
