from __future__ import annotations

"""File-backed store for the cached resources.

Each resource lives in one canonical JSON file inside the data directory. The
file modification time is the freshness clock, so reads must never touch it.
Writes go to a temp file in the same directory followed by ``os.replace``;
concurrent readers see either the old or the new content, never a torn file.
"""
import logging
import os
import tempfile
from pathlib import Path
from typing import Tuple, Union

from .base import Resource
from .errors import CacheIOError, CacheNotFoundError

logger = logging.getLogger("app.rates.store")

DATA_DIR_MODE = 0o755


class CacheStore:
    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        try:
            self.data_dir.mkdir(mode=DATA_DIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise CacheIOError(f"cannot create data directory {self.data_dir}: {e}") from e

    def path(self, resource: Resource) -> Path:
        return self.data_dir / resource.filename

    def load(self, resource: Resource) -> Tuple[bytes, float]:
        p = self.path(resource)
        try:
            with p.open("rb") as f:
                data = f.read()
                mtime = os.fstat(f.fileno()).st_mtime
        except FileNotFoundError as e:
            raise CacheNotFoundError(f"{p} does not exist") from e
        except OSError as e:
            raise CacheIOError(f"failed to read {p}: {e}") from e
        return data, mtime

    def mtime(self, resource: Resource) -> float:
        p = self.path(resource)
        try:
            return p.stat().st_mtime
        except FileNotFoundError as e:
            raise CacheNotFoundError(f"{p} does not exist") from e
        except OSError as e:
            raise CacheIOError(f"failed to stat {p}: {e}") from e

    def store(self, resource: Resource, data: bytes) -> None:
        p = self.path(resource)
        try:
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{p.stem}.", suffix=".json.tmp", dir=str(self.data_dir)
            )
        except OSError as e:
            raise CacheIOError(f"failed to create temp file for {p}: {e}") from e
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            # mkstemp creates 0600; the cache files are world readable
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, p)
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise CacheIOError(f"failed to write {p}: {e}") from e
        logger.debug("wrote %s (%d bytes)", p, len(data))
