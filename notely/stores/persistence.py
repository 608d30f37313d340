"""
Local Persistence.

Durable key/value blobs for the client-side caches. Each key is one JSON
file under the storage directory; writes go to a temporary file first and
are moved into place so a crash never leaves a half-written blob.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from notely.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


class LocalStorage:
    """
    File-backed key/value storage.

    Usage:
        storage = LocalStorage(Path("data"))
        storage.write("notes-storage", {"notes": []})
        storage.read("notes-storage")
        storage.remove("notes-storage")
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not key or "/" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def read(self, key: str) -> Any | None:
        """Return the stored value, or None when absent or unreadable."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log_with_source(
                logger, "store", "warning",
                "Discarding unreadable storage blob",
                key=key, error=str(e),
            )
            return None

    def write(self, key: str, value: Any) -> None:
        """Persist a JSON-serializable value under key."""
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def remove(self, key: str) -> None:
        """Delete the blob for key if present."""
        self._path(key).unlink(missing_ok=True)

    def exists(self, key: str) -> bool:
        return self._path(key).exists()


class TokenStorage:
    """The bearer token, kept under its own plain key."""

    def __init__(self, storage: LocalStorage, key: str = "auth-token") -> None:
        self._storage = storage
        self._key = key

    def get(self) -> str | None:
        token = self._storage.read(self._key)
        return token if isinstance(token, str) and token else None

    def set(self, token: str) -> None:
        self._storage.write(self._key, token)

    def clear(self) -> None:
        self._storage.remove(self._key)
