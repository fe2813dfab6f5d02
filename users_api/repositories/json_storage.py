"""
JSON-file persistence adapter for the users collection.

The whole collection lives in one JSON array on disk. Every call re-reads or
re-writes the full document; nothing is cached between requests.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator
import json
import os
import threading

from users_api.core.logging import get_logger

logger = get_logger(__name__)

# One mutex per backing file, shared by every storage instance of the process.
_LOCKS: dict[str, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = str(path.resolve())
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = threading.RLock()
        return lock


class StorageError(Exception):
    """Base exception for backing document failures."""

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.message = message
        self.path = path


class StorageReadError(StorageError):
    """Raised when the document is missing, unreadable or not a JSON array."""


class StorageWriteError(StorageError):
    """Raised when the document cannot be overwritten."""


class JsonUserStorage:
    """Loads and saves the full users collection from a single JSON file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def read(self) -> list[dict]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as exc:
            raise StorageReadError(f"{self.path} does not exist", self.path) from exc
        except (OSError, ValueError) as exc:
            raise StorageReadError(f"cannot read {self.path}: {exc}", self.path) from exc
        if not isinstance(data, list):
            raise StorageReadError(f"{self.path} does not hold a JSON array", self.path)
        return data

    def load(self) -> list[dict]:
        """Like read(), but a failed read degrades to an empty collection."""
        try:
            return self.read()
        except StorageReadError as exc:
            logger.warning("Error reading users file, using empty collection: %s", exc.message)
            return []

    def save(self, users: list[dict]) -> None:
        payload = json.dumps(users, ensure_ascii=False, indent=2)
        tmp = self.path.with_name(f".{self.path.name}.{os.getpid()}.{threading.get_ident()}.tmp")
        try:
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as exc:
            logger.error("Error writing users file %s: %s", self.path, exc)
            try:
                tmp.unlink()
            except OSError:
                pass
            raise StorageWriteError(f"cannot write {self.path}: {exc}", self.path) from exc

    @contextmanager
    def lock(self) -> Iterator[None]:
        """Serialize a load-mutate-save cycle against other requests of this process."""
        with _lock_for(self.path):
            yield
