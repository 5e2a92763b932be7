"""
Key-Value Store with Concurrency Control

Durable storage for the cart and the order history. Values are JSON
documents kept in a single file; every read-modify-write happens under a
file lock so two processes sharing a data directory never interleave
writes.

InMemoryStore offers the same interface for tests and for sessions that
should not touch disk.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from filelock import FileLock, Timeout

from ordering_client.core.config import Settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the store cannot be read or written."""


class KeyValueStore(ABC):
    """Interface shared by every store implementation."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under key, or default."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under key."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""

    def health_check(self) -> bool:
        """Verify the store can be read."""
        try:
            self.get("__health__")
            return True
        except StorageError:
            return False


class InMemoryStore(KeyValueStore):
    """Dict-backed store. Values are copied through JSON like the file store."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return json.loads(self._data[key])

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key!r} is not serializable: {e}") from e

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """File-backed store guarded by a FileLock."""

    def __init__(self, path: Path, lock_timeout: float = 10):
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.lock_timeout = lock_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "JsonFileStore":
        return cls(settings.store_path, lock_timeout=settings.store_lock_timeout)

    def _ensure_data_dir(self) -> None:
        """Create data directory if needed."""
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {self.path.parent}")

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Error reading {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed store {self.path}")
            return {}
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)
        tmp_path.replace(self.path)

    def _lock(self) -> FileLock:
        self._ensure_data_dir()
        return FileLock(str(self.lock_path), timeout=self.lock_timeout)

    def get(self, key: str, default: Any = None) -> Any:
        try:
            with self._lock():
                return self._read_all().get(key, default)
        except Timeout as e:
            logger.error(f"Lock timeout reading {key!r} ({self.lock_timeout}s)")
            raise StorageError(f"Lock timeout ({self.lock_timeout}s)") from e

    def set(self, key: str, value: Any) -> None:
        try:
            with self._lock():
                logger.debug(f"Lock acquired for {key!r}")
                data = self._read_all()
                data[key] = value
                self._write_all(data)
            logger.debug(f"Lock released for {key!r}")
        except Timeout as e:
            logger.error(f"Lock timeout writing {key!r} ({self.lock_timeout}s)")
            raise StorageError(f"Lock timeout ({self.lock_timeout}s)") from e
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Could not write {key!r}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            with self._lock():
                data = self._read_all()
                if data.pop(key, None) is not None:
                    self._write_all(data)
        except Timeout as e:
            raise StorageError(f"Lock timeout ({self.lock_timeout}s)") from e
        except OSError as e:
            raise StorageError(f"Could not delete {key!r}: {e}") from e

    def clear_all(self) -> bool:
        """Delete the store and its lock file."""
        try:
            for f in [self.path, self.lock_path]:
                if f.exists():
                    f.unlink()
            logger.info("Key-value store cleared")
            return True
        except OSError as e:
            logger.error(f"Error clearing store: {e}")
            return False
