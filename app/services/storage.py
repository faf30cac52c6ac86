"""
Local key-value storage.

A small string-to-string store with ``localStorage`` semantics backs the
filter presets, form drafts and session state. Three backends exist: a
JSON file on disk (default), Redis, and an in-process dict for tests.
Writes are whole-value replacements; there is no locking across
processes, so concurrent writers follow last-write-wins.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from redis import Redis
from redis.exceptions import RedisError

from app.config.settings import Settings
from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class LocalStorage:
    """Abstract storage interface"""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError

    def keys(self) -> List[str]:
        raise NotImplementedError

    def get_json(self, key: str, default: Any = None) -> Any:
        """Decode a JSON value; corrupt entries read as ``default``."""
        raw = self.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring corrupt JSON stored under '{key}'")
            return default

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value, default=str))

    def namespaced(self, prefix: str) -> "NamespacedStorage":
        return NamespacedStorage(self, prefix)


class MemoryStorage(LocalStorage):
    """In-process storage for development/testing"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data)


class FileStorage(LocalStorage):
    """
    JSON file storage.

    The whole store lives in one JSON object on disk and is rewritten
    atomically (temp file + rename) on every change.
    """

    FILENAME = "local_storage.json"

    def __init__(self, directory: str):
        self.path = Path(directory) / self.FILENAME
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except ValueError:
            logger.error(f"Storage file {self.path} is corrupt, starting empty")
            return {}
        except OSError as e:
            raise StorageError(f"Cannot read storage file: {e}", operation="read", key=str(self.path))
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except OSError as e:
            raise StorageError(f"Cannot write storage file: {e}", operation="write", key=str(self.path))

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if data.pop(key, None) is not None:
                self._write(data)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._read())


class RedisStorage(LocalStorage):
    """Redis storage, every key prefixed with ``key_prefix``"""

    def __init__(self, client: Redis, key_prefix: str = ""):
        self.client = client
        self.key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get_item(self, key: str) -> Optional[str]:
        try:
            return self.client.get(self._key(key))
        except RedisError as e:
            raise StorageError(f"Redis get failed: {e}", operation="get", key=key)

    def set_item(self, key: str, value: str) -> None:
        try:
            self.client.set(self._key(key), value)
        except RedisError as e:
            raise StorageError(f"Redis set failed: {e}", operation="set", key=key)

    def remove_item(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except RedisError as e:
            raise StorageError(f"Redis delete failed: {e}", operation="delete", key=key)

    def keys(self) -> List[str]:
        try:
            return [
                key[len(self.key_prefix):]
                for key in self.client.scan_iter(match=f"{self.key_prefix}*")
            ]
        except RedisError as e:
            raise StorageError(f"Redis scan failed: {e}", operation="keys")


class NamespacedStorage(LocalStorage):
    """View of another storage with every key prefixed"""

    def __init__(self, inner: LocalStorage, prefix: str):
        self.inner = inner
        self.prefix = prefix

    def get_item(self, key: str) -> Optional[str]:
        return self.inner.get_item(self.prefix + key)

    def set_item(self, key: str, value: str) -> None:
        self.inner.set_item(self.prefix + key, value)

    def remove_item(self, key: str) -> None:
        self.inner.remove_item(self.prefix + key)

    def keys(self) -> List[str]:
        return [key[len(self.prefix):] for key in self.inner.keys() if key.startswith(self.prefix)]


def create_storage(config: Settings) -> LocalStorage:
    """Build the storage backend selected by ``STORAGE_BACKEND``."""
    backend = config.STORAGE_BACKEND
    if backend == "memory":
        logger.info("Using in-memory storage")
        return MemoryStorage()
    if backend == "redis":
        from app.config.redis import get_redis_client

        logger.info("Using Redis storage")
        return RedisStorage(get_redis_client(config.get_redis_url()), config.REDIS_KEY_PREFIX)

    logger.info(f"Using file storage in {config.STORAGE_DIR}")
    return FileStorage(config.STORAGE_DIR)


__all__ = [
    "LocalStorage",
    "MemoryStorage",
    "FileStorage",
    "RedisStorage",
    "NamespacedStorage",
    "create_storage",
]
