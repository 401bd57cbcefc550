"""
Key-value store contract and the two bundled stores.

A store only offers independent single-key operations on UTF-8 strings.
Stores that can also perform a conditional write implement ``put_if``;
the index layer uses it for compare-and-set updates.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from .errors import StoreError

logger = logging.getLogger(__name__)


@runtime_checkable
class KVStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def put(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


@runtime_checkable
class ConditionalKVStore(KVStore, Protocol):
    def put_if(self, key: str, value: str, expected: Optional[str]) -> bool:
        """Write ``value`` only if the current value equals ``expected``.

        ``expected=None`` means the key must be absent. Returns False when
        the condition does not hold and nothing was written.
        """
        ...


class MemoryKVStore:
    """Process-local store backed by a dict."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def put_if(self, key: str, value: str, expected: Optional[str]) -> bool:
        with self._lock:
            if self._data.get(key) != expected:
                return False
            self._data[key] = value
            return True

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)


class JSONFileKVStore:
    """Store persisted as a single JSON object on disk.

    Every write rewrites the whole file through a temporary file and an
    atomic rename, so a crash never leaves a half-written store behind.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.RLock()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
            data = json.loads(text or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read store file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Store file {self.path} does not hold a JSON object")
        return data

    def _save(self, data: dict[str, str]) -> None:
        tmp = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            raise StoreError(f"Cannot write store file {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)

    def put_if(self, key: str, value: str, expected: Optional[str]) -> bool:
        with self._lock:
            data = self._load()
            if data.get(key) != expected:
                return False
            data[key] = value
            self._save(data)
            return True


def open_store(backend: str, path: Optional[Path] = None) -> KVStore:
    if backend == "memory":
        return MemoryKVStore()
    if backend == "file":
        if path is None:
            raise ValueError("file store requires a path")
        logger.info("Using JSON file store at %s", path)
        return JSONFileKVStore(path)
    raise ValueError(f"Unknown store backend: {backend}")
