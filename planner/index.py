"""
Id lists persisted as a JSON array under a single key.

Every mutation is read, modify in memory, rewrite. Against a plain store two
writers of the same key race and the later write silently wins. When the
store supports ``put_if`` each mutation becomes a compare-and-set loop that
retries on conflict and raises StoreError once the retries run out.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Optional

from .errors import StoreError
from .kv import ConditionalKVStore, KVStore

logger = logging.getLogger(__name__)

DEFAULT_CAS_RETRIES = 5


def _decode(key: str, raw: Optional[str]) -> list[str]:
    if raw is None:
        return []
    try:
        ids = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StoreError(f"Index {key} is not valid JSON") from e
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        raise StoreError(f"Index {key} is not a list of ids")
    return ids


class IndexList:
    def __init__(self, store: KVStore, cas_retries: int = DEFAULT_CAS_RETRIES):
        self.store = store
        self.cas_retries = max(1, cas_retries)

    def read(self, key: str) -> list[str]:
        return _decode(key, self.store.get(key))

    def append(self, key: str, item_id: str) -> None:
        """Add ``item_id`` at the end. Callers must not append an id twice."""

        def mutate(ids: list[str]) -> bool:
            ids.append(item_id)
            return True

        self._update(key, mutate)

    def remove_first(self, key: str, item_id: str) -> bool:
        removed = False

        def mutate(ids: list[str]) -> bool:
            nonlocal removed
            if item_id not in ids:
                removed = False
                return False
            ids.remove(item_id)
            removed = True
            return True

        self._update(key, mutate)
        return removed

    def drop(self, key: str) -> None:
        self.store.delete(key)

    def _update(self, key: str, mutate: Callable[[list[str]], bool]) -> None:
        if not isinstance(self.store, ConditionalKVStore):
            ids = self.read(key)
            if mutate(ids):
                self.store.put(key, json.dumps(ids))
            return

        for attempt in range(1, self.cas_retries + 1):
            raw = self.store.get(key)
            ids = _decode(key, raw)
            if not mutate(ids):
                return
            if self.store.put_if(key, json.dumps(ids), raw):
                return
            logger.debug("Index %s changed concurrently, retry %d/%d", key, attempt, self.cas_retries)

        raise StoreError(f"Index {key} kept changing; gave up after {self.cas_retries} attempts")
