"""
JSON record storage for a single entity kind.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Optional

from .errors import StoreError
from .kv import KVStore


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class RecordStore:
    def __init__(self, store: KVStore, kind: str):
        self.store = store
        self.kind = kind

    def get(self, key: str) -> Optional[dict[str, Any]]:
        raw = self.store.get(key)
        if raw is None:
            return None
        try:
            record = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreError(f"Stored {self.kind} at {key} is not valid JSON") from e
        if not isinstance(record, dict):
            raise StoreError(f"Stored {self.kind} at {key} is not an object")
        return record

    def put(self, key: str, record: dict[str, Any]) -> None:
        self.store.put(key, json.dumps(record))

    def delete(self, key: str) -> None:
        self.store.delete(key)
