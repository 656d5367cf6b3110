"""
Short-lived records keyed by a caller-supplied callback id.

The in-memory store is bounded by both age and size. ``S3ResultStore`` survives
restarts and is shared across workers.
"""

import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, Callable, Optional

from roof_estimator.storage.s3 import S3Storage


class ResultStore(ABC):
    @abstractmethod
    def put(self, callback_id: str, record: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def get(self, callback_id: str) -> Optional[dict[str, Any]]:
        raise NotImplementedError


class InMemoryResultStore(ResultStore):
    def __init__(
        self,
        ttl_seconds: int = 3600,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = max(int(ttl_seconds), 1)
        self._max_entries = max(int(max_entries), 1)
        self._clock = clock
        self._items: OrderedDict[str, tuple[float, dict[str, Any]]] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._items)

    def _evict(self, now: float) -> None:
        while self._items:
            key, (stored_at, _) = next(iter(self._items.items()))
            if now - stored_at < self._ttl and len(self._items) <= self._max_entries:
                break
            del self._items[key]

    def put(self, callback_id: str, record: dict[str, Any]) -> None:
        with self._lock:
            now = self._clock()
            self._items.pop(callback_id, None)
            self._items[callback_id] = (now, dict(record))
            self._evict(now)

    def get(self, callback_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            now = self._clock()
            self._evict(now)
            item = self._items.get(callback_id)
            return dict(item[1]) if item else None


class S3ResultStore(ResultStore):
    def __init__(self, storage: S3Storage, prefix: str = "callbacks", ttl_seconds: int = 3600):
        self._storage = storage
        self._prefix = prefix.strip("/")
        self._ttl = max(int(ttl_seconds), 1)

    def _key(self, callback_id: str) -> str:
        return f"{self._prefix}/{callback_id}.json"

    def put(self, callback_id: str, record: dict[str, Any]) -> None:
        self._storage.put_json(
            self._key(callback_id),
            {"stored_at": time.time(), "record": record},
        )

    def get(self, callback_id: str) -> Optional[dict[str, Any]]:
        doc = self._storage.get_json(self._key(callback_id))
        if not doc:
            return None
        if time.time() - float(doc.get("stored_at", 0)) >= self._ttl:
            return None
        record = doc.get("record")
        return record if isinstance(record, dict) else None
