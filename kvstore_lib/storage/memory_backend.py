"""Simple memory-backed storage

Values live in a process-local dict and are lost together with the
instance. Any Python object may be stored; setting None removes the key.
"""
from threading import RLock
from typing import Any, Dict

from .base import DynamicStorage


class MemoryStorage(DynamicStorage):
    def __init__(self):
        self._lock = RLock()
        self._store: Dict[str, Any] = {}

    def value(self, key: str) -> Any:
        with self._lock:
            return self._store.get(key)

    def set(self, key: str, value: Any) -> bool:
        # None is absence; storing it would make count and has_value disagree
        if value is None:
            return self.remove_value(key)
        with self._lock:
            self._store[key] = value
        return True

    def remove_value(self, key: str) -> bool:
        with self._lock:
            self._store.pop(key, None)
        return True

    def remove_all(self) -> bool:
        with self._lock:
            self._store.clear()
        return True

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._store)

    @property
    def dictionary(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._store)
