"""Cloud-synced key-value store.

Delegates every operation to a namespaced `StorageBackend`, by default a
`FileStorageBackend` rooted in a directory kept in sync across devices by
the host's sync client. The quotas of hosted key-value sync services are
enforced as value rejections so that data accepted here is accepted
everywhere it syncs to.
"""
from __future__ import annotations
import logging
from typing import Any, Dict

from .base import DynamicStorage
from .interfaces import StorageProtocol
from .serializer import PickleSerializer
from .values import to_property_value

logger = logging.getLogger(__name__)

NAMESPACE = "ubiquitous"
MAX_KEYS = 1024
MAX_KEY_BYTES = 64
MAX_TOTAL_BYTES = 1024 * 1024


class CloudStorage(DynamicStorage):
    def __init__(self, backend: StorageProtocol, namespace: str = NAMESPACE) -> None:
        self._backend = backend
        self.namespace = namespace
        self._sizer = PickleSerializer()

    def _size_of(self, key: str, value: Any) -> int:
        return len(key.encode("utf-8")) + len(self._sizer.dump(value))

    def _within_quota(self, key: str, value: Any) -> bool:
        if len(key.encode("utf-8")) > MAX_KEY_BYTES:
            logger.warning("Cloud key %r exceeds %d bytes", key, MAX_KEY_BYTES)
            return False
        current = self.dictionary
        if key not in current and len(current) >= MAX_KEYS:
            logger.warning("Cloud store is full (%d keys); rejected %r", MAX_KEYS, key)
            return False
        current[key] = value
        total = sum(self._size_of(k, v) for k, v in current.items())
        if total > MAX_TOTAL_BYTES:
            logger.warning("Cloud store would exceed %d bytes; rejected %r", MAX_TOTAL_BYTES, key)
            return False
        return True

    def value(self, key: str) -> Any:
        try:
            return self._backend.load(self.namespace, key)
        except KeyError:
            return None

    def set(self, key: str, value: Any) -> bool:
        try:
            normalized = to_property_value(value)
        except TypeError as e:
            logger.warning("Rejected cloud value for %r: %s", key, e)
            return False
        if not self._within_quota(key, normalized):
            return False
        try:
            self._backend.save(self.namespace, key, normalized)
        except OSError:
            logger.exception("Failed to save cloud value %r", key)
            return False
        return True

    def remove_value(self, key: str) -> bool:
        try:
            self._backend.delete(self.namespace, key)
        except KeyError:
            pass
        except OSError:
            logger.exception("Failed to remove cloud value %r", key)
            return False
        return True

    def remove_all(self) -> bool:
        ok = True
        for key in list(self._backend.list_keys(self.namespace)):
            ok = self.remove_value(key) and ok
        self.synchronize()
        return ok

    @property
    def count(self) -> int:
        return len(list(self._backend.list_keys(self.namespace)))

    @property
    def dictionary(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for key in list(self._backend.list_keys(self.namespace)):
            try:
                out[key] = self._backend.load(self.namespace, key)
            except KeyError:
                # removed by another device between listing and loading
                continue
        return out

    def synchronize(self) -> None:
        """Hook for backends that batch uploads; file-backed sync needs no action."""
        sync = getattr(self._backend, "synchronize", None)
        if callable(sync):
            sync()

    def close(self) -> None:
        self.synchronize()
