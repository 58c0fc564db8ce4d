"""Read-only view over several stores.

Lookups resolve to the first store that has the key. `count` and
`dictionary` accumulate over all stores without resolving duplicates:
`count` adds up each store's own count, and `dictionary` is folded left to
right so later stores overwrite earlier ones. A key present in two stores
is therefore counted twice, and `dictionary[key]` can differ from
`value(key)`.
"""
from typing import Any, Dict, List, Sequence

from .base import ReadableDynamicStorage
from .interfaces import ReadableDynamicStorageProtocol


class MergedStorage(ReadableDynamicStorage):
    def __init__(self, storages: Sequence[ReadableDynamicStorageProtocol]) -> None:
        self._storages: List[ReadableDynamicStorageProtocol] = list(storages)

    @property
    def storages(self) -> List[ReadableDynamicStorageProtocol]:
        return list(self._storages)

    def value(self, key: str) -> Any:
        for storage in self._storages:
            found = storage.value(key)
            if found is not None:
                return found
        return None

    @property
    def count(self) -> int:
        return sum(storage.count for storage in self._storages)

    @property
    def dictionary(self) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for storage in self._storages:
            merged.update(storage.dictionary)
        return merged
