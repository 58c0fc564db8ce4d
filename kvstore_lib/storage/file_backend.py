"""Directory-backed namespaced storage backend.

Each entry is one file, `<data_dir>/<namespace>/<quoted key>.bin`, holding
the serialized value. Keys and namespaces are percent-quoted so any text
maps to a single file name and comes back unchanged from `list_keys`. One
file per entry keeps concurrent writers from different devices from
clobbering unrelated keys when the directory is synced.
"""
from __future__ import annotations
from pathlib import Path
from typing import Any, List
from urllib.parse import quote, unquote

from .base import StorageBackend
from .serializer import PickleSerializer, Serializer
from .single_file_backend import SingleFileStorage

SUFFIX = ".bin"


class FileStorageBackend(StorageBackend):
    def __init__(self, data_dir: str | Path = "./data", serializer: Serializer | None = None) -> None:
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.serializer = serializer or PickleSerializer()

    def _ns_dir(self, namespace: str) -> Path:
        return self.data_dir / quote(namespace, safe="")

    def _entry(self, namespace: str, key: str) -> SingleFileStorage:
        return SingleFileStorage(self._ns_dir(namespace) / f"{quote(key, safe='')}{SUFFIX}")

    def save(self, namespace: str, key: str, value: Any) -> None:
        self._entry(namespace, key).write(self.serializer.dump(value))

    def load(self, namespace: str, key: str) -> Any:
        entry = self._entry(namespace, key)
        if not entry.exists():
            raise KeyError(key)
        return self.serializer.load(entry.read())

    def delete(self, namespace: str, key: str) -> None:
        try:
            self._entry(namespace, key).file_path.unlink()
        except FileNotFoundError:
            raise KeyError(key) from None

    def list_keys(self, namespace: str) -> List[str]:
        ns = self._ns_dir(namespace)
        if not ns.is_dir():
            return []
        # in-flight `.bin.tmp` files do not match the glob
        return sorted(unquote(p.name[: -len(SUFFIX)]) for p in ns.glob(f"*{SUFFIX}") if p.is_file())

    def exists(self, namespace: str, key: str) -> bool:
        return self._entry(namespace, key).exists()
