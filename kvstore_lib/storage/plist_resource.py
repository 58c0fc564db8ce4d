"""Read-only stores over property lists shipped as application resources.

A resource is addressed by name inside a resource directory
(`<resource_dir>/<name>.plist`). Resources may legitimately be absent, so
`PlistResourceStorage.open` logs and returns None instead of raising.
"""
from __future__ import annotations
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from . import plist_codec
from .base import ReadableDynamicStorage
from .errors import ResourceNotFoundError, StorageError, StorageFormatError, StoragePathError
from .plist_codec import PLIST_SUFFIX

logger = logging.getLogger(__name__)


def resource_path(name: str, resource_dir: str | Path) -> Path:
    if not name or Path(name).name != name or name in (".", ".."):
        raise StoragePathError(f"Unsupported resource name {name!r}", details={"name": name})
    return Path(resource_dir) / f"{name}{PLIST_SUFFIX}"


class PlistResourceStorage(ReadableDynamicStorage):
    def __init__(self, content: Dict[str, Any]) -> None:
        self._plist = content

    @classmethod
    def load(cls, name: str, resource_dir: str | Path) -> "PlistResourceStorage":
        """Load the named resource, raising a StorageError subclass on failure."""
        path = resource_path(name, resource_dir)
        if not path.is_file():
            raise ResourceNotFoundError(
                f"No such plist file in {resource_dir}: {name}{PLIST_SUFFIX}",
                details={"path": str(path)},
            )
        try:
            data = path.read_bytes()
        except OSError as e:
            raise StorageFormatError(f"Failed to read content of {path}: {e}") from e
        content, _ = plist_codec.decode(data)
        return cls(content)

    @classmethod
    def open(cls, name: str, resource_dir: str | Path) -> Optional["PlistResourceStorage"]:
        try:
            return cls.load(name, resource_dir)
        except StorageError as e:
            logger.warning("Failed to load %s%s: %s", name, PLIST_SUFFIX, e.message)
            return None

    def value(self, key: str) -> Any:
        return self._plist.get(key)

    @property
    def count(self) -> int:
        return len(self._plist)

    @property
    def dictionary(self) -> Dict[str, Any]:
        return dict(self._plist)


class PlistResourceCache:
    """Keeps one loaded `PlistResourceStorage` per resource name.

    Failed loads are not cached, so a resource that appears later is
    picked up on the next request.
    """

    def __init__(self, resource_dir: str | Path) -> None:
        self.resource_dir = Path(resource_dir)
        self._lock = threading.Lock()
        self._storages: Dict[str, PlistResourceStorage] = {}

    def storage(self, named: str) -> Optional[PlistResourceStorage]:
        with self._lock:
            cached = self._storages.get(named)
            if cached is not None:
                return cached
            storage = PlistResourceStorage.open(named, self.resource_dir)
            if storage is not None:
                self._storages[named] = storage
            return storage
