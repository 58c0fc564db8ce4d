"""Read/write store over a property list file.

The file is loaded once at construction into an in-memory cache. Mutations
update the cache synchronously and schedule a debounced write, so bursts of
changes produce a single disk write per window. Closing the store (or the
store being garbage-collected, or the interpreter exiting) writes the cache
one final time.

The store assumes it is the only writer of its file. Two instances opened
on the same path keep independent caches and overwrite each other's writes.
"""
from __future__ import annotations
import copy
import logging
import threading
import weakref
from pathlib import Path
from typing import Any, Dict, Optional

from . import plist_codec
from .base import DynamicStorage
from .debounce import Debouncer
from .errors import StoragePathError
from .plist_codec import PLIST_SUFFIX, PlistFormat
from .single_file_backend import SingleFileStorage
from .values import to_property_value

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_INTERVAL = 1.0


class PlistFile:
    """A property list file together with the format it is written in."""

    def __init__(self, path: Path) -> None:
        self._file = SingleFileStorage(path)
        self._lock = threading.Lock()
        self.format = PlistFormat.XML

    @property
    def path(self) -> Path:
        return self._file.file_path

    def load(self) -> Dict[str, Any]:
        """Create the file if missing, then decode and return its root mapping."""
        if not self._file.exists():
            logger.info("Creating empty property list at %s", self.path)
            self._file.write(plist_codec.encode_as({}, PlistFormat.XML))
        content, self.format = plist_codec.decode(self._file.read())
        logger.debug("Loaded %d entries from %s (%s)", len(content), self.path, self.format.value)
        return content

    def write(self, content: Dict[str, Any]) -> None:
        with self._lock:
            data, fmt = plist_codec.encode(content, self.format)
            if fmt is not self.format:
                logger.info("Switching %s from %s to %s format", self.path, self.format.value, fmt.value)
                self.format = fmt
            self._file.write(data)


def validate_plist_path(path: str | Path) -> Path:
    p = Path(path)
    if str(path).endswith(("/", "\\")) or p.is_dir():
        raise StoragePathError(f"{path} is not a file path", details={"path": str(path)})
    if p.suffix != PLIST_SUFFIX:
        raise StoragePathError(
            f"{path} does not have the {PLIST_SUFFIX} extension",
            details={"path": str(path), "suffix": p.suffix},
        )
    return p


def _dispose(debouncer: Debouncer, plist: PlistFile, cache: Dict[str, Any]) -> None:
    # Runs at close, collection or exit; nobody is left to report errors to
    debouncer.cancel()
    try:
        plist.write(dict(cache))
    except Exception:
        logger.exception("Final write of %s failed", plist.path)


class PlistStorage(DynamicStorage):
    """Dynamic store backed by a `.plist` file.

    Raises StoragePathError for a path that is not a `.plist` file and
    StorageFormatError when existing content cannot be decoded into a
    mapping.
    """

    def __init__(self, path: str | Path, debounce_interval: float = DEFAULT_DEBOUNCE_INTERVAL) -> None:
        self._plist = PlistFile(validate_plist_path(path))
        self._cache: Dict[str, Any] = self._plist.load()
        self._lock = threading.RLock()
        self._debouncer = Debouncer(debounce_interval, self._plist.write)
        # Must not reference self, otherwise the store could never be collected
        self._finalizer = weakref.finalize(self, _dispose, self._debouncer, self._plist, self._cache)

    @property
    def path(self) -> Path:
        return self._plist.path

    @property
    def format(self) -> PlistFormat:
        return self._plist.format

    def _schedule_write(self) -> None:
        # Deep snapshot: the timer thread must not share containers with the cache
        self._debouncer.schedule(copy.deepcopy(self._cache))

    def _rejected_after_close(self, key: Optional[str]) -> bool:
        if self.closed:
            logger.warning("Ignored change to %r in closed store %s", key, self.path)
            return True
        return False

    def value(self, key: str) -> Any:
        with self._lock:
            return copy.deepcopy(self._cache.get(key))

    def set(self, key: str, value: Any) -> bool:
        if self._rejected_after_close(key):
            return False
        try:
            normalized = to_property_value(value)
        except TypeError as e:
            logger.warning("Rejected value for %r in %s: %s", key, self.path, e)
            return False
        with self._lock:
            self._cache[key] = normalized
            self._schedule_write()
        return True

    def remove_value(self, key: str) -> bool:
        if self._rejected_after_close(key):
            return False
        with self._lock:
            if self._cache.pop(key, None) is not None:
                self._schedule_write()
        return True

    def remove_all(self) -> bool:
        if self._rejected_after_close(None):
            return False
        with self._lock:
            self._cache.clear()
            self._schedule_write()
        return True

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._cache)

    @property
    def dictionary(self) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._cache)

    def flush(self) -> bool:
        """Write pending changes now instead of waiting for the window.

        Returns False when nothing was pending. Unlike background writes,
        an unsupported-format failure is raised to the caller.
        """
        return self._debouncer.flush()

    def close(self) -> None:
        """Write the cache one final time. Safe to call more than once.

        Mutations on a closed store are logged and return False.
        """
        self._finalizer()

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def __enter__(self) -> "PlistStorage":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None
