"""User preferences store.

`PreferencesDomain` is the persistence primitive: one YAML document per
application identifier, re-read and rewritten on every call so separate
instances over the same domain always observe each other's writes.
`PreferencesStorage` exposes a domain through the dynamic store contract
without any caching of its own.
"""
from __future__ import annotations
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterable

from .base import DynamicStorage
from .serializer import Serializer, YAMLSerializer
from .single_file_backend import SingleFileStorage
from .values import to_property_value

logger = logging.getLogger(__name__)

PREFERENCES_DIR = "preferences"


class PreferencesDomain:
    def __init__(self, path: str | Path, serializer: Serializer | None = None) -> None:
        self._file = SingleFileStorage(path)
        self._serializer = serializer or YAMLSerializer()
        self._lock = threading.RLock()

    @classmethod
    def for_identifier(cls, identifier: str, data_dir: str | Path) -> "PreferencesDomain":
        return cls(Path(data_dir) / PREFERENCES_DIR / f"{identifier}.yml")

    @property
    def path(self) -> Path:
        return self._file.file_path

    def _read(self) -> Dict[str, Any]:
        if not self._file.exists():
            return {}
        try:
            data = self._serializer.load(self._file.read())
        except Exception:
            logger.exception("Failed to read preferences from %s; treating as empty", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Preferences file %s does not contain a mapping; treating as empty", self.path)
            return {}
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        self._file.write(self._serializer.dump(data))

    def object_for_key(self, key: str) -> Any:
        with self._lock:
            return self._read().get(key)

    def set_object(self, key: str, value: Any) -> None:
        """Store `value`; raises TypeError for non property-list values."""
        normalized = to_property_value(value)
        with self._lock:
            data = self._read()
            data[key] = normalized
            self._write(data)

    def remove_objects(self, keys: Iterable[str]) -> None:
        with self._lock:
            data = self._read()
            changed = False
            for key in keys:
                if key in data:
                    del data[key]
                    changed = True
            if changed:
                self._write(data)

    def dictionary_representation(self) -> Dict[str, Any]:
        with self._lock:
            return self._read()


class PreferencesStorage(DynamicStorage):
    def __init__(self, domain: PreferencesDomain) -> None:
        self._domain = domain

    def value(self, key: str) -> Any:
        return self._domain.object_for_key(key)

    def set(self, key: str, value: Any) -> bool:
        try:
            self._domain.set_object(key, value)
        except TypeError as e:
            logger.warning("Rejected preference value for %r: %s", key, e)
            return False
        except OSError:
            logger.exception("Failed to write preference %r", key)
            return False
        return True

    def remove_value(self, key: str) -> bool:
        try:
            self._domain.remove_objects((key,))
        except OSError:
            logger.exception("Failed to remove preference %r", key)
            return False
        return True

    def remove_all(self) -> bool:
        try:
            self._domain.remove_objects(list(self.dictionary.keys()))
        except OSError:
            logger.exception("Failed to remove preferences from %s", self._domain.path)
            return False
        return True

    @property
    def count(self) -> int:
        return len(self.dictionary)

    @property
    def dictionary(self) -> Dict[str, Any]:
        return self._domain.dictionary_representation()
