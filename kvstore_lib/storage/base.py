"""Storage interface definitions.

Two layers live here:

- `StorageBackend`: the namespaced persistence primitive (`save`/`load`/
  `delete`/`list_keys`/`exists`) that media such as a synced directory are
  exposed through.
- The store contracts callers depend on: `ReadableStorage`,
  `ReadableTypedStorage`, `ReadableDynamicStorage`, `Storage`,
  `TypedStorage` and `DynamicStorage`. A backend implements the subset it
  can support; conveniences such as `pop_value` and `set_values` are
  implemented once here in terms of the abstract operations.

Store operations never raise for missing keys or kind mismatches. Getters
return None, mutators return False when the backend rejects the request.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Optional

from . import values as v


class StorageBackend(ABC):
    """Abstract namespaced storage primitive.

    Implementations must be thread-safe if used concurrently.
    """

    @abstractmethod
    def save(self, namespace: str, key: str, value: Any) -> None:
        """Save `value` under `namespace` and `key`.

        Implementations should create directories as needed and ensure
        atomic writes when possible.
        """

    @abstractmethod
    def load(self, namespace: str, key: str) -> Any:
        """Load and return object stored under `namespace`/`key`.

        Should raise `KeyError` if the key does not exist.
        """

    @abstractmethod
    def delete(self, namespace: str, key: str) -> None:
        """Delete the stored object. Raise `KeyError` if not found."""

    @abstractmethod
    def list_keys(self, namespace: str) -> Iterable[str]:
        """Return an iterable of keys stored in `namespace`."""

    @abstractmethod
    def exists(self, namespace: str, key: str) -> bool:
        """Return True if `key` exists under `namespace`."""


class ReadableStorage(ABC):
    """Common way to inspect stores of any kind."""

    @property
    @abstractmethod
    def count(self) -> int:
        """Total number of stored entries."""

    @abstractmethod
    def has_value(self, key: str) -> bool:
        """Return True if a value is stored for `key`."""

    def __len__(self) -> int:
        return self.count

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has_value(key)


class ReadableTypedStorage(ReadableStorage):
    """Readable store that returns values coerced to a requested kind."""

    @abstractmethod
    def string_value(self, key: str) -> Optional[str]: ...

    @abstractmethod
    def int_value(self, key: str) -> Optional[int]: ...

    @abstractmethod
    def double_value(self, key: str) -> Optional[float]: ...

    @abstractmethod
    def float_value(self, key: str) -> Optional[float]: ...

    @abstractmethod
    def decimal_value(self, key: str) -> Optional[Decimal]: ...

    @abstractmethod
    def bool_value(self, key: str) -> Optional[bool]: ...

    @abstractmethod
    def number_value(self, key: str) -> Optional[v.Number]: ...

    @abstractmethod
    def data_value(self, key: str) -> Optional[bytes]: ...


class ReadableDynamicStorage(ReadableTypedStorage):
    """Readable store exposing untyped values and a dictionary projection.

    Typed getters are derived from `value` using the coercions in
    `kvstore_lib.storage.values`.
    """

    @abstractmethod
    def value(self, key: str) -> Any:
        """Return the value stored for `key` or None."""

    @property
    @abstractmethod
    def dictionary(self) -> Dict[str, Any]:
        """Return a mapping of every stored key to its value."""

    def has_value(self, key: str) -> bool:
        return self.value(key) is not None

    def get(self, key: str, default: Any = None) -> Any:
        found = self.value(key)
        return default if found is None else found

    def __getitem__(self, key: str) -> Any:
        found = self.value(key)
        if found is None:
            raise KeyError(key)
        return found

    def string_value(self, key: str) -> Optional[str]:
        return v.as_string(self.value(key))

    def int_value(self, key: str) -> Optional[int]:
        return v.as_int(self.value(key))

    def double_value(self, key: str) -> Optional[float]:
        return v.as_double(self.value(key))

    def float_value(self, key: str) -> Optional[float]:
        return v.as_float(self.value(key))

    def decimal_value(self, key: str) -> Optional[Decimal]:
        return v.as_decimal(self.value(key))

    def bool_value(self, key: str) -> Optional[bool]:
        return v.as_bool(self.value(key))

    def number_value(self, key: str) -> Optional[v.Number]:
        return v.as_number(self.value(key))

    def data_value(self, key: str) -> Optional[bytes]:
        return v.as_data(self.value(key))


class Storage(ReadableStorage):
    """Store that supports removal of entries."""

    @abstractmethod
    def remove_value(self, key: str) -> bool:
        """Remove the entry for `key`.

        Returns True unless the backend reported an error; removing a
        missing key is not an error.
        """

    @abstractmethod
    def remove_all(self) -> bool:
        """Remove every entry. Returns True on success."""


class TypedStorage(Storage, ReadableTypedStorage):
    """Read/write store accepting values through kind-specific setters."""

    @abstractmethod
    def set_string(self, key: str, value: str) -> bool: ...

    @abstractmethod
    def set_int(self, key: str, value: int) -> bool: ...

    @abstractmethod
    def set_double(self, key: str, value: float) -> bool: ...

    @abstractmethod
    def set_float(self, key: str, value: float) -> bool: ...

    @abstractmethod
    def set_decimal(self, key: str, value: Decimal) -> bool: ...

    @abstractmethod
    def set_bool(self, key: str, value: bool) -> bool: ...

    @abstractmethod
    def set_number(self, key: str, value: v.Number) -> bool: ...

    @abstractmethod
    def set_data(self, key: str, value: bytes) -> bool: ...

    # Each pop returns what the read returned, even if the removal no-ops.

    def pop_string_value(self, key: str) -> Optional[str]:
        found = self.string_value(key)
        self.remove_value(key)
        return found

    def pop_int_value(self, key: str) -> Optional[int]:
        found = self.int_value(key)
        self.remove_value(key)
        return found

    def pop_double_value(self, key: str) -> Optional[float]:
        found = self.double_value(key)
        self.remove_value(key)
        return found

    def pop_float_value(self, key: str) -> Optional[float]:
        found = self.float_value(key)
        self.remove_value(key)
        return found

    def pop_decimal_value(self, key: str) -> Optional[Decimal]:
        found = self.decimal_value(key)
        self.remove_value(key)
        return found

    def pop_bool_value(self, key: str) -> Optional[bool]:
        found = self.bool_value(key)
        self.remove_value(key)
        return found

    def pop_number_value(self, key: str) -> Optional[v.Number]:
        found = self.number_value(key)
        self.remove_value(key)
        return found

    def pop_data_value(self, key: str) -> Optional[bytes]:
        found = self.data_value(key)
        self.remove_value(key)
        return found


class DynamicStorage(TypedStorage, ReadableDynamicStorage):
    """Read/write store accepting untyped values.

    Typed setters funnel into `set`. Assigning None through item access
    removes the entry.
    """

    @abstractmethod
    def set(self, key: str, value: Any) -> bool:
        """Store `value` for `key`, overwriting any previous value.

        Returns False only if the backend rejects the value.
        """

    def set_string(self, key: str, value: str) -> bool:
        return self.set(key, value)

    def set_int(self, key: str, value: int) -> bool:
        return self.set(key, value)

    def set_double(self, key: str, value: float) -> bool:
        return self.set(key, value)

    def set_float(self, key: str, value: float) -> bool:
        return self.set(key, v.single_precision(value))

    def set_decimal(self, key: str, value: Decimal) -> bool:
        return self.set(key, value)

    def set_bool(self, key: str, value: bool) -> bool:
        return self.set(key, value)

    def set_number(self, key: str, value: v.Number) -> bool:
        return self.set(key, value)

    def set_data(self, key: str, value: bytes) -> bool:
        return self.set(key, value)

    def set_values(self, mapping: Mapping[str, Any]) -> None:
        """Apply `set` once per pair; not atomic across the batch."""
        for key, value in mapping.items():
            self.set(key, value)

    def pop_value(self, key: str) -> Any:
        found = self.value(key)
        self.remove_value(key)
        return found

    def __setitem__(self, key: str, value: Any) -> None:
        if value is None:
            self.remove_value(key)
        else:
            self.set(key, value)

    def __delitem__(self, key: str) -> None:
        self.remove_value(key)
