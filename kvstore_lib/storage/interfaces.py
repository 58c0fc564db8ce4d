from typing import Protocol, Any, Dict, Iterable, runtime_checkable


@runtime_checkable
class StorageProtocol(Protocol):
    """Namespaced storage primitive mirroring `kvstore_lib.storage.StorageBackend`.

    Implementations should follow the semantics documented on the abstract
    base class in `kvstore_lib.storage.base` (KeyError for missing keys,
    thread-safety where required, etc.).
    """

    def save(self, namespace: str, key: str, value: Any) -> None: ...

    def load(self, namespace: str, key: str) -> Any: ...

    def delete(self, namespace: str, key: str) -> None: ...

    def list_keys(self, namespace: str) -> Iterable[str]: ...

    def exists(self, namespace: str, key: str) -> bool: ...


@runtime_checkable
class ReadableDynamicStorageProtocol(Protocol):
    """Structural read-side contract used by the merge view.

    Anything that can report a count, look up a value and project itself
    as a dictionary can be merged, whether or not it derives from
    `ReadableDynamicStorage`.
    """

    @property
    def count(self) -> int: ...

    @property
    def dictionary(self) -> Dict[str, Any]: ...

    def value(self, key: str) -> Any: ...
