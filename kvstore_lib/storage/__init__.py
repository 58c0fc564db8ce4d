"""Key-value storage contracts and backends."""

from .base import (
    DynamicStorage,
    ReadableDynamicStorage,
    ReadableStorage,
    ReadableTypedStorage,
    Storage,
    StorageBackend,
    TypedStorage,
)
from .cloud import CloudStorage
from .errors import (
    ResourceNotFoundError,
    StorageError,
    StorageFormatError,
    StoragePathError,
    UnsupportedFormatError,
)
from .factory import create_storage
from .file_backend import FileStorageBackend
from .memory_backend import MemoryStorage
from .merged import MergedStorage
from .plist_codec import PlistFormat
from .plist_resource import PlistResourceCache, PlistResourceStorage
from .plist_storage import PlistStorage
from .preferences import PreferencesDomain, PreferencesStorage
from .vault import Accessibility, DeviceState, EncryptedFileVault, VaultQuery, VaultStatus
from .vault_storage import VaultStorage

__all__ = [
    "Accessibility",
    "CloudStorage",
    "DeviceState",
    "DynamicStorage",
    "EncryptedFileVault",
    "FileStorageBackend",
    "MemoryStorage",
    "MergedStorage",
    "PlistFormat",
    "PlistResourceCache",
    "PlistResourceStorage",
    "PlistStorage",
    "PreferencesDomain",
    "PreferencesStorage",
    "ReadableDynamicStorage",
    "ReadableStorage",
    "ReadableTypedStorage",
    "ResourceNotFoundError",
    "Storage",
    "StorageBackend",
    "StorageError",
    "StorageFormatError",
    "StoragePathError",
    "TypedStorage",
    "UnsupportedFormatError",
    "VaultQuery",
    "VaultStatus",
    "VaultStorage",
    "create_storage",
]
