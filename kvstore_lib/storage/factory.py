"""Construct a store by backend name.

Convenience for callers that pick the backend from configuration:

    store = create_storage(backend='plist', path='data/settings.plist')
    store = create_storage(backend='vault', path='data/vault.bin', password='pw')
"""
from __future__ import annotations
from pathlib import Path
from typing import Any

from .base import TypedStorage
from .cloud import CloudStorage
from .file_backend import FileStorageBackend
from .memory_backend import MemoryStorage
from .plist_storage import DEFAULT_DEBOUNCE_INTERVAL, PlistStorage
from .preferences import PreferencesDomain, PreferencesStorage
from .vault import Accessibility, EncryptedFileVault
from .vault_storage import VaultStorage

BACKENDS = ("memory", "plist", "preferences", "cloud", "vault")


def create_storage(backend: str = "memory", **options: Any) -> TypedStorage:
    """Create a store for `backend`.

    Options per backend:
    - memory: none
    - plist: path, debounce_interval
    - preferences: path
    - cloud: data_dir, namespace
    - vault: path, key or password, identifier, access_group, accessibility
    """
    if backend == "memory":
        return MemoryStorage()
    if backend == "plist":
        return PlistStorage(options["path"], debounce_interval=options.get("debounce_interval", DEFAULT_DEBOUNCE_INTERVAL))
    if backend == "preferences":
        return PreferencesStorage(PreferencesDomain(options["path"]))
    if backend == "cloud":
        store = FileStorageBackend(options.get("data_dir", Path("data") / "cloud"))
        return CloudStorage(store, namespace=options.get("namespace", "ubiquitous"))
    if backend == "vault":
        vault = EncryptedFileVault(options["path"], key=options.get("key"), password=options.get("password"))
        return VaultStorage(
            vault,
            identifier=options.get("identifier"),
            access_group=options.get("access_group"),
            accessibility=options.get("accessibility", Accessibility.WHEN_UNLOCKED),
        )
    raise ValueError(f"Unknown storage backend {backend!r}; expected one of {', '.join(BACKENDS)}")
