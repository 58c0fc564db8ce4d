"""Well-known stores of an application.

`StorageRegistry` is built once at start-up from a `StorageConfig` and
handed to whatever needs storage. Each store is created on first access
through the service container and then reused:

- `local`: user preferences, persistent across launches.
- `temporary`: in memory, lives as long as the registry.
- `remote`: cloud-synced, shared by every device syncing the cloud directory.
- `secure`: credential vault, readable only with the vault key.
- `plist(named)`: read-only property lists from the resource directory.
- `plist_file(named)`: writable property list `<data_dir>/plists/<named>.plist`
  with the configured debounce interval.

Tests create their own registries over temporary directories.
"""
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Optional

from cryptography.fernet import Fernet

from kvstore_lib.config import StorageConfig
from kvstore_lib.services import ServiceContainer
from kvstore_lib.storage.base import DynamicStorage, TypedStorage
from kvstore_lib.storage.cloud import CloudStorage
from kvstore_lib.storage.file_backend import FileStorageBackend
from kvstore_lib.storage.memory_backend import MemoryStorage
from kvstore_lib.storage.plist_resource import PlistResourceCache, PlistResourceStorage, resource_path
from kvstore_lib.storage.plist_storage import PlistStorage
from kvstore_lib.storage.preferences import PreferencesDomain, PreferencesStorage
from kvstore_lib.storage.vault import EncryptedFileVault
from kvstore_lib.storage.vault_storage import VaultStorage

logger = logging.getLogger(__name__)

LOCAL = "local"
TEMPORARY = "temporary"
REMOTE = "remote"
SECURE = "secure"
PLIST_RESOURCES = "plist_resources"
PLIST_FILE_PREFIX = "plist_file:"

KEY_FILE = ".vault_key"
PLIST_DIR = "plists"


class StorageRegistry:
    def __init__(self, config: Optional[StorageConfig] = None, container: Optional[ServiceContainer] = None) -> None:
        self.config = config or StorageConfig()
        self._container = container or ServiceContainer()
        self._container.register_factory(LOCAL, self._create_local)
        self._container.register_factory(TEMPORARY, MemoryStorage)
        self._container.register_factory(REMOTE, self._create_remote)
        self._container.register_factory(SECURE, self._create_secure)
        self._container.register_factory(PLIST_RESOURCES, lambda: PlistResourceCache(self.config.resource_dir))

    @property
    def local(self) -> DynamicStorage:
        return self._container.get_typed(LOCAL)

    @property
    def temporary(self) -> DynamicStorage:
        return self._container.get_typed(TEMPORARY)

    @property
    def remote(self) -> DynamicStorage:
        return self._container.get_typed(REMOTE)

    @property
    def secure(self) -> TypedStorage:
        return self._container.get_typed(SECURE)

    def plist(self, named: str) -> Optional[PlistResourceStorage]:
        cache: PlistResourceCache = self._container.get_typed(PLIST_RESOURCES)
        return cache.storage(named)

    def plist_file(self, named: str) -> PlistStorage:
        """Writable plist store in the data directory, one instance per name.

        Raises StoragePathError for a name that is not a plain file name.
        """
        path = resource_path(named, Path(self.config.data_dir) / PLIST_DIR)
        key = PLIST_FILE_PREFIX + named
        # resolving returns the existing instance once created
        self._container.register_factory(
            key, lambda: PlistStorage(path, debounce_interval=self.config.debounce_interval)
        )
        return self._container.get_typed(key)

    def close(self) -> None:
        """Dispose every store created so far."""
        for name, service in self._container.resolved().items():
            close = getattr(service, "close", None)
            if callable(close):
                logger.debug("Closing %s store", name)
                close()

    def _create_local(self) -> PreferencesStorage:
        domain = PreferencesDomain.for_identifier(self.config.app_identifier, self.config.data_dir)
        logger.info("Local storage at %s", domain.path)
        return PreferencesStorage(domain)

    def _create_remote(self) -> CloudStorage:
        logger.info("Remote storage at %s", self.config.cloud_path)
        return CloudStorage(FileStorageBackend(self.config.cloud_path))

    def _create_secure(self) -> VaultStorage:
        cfg = self.config
        if cfg.vault_password:
            vault = EncryptedFileVault(cfg.vault_path, password=cfg.vault_password)
        else:
            vault = EncryptedFileVault(cfg.vault_path, key=self._vault_key())
        return VaultStorage(vault, identifier=cfg.app_identifier, access_group=cfg.vault_access_group)

    def _vault_key(self) -> bytes:
        if self.config.vault_key:
            return self.config.vault_key.encode("ascii")
        key_path = Path(self.config.data_dir) / KEY_FILE
        if key_path.exists():
            return key_path.read_bytes().strip()
        logger.warning("No vault key configured; generating one at %s", key_path)
        key_path.parent.mkdir(parents=True, exist_ok=True)
        key = Fernet.generate_key()
        fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(key)
        return key
