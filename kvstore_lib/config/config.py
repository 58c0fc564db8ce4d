"""Storage configuration.

Settings come from an optional YAML file (`data/config/storage_config.yml`
by default). Vault secrets may instead be supplied through the
`KVSTORE_VAULT_KEY` and `KVSTORE_VAULT_PASSWORD` environment variables,
which take precedence over the file.
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from kvstore_lib.storage.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_PATH = Path("data/config/storage_config.yml")
ENV_VAULT_KEY = "KVSTORE_VAULT_KEY"
ENV_VAULT_PASSWORD = "KVSTORE_VAULT_PASSWORD"


@dataclass
class StorageConfig:
    data_dir: str = "data"
    resource_dir: str = "resources"
    app_identifier: str = "kvstore"
    # Relative paths are resolved against data_dir
    vault_file: str = "vault.bin"
    vault_key: Optional[str] = None
    vault_password: Optional[str] = None
    vault_access_group: Optional[str] = None
    # Directory kept in sync across devices by the host sync client
    cloud_dir: str = "cloud"
    debounce_interval: float = 1.0
    log_level: str = "WARNING"

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "StorageConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            logger.warning("Ignoring unknown storage config keys: %s", ", ".join(unknown))
        cfg = cls(**{k: v for k, v in raw.items() if k in known})
        try:
            cfg.debounce_interval = float(cfg.debounce_interval)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"debounce_interval must be a number, got {cfg.debounce_interval!r}") from e
        if cfg.debounce_interval < 0:
            raise ConfigError("debounce_interval must not be negative")
        return cfg

    def _resolve(self, value: str) -> Path:
        p = Path(value)
        return p if p.is_absolute() else Path(self.data_dir) / p

    @property
    def vault_path(self) -> Path:
        return self._resolve(self.vault_file)

    @property
    def cloud_path(self) -> Path:
        return self._resolve(self.cloud_dir)


def load_yaml_file(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(path: Optional[Path] = None) -> StorageConfig:
    """Load `StorageConfig` from YAML, applying environment overrides.

    A missing file yields the defaults.
    """
    cfg = StorageConfig.from_mapping(load_yaml_file(path or CONFIG_PATH))
    cfg.vault_key = os.environ.get(ENV_VAULT_KEY, cfg.vault_key)
    cfg.vault_password = os.environ.get(ENV_VAULT_PASSWORD, cfg.vault_password)
    return cfg
