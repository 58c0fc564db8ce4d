"""Bootstrap helper for host applications.

Performs the one-time start-up work (logging, config loading, data
directory creation) and returns the registry the application passes to
its components. Nothing here runs at import time.
"""
from pathlib import Path
from typing import Optional

from kvstore_lib.config.config import CONFIG_PATH, load_config
from kvstore_lib.logging_config import configure_logging
from kvstore_lib.registry import StorageRegistry


def bootstrap_registry(config_path: Optional[Path] = None) -> StorageRegistry:
    """Configure logging, load the storage config and build a registry.

    Parameters
    - config_path: YAML config file; defaults to `data/config/storage_config.yml`.
      A missing file yields the default configuration.
    """
    path = config_path or CONFIG_PATH
    logger = configure_logging(path)
    config = load_config(path)
    Path(config.data_dir).mkdir(parents=True, exist_ok=True)
    logger.info("Storage data directory: %s", config.data_dir)
    return StorageRegistry(config)
