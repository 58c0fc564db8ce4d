from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Union

import yaml

from kvstore_lib.config.config import CONFIG_PATH

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s]: %(message)s'


def _level_from_config(path: Path) -> int:
    # Unreadable or malformed config falls back to WARNING
    if not path.exists():
        return logging.WARNING
    try:
        with path.open('r', encoding='utf-8') as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return logging.WARNING
    name = cfg.get('log_level') if isinstance(cfg, dict) else None
    return getattr(logging, str(name).upper(), logging.WARNING) if name else logging.WARNING


def configure_logging(config_path: Optional[Path] = None, level: Union[int, str, None] = None) -> logging.Logger:
    """Configure root logging for a host application using the stores.

    `level` wins over the `log_level` entry of the storage config YAML;
    without either the root level is WARNING. Existing root handlers are
    replaced. Returns a module logger for the caller.
    """
    if level is None:
        resolved = _level_from_config(config_path or CONFIG_PATH)
    elif isinstance(level, str):
        resolved = getattr(logging, level.upper(), logging.WARNING)
    else:
        resolved = level

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logger = logging.getLogger(__name__)
    logger.info("Storage log level set to %s", logging.getLevelName(resolved))
    return logger
