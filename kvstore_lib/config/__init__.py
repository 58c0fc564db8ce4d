from .config import StorageConfig, load_config

__all__ = ["StorageConfig", "load_config"]
