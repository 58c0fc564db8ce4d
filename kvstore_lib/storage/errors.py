"""
Storage exception hierarchy.

Every error raised by the library inherits from StorageError. Only
construction of file-backed stores and configuration loading raise;
steady-state store operations report failure through their return value.

Usage:
    try:
        store = PlistStorage(path)
    except StoragePathError:
        # Path is a directory or lacks the .plist suffix
    except StorageError:
        # Any other construction failure
"""


class StorageError(Exception):
    """Base exception for all storage errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(StorageError):
    """Configuration is invalid or malformed."""

    pass


class StoragePathError(StorageError):
    """Target is not a file path or does not carry the expected suffix."""

    pass


class StorageFormatError(StorageError):
    """Backing content could not be decoded or its root is not a mapping."""

    pass


class UnsupportedFormatError(StorageError):
    """No candidate serialization format can represent the content."""

    pass


class ResourceNotFoundError(StorageError):
    """Named resource does not exist in the resource directory."""

    pass
