"""Raw byte access to one specific file.

Used by stores whose whole content lives in a single document (preference
domains, plist files). Reads return bytes; writes replace the file
atomically through a temporary sibling.
"""
from __future__ import annotations
import os
from pathlib import Path
import logging

logger = logging.getLogger(__name__)


class SingleFileStorage:
    """Reads and writes the bytes of a single on-disk file.

    Parameters
    - file_path: path to the file used for all reads/writes. The parent
      directory is created when missing so writes succeed.
    """

    def __init__(self, file_path: str | Path) -> None:
        self.file_path = Path(file_path)
        if not self.file_path.parent.exists():
            os.makedirs(self.file_path.parent, exist_ok=True)

    def exists(self) -> bool:
        return self.file_path.is_file()

    def read(self) -> bytes:
        """Return the file content. Raises FileNotFoundError when absent."""
        with open(self.file_path, "rb") as f:
            data = f.read()
        logger.debug("SingleFileStorage loaded %s (%d bytes)", self.file_path, len(data))
        return data

    def write(self, data: bytes) -> None:
        tmp = self.file_path.with_name(self.file_path.name + ".tmp")
        with open(tmp, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        tmp.replace(self.file_path)
