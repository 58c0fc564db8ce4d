"""Property list encoding helpers built on `plistlib`.

Files are decoded with format auto-detection. When encoding, the format a
file was read in is preferred; if the content cannot be represented in it
(for example text containing control characters, which XML cannot carry)
the candidates are probed in order and the first that works is adopted.
"""
from __future__ import annotations
import plistlib
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .errors import StorageFormatError, UnsupportedFormatError

PLIST_SUFFIX = ".plist"
_BINARY_MAGIC = b"bplist00"


class PlistFormat(Enum):
    XML = "xml"
    BINARY = "binary"
    # Legacy text format; plistlib can neither read nor write it.
    OPENSTEP = "openstep"

    @property
    def plistlib_format(self) -> Optional[plistlib.PlistFormat]:
        if self is PlistFormat.XML:
            return plistlib.FMT_XML
        if self is PlistFormat.BINARY:
            return plistlib.FMT_BINARY
        return None


CANDIDATE_FORMATS = (PlistFormat.XML, PlistFormat.BINARY, PlistFormat.OPENSTEP)


def detect_format(data: bytes) -> PlistFormat:
    return PlistFormat.BINARY if data.startswith(_BINARY_MAGIC) else PlistFormat.XML


def decode(data: bytes) -> Tuple[Dict[str, Any], PlistFormat]:
    """Decode `data` into its root mapping and the detected format.

    Raises StorageFormatError when the bytes are not a property list or the
    root object is not a mapping.
    """
    try:
        root = plistlib.loads(data)
    except Exception as e:
        raise StorageFormatError(f"Failed to decode property list: {e}") from e
    if not isinstance(root, dict):
        raise StorageFormatError(
            "Property list root object is not a dictionary",
            details={"root_type": type(root).__name__},
        )
    return root, detect_format(data)


def encode_as(content: Dict[str, Any], fmt: PlistFormat) -> bytes:
    """Encode `content` in exactly `fmt`. Raises UnsupportedFormatError."""
    native = fmt.plistlib_format
    if native is None:
        raise UnsupportedFormatError(f"Writing {fmt.value} property lists is not supported")
    try:
        return plistlib.dumps(content, fmt=native, sort_keys=False)
    except (TypeError, ValueError, OverflowError) as e:
        raise UnsupportedFormatError(f"Content is not representable as {fmt.value}: {e}") from e


def encode(content: Dict[str, Any], preferred: PlistFormat) -> Tuple[bytes, PlistFormat]:
    """Encode `content`, trying `preferred` first and then every candidate.

    Returns the bytes and the format that was used.
    """
    try:
        return encode_as(content, preferred), preferred
    except UnsupportedFormatError:
        pass
    for fmt in CANDIDATE_FORMATS:
        if fmt is preferred:
            continue
        try:
            return encode_as(content, fmt), fmt
        except UnsupportedFormatError:
            continue
    raise UnsupportedFormatError(
        "No property list format can represent the content",
        details={"tried": [f.value for f in CANDIDATE_FORMATS]},
    )
