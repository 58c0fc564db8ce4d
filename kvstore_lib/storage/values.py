"""Value model shared by every storage backend.

Stores hold plain Python objects. This module defines the closed set of
kinds a store understands, the typed coercions used by the typed getters,
and the normalization applied by backends whose medium only accepts
property-list values (plist files, preferences, cloud storage).

Coercions never raise: a value of the wrong kind yields ``None``.
"""
from __future__ import annotations
import math
import struct
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Union

Number = Union[bool, int, float, Decimal]


class ValueKind(Enum):
    TEXT = "text"
    INTEGER = "integer"
    DOUBLE = "double"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATA = "data"
    DATE = "date"
    MAPPING = "mapping"
    LIST = "list"


def kind_of(value: Any) -> Optional[ValueKind]:
    """Return the `ValueKind` of `value` or None when it is not storable."""
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.DOUBLE
    if isinstance(value, Decimal):
        return ValueKind.DECIMAL
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueKind.DATA
    if isinstance(value, datetime):
        return ValueKind.DATE
    if isinstance(value, dict):
        return ValueKind.MAPPING
    if isinstance(value, (list, tuple)):
        return ValueKind.LIST
    return None


def single_precision(value: float) -> float:
    """Round a double to the nearest binary32 value.

    Magnitudes beyond the binary32 range become infinity, as a C cast would.
    """
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def as_string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
        return int(value)
    return None


def as_double(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return value
    if isinstance(value, (int, Decimal)):
        try:
            return float(value)
        except OverflowError:
            return None
    return None


def as_float(value: Any) -> Optional[float]:
    d = as_double(value)
    return None if d is None else single_precision(d)


def as_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # repr gives the shortest string that round-trips, so 5.55 -> Decimal('5.55')
        try:
            return Decimal(repr(value))
        except InvalidOperation:
            return None
    return None


def as_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def as_number(value: Any) -> Optional[Number]:
    if isinstance(value, (bool, int, float, Decimal)):
        return value
    return None


def as_data(value: Any) -> Optional[bytes]:
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    return None


def to_property_value(value: Any) -> Any:
    """Normalize `value` to the property-list domain.

    Returns a new value made only of str, int, float, bool, bytes, naive UTC
    datetime, dict with str keys and list. Raises TypeError for anything that
    cannot be represented.
    """
    kind = kind_of(value)
    if kind is None:
        raise TypeError(f"Unsupported value type: {type(value).__name__}")
    if kind is ValueKind.DECIMAL:
        if not value.is_finite():
            raise TypeError(f"Non-finite decimal cannot be stored: {value}")
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if kind is ValueKind.DATA:
        return bytes(value)
    if kind is ValueKind.DATE:
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if kind is ValueKind.MAPPING:
        out = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError(f"Mapping keys must be text, got {type(k).__name__}")
            out[k] = to_property_value(v)
        return out
    if kind is ValueKind.LIST:
        return [to_property_value(v) for v in value]
    return value
