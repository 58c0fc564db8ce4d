"""Typed store over a credential vault.

Every value is stored as an opaque byte blob: text as UTF-8, numbers as a
`NumberArchiveSerializer` frame, blobs unchanged. Numeric getters convert
between numeric kinds the way a boxed platform number does (an int read as
a double, a double read as an int truncates). A blob that fails to decode
as the requested kind reads as None.
"""
from __future__ import annotations
import logging
from decimal import Decimal
from typing import Dict, Optional

from .base import TypedStorage
from .serializer import NumberArchiveSerializer
from .values import Number, as_decimal, single_precision
from .vault import Accessibility, Vault, VaultQuery, VaultStatus

logger = logging.getLogger(__name__)

DEFAULT_IDENTIFIER = "kvstore_lib.VaultStorage"


class VaultStorage(TypedStorage):
    """Typed store keeping each entry as one vault item.

    Parameters
    - identifier: service name partitioning this store's items. Should stay
      the same across the application so every entry remains reachable.
    - access_group: optional group sharing items between cooperating apps.
    - accessibility: policy attached to items written by this store.
    """

    def __init__(
        self,
        vault: Vault,
        identifier: Optional[str] = None,
        access_group: Optional[str] = None,
        accessibility: Accessibility = Accessibility.WHEN_UNLOCKED,
    ) -> None:
        self._vault = vault
        self.identifier = identifier or DEFAULT_IDENTIFIER
        self.access_group = access_group
        self.accessibility = accessibility
        self._archive = NumberArchiveSerializer()

    # Vault access

    def _default_query(self) -> VaultQuery:
        return VaultQuery(service=self.identifier, access_group=self.access_group)

    def _query(self, key: str) -> VaultQuery:
        return VaultQuery(service=self.identifier, account=key, access_group=self.access_group)

    def _add(self, key: str, data: bytes) -> bool:
        status = self._vault.add(self._query(key), data, self.accessibility)
        if status is VaultStatus.SUCCESS:
            return True
        if status is VaultStatus.DUPLICATE_ITEM:
            return self._vault.update(self._query(key), data) is VaultStatus.SUCCESS
        logger.debug("Vault rejected %r: %s", key, status.value)
        return False

    def _get(self, key: str) -> Optional[bytes]:
        status, data = self._vault.copy_matching(self._query(key))
        return data if status is VaultStatus.SUCCESS else None

    def _get_all(self) -> Dict[str, bytes]:
        status, items = self._vault.enumerate(self._default_query())
        if status is not VaultStatus.SUCCESS:
            return {}
        return {i.account: i.data for i in items if i.account is not None and i.data is not None}

    # Contract

    @property
    def count(self) -> int:
        return len(self._get_all())

    def has_value(self, key: str) -> bool:
        return self._get(key) is not None

    def remove_value(self, key: str) -> bool:
        return self._vault.delete(self._query(key)) in (VaultStatus.SUCCESS, VaultStatus.ITEM_NOT_FOUND)

    def remove_all(self) -> bool:
        return self._vault.delete(self._default_query()) in (VaultStatus.SUCCESS, VaultStatus.ITEM_NOT_FOUND)

    # Setters

    def set_string(self, key: str, value: str) -> bool:
        try:
            data = value.encode("utf-8")
        except UnicodeEncodeError:
            return False
        return self._add(key, data)

    def set_int(self, key: str, value: int) -> bool:
        return self.set_number(key, int(value))

    def set_double(self, key: str, value: float) -> bool:
        return self.set_number(key, float(value))

    def set_float(self, key: str, value: float) -> bool:
        return self.set_number(key, single_precision(value))

    def set_decimal(self, key: str, value: Decimal) -> bool:
        return self.set_number(key, value)

    def set_bool(self, key: str, value: bool) -> bool:
        return self.set_number(key, bool(value))

    def set_number(self, key: str, value: Number) -> bool:
        try:
            data = self._archive.dump(value)
        except TypeError:
            return False
        return self._add(key, data)

    def set_data(self, key: str, value: bytes) -> bool:
        return self._add(key, bytes(value))

    # Getters

    def data_value(self, key: str) -> Optional[bytes]:
        return self._get(key)

    def string_value(self, key: str) -> Optional[str]:
        data = self._get(key)
        if data is None:
            return None
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return None

    def number_value(self, key: str) -> Optional[Number]:
        data = self._get(key)
        if data is None:
            return None
        try:
            return self._archive.load(data)
        except ValueError:
            return None

    def int_value(self, key: str) -> Optional[int]:
        n = self.number_value(key)
        if n is None:
            return None
        try:
            return int(n)
        except (OverflowError, ValueError):
            return None

    def double_value(self, key: str) -> Optional[float]:
        n = self.number_value(key)
        if n is None:
            return None
        try:
            return float(n)
        except OverflowError:
            return None

    def float_value(self, key: str) -> Optional[float]:
        d = self.double_value(key)
        return None if d is None else single_precision(d)

    def decimal_value(self, key: str) -> Optional[Decimal]:
        n = self.number_value(key)
        if isinstance(n, bool):
            return Decimal(int(n))
        return as_decimal(n)

    def bool_value(self, key: str) -> Optional[bool]:
        n = self.number_value(key)
        return None if n is None else bool(n)
