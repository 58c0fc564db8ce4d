"""Credential vault primitive.

Models a secure item store in the shape of an OS keychain: items are
addressed by a query of (service, account, access group), carry an
accessibility policy that decides when they may be read given the device
lock state, and every call reports a `VaultStatus` instead of raising.

`EncryptedFileVault` keeps the items in a single Fernet-encrypted file. The
file is re-read on every call, so several vault instances (or processes)
over the same file share their items.
"""
from __future__ import annotations
import base64
import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

from cryptography.fernet import InvalidToken

from .serializer import EncryptedSerializer
from .single_file_backend import SingleFileStorage

logger = logging.getLogger(__name__)


class VaultStatus(Enum):
    SUCCESS = "success"
    DUPLICATE_ITEM = "duplicate_item"
    ITEM_NOT_FOUND = "item_not_found"
    INTERACTION_NOT_ALLOWED = "interaction_not_allowed"
    AUTH_FAILED = "auth_failed"
    IO_ERROR = "io_error"


@dataclass(frozen=True)
class DeviceState:
    locked: bool = False
    unlocked_since_boot: bool = True
    passcode_set: bool = True


class Accessibility(Enum):
    ALWAYS = "always"
    ALWAYS_THIS_DEVICE_ONLY = "always_this_device_only"
    AFTER_FIRST_UNLOCK = "after_first_unlock"
    AFTER_FIRST_UNLOCK_THIS_DEVICE_ONLY = "after_first_unlock_this_device_only"
    WHEN_UNLOCKED = "when_unlocked"
    WHEN_UNLOCKED_THIS_DEVICE_ONLY = "when_unlocked_this_device_only"
    WHEN_PASSCODE_SET_THIS_DEVICE_ONLY = "when_passcode_set_this_device_only"

    @property
    def migrates_with_backup(self) -> bool:
        return not self.value.endswith("_this_device_only")

    @property
    def requires_passcode(self) -> bool:
        return self is Accessibility.WHEN_PASSCODE_SET_THIS_DEVICE_ONLY

    def readable(self, state: DeviceState) -> bool:
        if self in (Accessibility.ALWAYS, Accessibility.ALWAYS_THIS_DEVICE_ONLY):
            return True
        if self in (Accessibility.AFTER_FIRST_UNLOCK, Accessibility.AFTER_FIRST_UNLOCK_THIS_DEVICE_ONLY):
            return state.unlocked_since_boot
        if self.requires_passcode:
            return state.passcode_set and not state.locked
        return not state.locked


@dataclass(frozen=True)
class VaultQuery:
    service: str
    account: Optional[str] = None
    access_group: Optional[str] = None

    @property
    def generic(self) -> Optional[bytes]:
        return self.account.encode("utf-8") if self.account is not None else None

    def matches(self, item: "VaultItem") -> bool:
        if item.service != self.service:
            return False
        if self.access_group is not None and item.access_group != self.access_group:
            return False
        if self.account is not None and item.account != self.account:
            return False
        return True


@dataclass(frozen=True)
class VaultItem:
    service: str
    account: str
    access_group: Optional[str]
    generic: Optional[bytes]
    data: bytes
    accessibility: Accessibility

    def to_record(self) -> Dict[str, Any]:
        return {
            "service": self.service,
            "account": self.account,
            "access_group": self.access_group,
            "generic": base64.b64encode(self.generic).decode("ascii") if self.generic is not None else None,
            "data": base64.b64encode(self.data).decode("ascii"),
            "accessibility": self.accessibility.value,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "VaultItem":
        generic = record.get("generic")
        return cls(
            service=record["service"],
            account=record["account"],
            access_group=record.get("access_group"),
            generic=base64.b64decode(generic) if generic is not None else None,
            data=base64.b64decode(record["data"]),
            accessibility=Accessibility(record["accessibility"]),
        )

    def same_identity(self, other: "VaultItem") -> bool:
        return (self.service, self.account, self.access_group) == (other.service, other.account, other.access_group)


class Vault(Protocol):
    def add(self, query: VaultQuery, data: bytes, accessibility: Accessibility) -> VaultStatus: ...

    def update(self, query: VaultQuery, data: bytes) -> VaultStatus: ...

    def copy_matching(self, query: VaultQuery) -> Tuple[VaultStatus, Optional[bytes]]: ...

    def delete(self, query: VaultQuery) -> VaultStatus: ...

    def enumerate(self, query: VaultQuery) -> Tuple[VaultStatus, List[VaultItem]]: ...


# Failures reading or writing the item file; reported as IO_ERROR
_STORE_ERRORS = (OSError, ValueError, KeyError, InvalidToken)


class EncryptedFileVault:
    """Vault whose items live in one Fernet-encrypted file.

    Provide either `key` (a Fernet key) or `password`. `device_state` is
    consulted on every read to enforce item accessibility and may be
    replaced at any time.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        key: bytes | None = None,
        password: str | None = None,
        device_state: DeviceState | None = None,
    ) -> None:
        if key is None and password is None:
            raise ValueError("EncryptedFileVault requires either `key` or `password`")
        self._file = SingleFileStorage(path)
        self._serializer = EncryptedSerializer(key=key, password=password)
        self.device_state = device_state or DeviceState()
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._file.file_path

    def _read_items(self) -> List[VaultItem]:
        if not self._file.exists():
            return []
        records = self._serializer.load(self._file.read())
        return [VaultItem.from_record(r) for r in records]

    def _write_items(self, items: List[VaultItem]) -> None:
        self._file.write(self._serializer.dump([i.to_record() for i in items]))

    def add(self, query: VaultQuery, data: bytes, accessibility: Accessibility) -> VaultStatus:
        if query.account is None:
            raise ValueError("Adding an item requires an account")
        if accessibility.requires_passcode and not self.device_state.passcode_set:
            return VaultStatus.AUTH_FAILED
        item = VaultItem(query.service, query.account, query.access_group, query.generic, bytes(data), accessibility)
        with self._lock:
            try:
                items = self._read_items()
                if any(item.same_identity(i) for i in items):
                    return VaultStatus.DUPLICATE_ITEM
                items.append(item)
                self._write_items(items)
            except _STORE_ERRORS:
                logger.exception("Failed to add vault item %r", query.account)
                return VaultStatus.IO_ERROR
        return VaultStatus.SUCCESS

    def update(self, query: VaultQuery, data: bytes) -> VaultStatus:
        with self._lock:
            try:
                items = self._read_items()
                found = [i for i in items if query.matches(i)]
                if not found:
                    return VaultStatus.ITEM_NOT_FOUND
                if not all(i.accessibility.readable(self.device_state) for i in found):
                    return VaultStatus.INTERACTION_NOT_ALLOWED
                items = [replace(i, data=bytes(data)) if query.matches(i) else i for i in items]
                self._write_items(items)
            except _STORE_ERRORS:
                logger.exception("Failed to update vault item %r", query.account)
                return VaultStatus.IO_ERROR
        return VaultStatus.SUCCESS

    def copy_matching(self, query: VaultQuery) -> Tuple[VaultStatus, Optional[bytes]]:
        with self._lock:
            try:
                items = self._read_items()
            except _STORE_ERRORS:
                logger.exception("Failed to read vault %s", self.path)
                return VaultStatus.IO_ERROR, None
        item = next((i for i in items if query.matches(i)), None)
        if item is None:
            return VaultStatus.ITEM_NOT_FOUND, None
        if not item.accessibility.readable(self.device_state):
            return VaultStatus.INTERACTION_NOT_ALLOWED, None
        return VaultStatus.SUCCESS, item.data

    def delete(self, query: VaultQuery) -> VaultStatus:
        """Delete the matching item, or every item of the service when
        the query has no account."""
        with self._lock:
            try:
                items = self._read_items()
                kept = [i for i in items if not query.matches(i)]
                if len(kept) == len(items):
                    return VaultStatus.ITEM_NOT_FOUND
                self._write_items(kept)
            except _STORE_ERRORS:
                logger.exception("Failed to delete from vault %s", self.path)
                return VaultStatus.IO_ERROR
        return VaultStatus.SUCCESS

    def enumerate(self, query: VaultQuery) -> Tuple[VaultStatus, List[VaultItem]]:
        """Return attribute and data records of every readable matching item."""
        with self._lock:
            try:
                items = self._read_items()
            except _STORE_ERRORS:
                logger.exception("Failed to read vault %s", self.path)
                return VaultStatus.IO_ERROR, []
        found = [i for i in items if query.matches(i) and i.accessibility.readable(self.device_state)]
        if not found:
            return VaultStatus.ITEM_NOT_FOUND, []
        return VaultStatus.SUCCESS, found

    def export_backup(self) -> bytes:
        """Encrypt the items allowed to migrate into a backup blob."""
        with self._lock:
            items = self._read_items()
        migrating = [i.to_record() for i in items if i.accessibility.migrates_with_backup]
        return self._serializer.dump(migrating)

    def import_backup(self, blob: bytes) -> int:
        """Merge items from `export_backup` output, replacing same-identity items.

        Returns the number of items restored.
        """
        restored = [VaultItem.from_record(r) for r in self._serializer.load(blob)]
        with self._lock:
            items = self._read_items()
            items = [i for i in items if not any(i.same_identity(r) for r in restored)]
            self._write_items(items + restored)
        return len(restored)
