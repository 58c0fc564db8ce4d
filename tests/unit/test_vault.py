import pytest
from cryptography.fernet import Fernet

from kvstore_lib.storage.vault import (
    Accessibility,
    DeviceState,
    EncryptedFileVault,
    VaultQuery,
    VaultStatus,
)

LOCKED = DeviceState(locked=True)
BOOTED_LOCKED = DeviceState(locked=True, unlocked_since_boot=False)
NO_PASSCODE = DeviceState(passcode_set=False)


@pytest.fixture
def vault(tmp_path):
    return EncryptedFileVault(tmp_path / "vault.bin", key=Fernet.generate_key())


def _q(account=None, service="svc", group=None):
    return VaultQuery(service=service, account=account, access_group=group)


@pytest.mark.parametrize(
    "accessibility,state,readable",
    [
        (Accessibility.ALWAYS, BOOTED_LOCKED, True),
        (Accessibility.AFTER_FIRST_UNLOCK, LOCKED, True),
        (Accessibility.AFTER_FIRST_UNLOCK, BOOTED_LOCKED, False),
        (Accessibility.WHEN_UNLOCKED, DeviceState(), True),
        (Accessibility.WHEN_UNLOCKED, LOCKED, False),
        (Accessibility.WHEN_PASSCODE_SET_THIS_DEVICE_ONLY, NO_PASSCODE, False),
        (Accessibility.WHEN_PASSCODE_SET_THIS_DEVICE_ONLY, DeviceState(), True),
    ],
)
def test_accessibility_policies(accessibility, state, readable):
    assert accessibility.readable(state) is readable


def test_device_only_policies_do_not_migrate():
    assert Accessibility.WHEN_UNLOCKED.migrates_with_backup is True
    assert Accessibility.WHEN_UNLOCKED_THIS_DEVICE_ONLY.migrates_with_backup is False
    assert Accessibility.ALWAYS_THIS_DEVICE_ONLY.migrates_with_backup is False


def test_add_and_copy(vault):
    assert vault.add(_q("token"), b"secret", Accessibility.WHEN_UNLOCKED) is VaultStatus.SUCCESS
    assert vault.copy_matching(_q("token")) == (VaultStatus.SUCCESS, b"secret")
    assert vault.add(_q("token"), b"other", Accessibility.WHEN_UNLOCKED) is VaultStatus.DUPLICATE_ITEM


def test_add_requires_account(vault):
    with pytest.raises(ValueError):
        vault.add(_q(), b"x", Accessibility.ALWAYS)


def test_update(vault):
    assert vault.update(_q("token"), b"x") is VaultStatus.ITEM_NOT_FOUND
    vault.add(_q("token"), b"old", Accessibility.ALWAYS)
    assert vault.update(_q("token"), b"new") is VaultStatus.SUCCESS
    assert vault.copy_matching(_q("token"))[1] == b"new"


def test_locked_device_blocks_reads(vault):
    vault.add(_q("token"), b"secret", Accessibility.WHEN_UNLOCKED)
    vault.add(_q("always"), b"open", Accessibility.ALWAYS)
    vault.device_state = LOCKED
    assert vault.copy_matching(_q("token")) == (VaultStatus.INTERACTION_NOT_ALLOWED, None)
    assert vault.update(_q("token"), b"x") is VaultStatus.INTERACTION_NOT_ALLOWED
    status, items = vault.enumerate(_q())
    assert status is VaultStatus.SUCCESS
    assert [i.account for i in items] == ["always"]


def test_passcode_policy_without_passcode(tmp_path):
    vault = EncryptedFileVault(tmp_path / "v.bin", key=Fernet.generate_key(), device_state=NO_PASSCODE)
    status = vault.add(_q("token"), b"x", Accessibility.WHEN_PASSCODE_SET_THIS_DEVICE_ONLY)
    assert status is VaultStatus.AUTH_FAILED


def test_services_and_groups_partition_items(vault):
    vault.add(_q("a", service="one"), b"1", Accessibility.ALWAYS)
    vault.add(_q("a", service="two"), b"2", Accessibility.ALWAYS)
    vault.add(_q("a", service="one", group="shared"), b"3", Accessibility.ALWAYS)
    assert vault.copy_matching(_q("a", service="two"))[1] == b"2"
    assert vault.copy_matching(_q("a", service="one", group="shared"))[1] == b"3"
    status, items = vault.enumerate(_q(service="one"))
    assert len(items) == 2


def test_delete_without_account_clears_service(vault):
    vault.add(_q("a"), b"1", Accessibility.ALWAYS)
    vault.add(_q("b"), b"2", Accessibility.ALWAYS)
    vault.add(_q("c", service="other"), b"3", Accessibility.ALWAYS)
    assert vault.delete(_q()) is VaultStatus.SUCCESS
    assert vault.enumerate(_q()) == (VaultStatus.ITEM_NOT_FOUND, [])
    assert vault.copy_matching(_q("c", service="other"))[0] is VaultStatus.SUCCESS
    assert vault.delete(_q("a")) is VaultStatus.ITEM_NOT_FOUND


def test_file_is_encrypted(vault):
    vault.add(_q("token"), b"plain-secret", Accessibility.ALWAYS)
    raw = vault.path.read_bytes()
    assert b"plain-secret" not in raw
    assert b"token" not in raw


def test_instances_share_the_file(tmp_path):
    key = Fernet.generate_key()
    first = EncryptedFileVault(tmp_path / "v.bin", key=key)
    second = EncryptedFileVault(tmp_path / "v.bin", key=key)
    first.add(_q("token"), b"secret", Accessibility.ALWAYS)
    assert second.copy_matching(_q("token")) == (VaultStatus.SUCCESS, b"secret")


def test_wrong_key_reports_io_error(tmp_path):
    EncryptedFileVault(tmp_path / "v.bin", key=Fernet.generate_key()).add(_q("t"), b"x", Accessibility.ALWAYS)
    other = EncryptedFileVault(tmp_path / "v.bin", key=Fernet.generate_key())
    assert other.copy_matching(_q("t")) == (VaultStatus.IO_ERROR, None)
    assert other.add(_q("u"), b"y", Accessibility.ALWAYS) is VaultStatus.IO_ERROR
    assert other.enumerate(_q())[0] is VaultStatus.IO_ERROR


def test_requires_key_or_password(tmp_path):
    with pytest.raises(ValueError):
        EncryptedFileVault(tmp_path / "v.bin")


def test_backup_skips_device_only_items(tmp_path):
    key = Fernet.generate_key()
    vault = EncryptedFileVault(tmp_path / "vault.bin", key=key)
    vault.add(_q("portable"), b"1", Accessibility.WHEN_UNLOCKED)
    vault.add(_q("pinned"), b"2", Accessibility.WHEN_UNLOCKED_THIS_DEVICE_ONLY)
    blob = vault.export_backup()

    restored = EncryptedFileVault(tmp_path / "restored.bin", key=key)
    assert restored.import_backup(blob) == 1
    assert restored.copy_matching(_q("portable")) == (VaultStatus.SUCCESS, b"1")
    assert restored.copy_matching(_q("pinned"))[0] is VaultStatus.ITEM_NOT_FOUND


def test_password_mode(tmp_path):
    vault = EncryptedFileVault(tmp_path / "v.bin", password="correct horse")
    vault.add(_q("t"), b"x", Accessibility.ALWAYS)
    reopened = EncryptedFileVault(tmp_path / "v.bin", password="correct horse")
    assert reopened.copy_matching(_q("t")) == (VaultStatus.SUCCESS, b"x")
