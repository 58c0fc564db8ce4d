import logging
import plistlib

import pytest

from kvstore_lib.storage import (
    PlistResourceCache,
    PlistResourceStorage,
    ResourceNotFoundError,
    StorageFormatError,
    StoragePathError,
)


@pytest.fixture
def resources(tmp_path):
    (tmp_path / "Defaults.plist").write_bytes(plistlib.dumps({"theme": "dark", "retries": 3}))
    (tmp_path / "List.plist").write_bytes(plistlib.dumps([1, 2, 3]))
    (tmp_path / "Broken.plist").write_bytes(b"not a plist")
    return tmp_path


def test_open_reads_values(resources):
    storage = PlistResourceStorage.open("Defaults", resources)
    assert storage.string_value("theme") == "dark"
    assert storage.int_value("retries") == 3
    assert storage.count == 2
    assert storage.dictionary == {"theme": "dark", "retries": 3}
    assert storage.has_value("missing") is False


def test_open_missing_resource_logs_and_returns_none(resources, caplog):
    caplog.set_level(logging.WARNING)
    assert PlistResourceStorage.open("Missing", resources) is None
    assert "Missing.plist" in caplog.text


@pytest.mark.parametrize("name", ["List", "Broken", "", "../Defaults", "."])
def test_open_invalid_resource_returns_none(resources, name):
    assert PlistResourceStorage.open(name, resources) is None


def test_load_raises_specific_errors(resources):
    with pytest.raises(ResourceNotFoundError):
        PlistResourceStorage.load("Missing", resources)
    with pytest.raises(StorageFormatError):
        PlistResourceStorage.load("List", resources)
    with pytest.raises(StoragePathError):
        PlistResourceStorage.load("sub/Defaults", resources)


def test_dictionary_is_a_copy(resources):
    storage = PlistResourceStorage.open("Defaults", resources)
    storage.dictionary["theme"] = "light"
    assert storage.value("theme") == "dark"


def test_cache_reuses_loaded_storage(resources):
    cache = PlistResourceCache(resources)
    first = cache.storage("Defaults")
    assert first is not None
    assert cache.storage("Defaults") is first


def test_cache_does_not_remember_failures(resources):
    cache = PlistResourceCache(resources)
    assert cache.storage("Later") is None
    (resources / "Later.plist").write_bytes(plistlib.dumps({"ready": True}))
    later = cache.storage("Later")
    assert later is not None
    assert later.bool_value("ready") is True
