from kvstore_lib.storage import MemoryStorage, MergedStorage, PlistResourceStorage


def _stores():
    a = MemoryStorage()
    a.set("k1", "a")
    b = MemoryStorage()
    b.set_values({"k1": "b", "k2": "c"})
    return a, b


def test_first_store_wins_for_lookups():
    a, b = _stores()
    merged = MergedStorage([a, b])
    assert merged.value("k1") == "a"
    assert merged.value("k2") == "c"
    assert merged.value("k3") is None


def test_dictionary_lets_later_stores_overwrite():
    a, b = _stores()
    merged = MergedStorage([a, b])
    assert merged.dictionary == {"k1": "b", "k2": "c"}
    # value and dictionary disagree for keys present in several stores
    assert merged.dictionary["k1"] != merged.value("k1")


def test_count_adds_up_store_counts():
    a, b = _stores()
    merged = MergedStorage([a, b])
    assert merged.count == 3
    assert len(merged.dictionary) == 2


def test_reflects_later_changes():
    a, b = _stores()
    merged = MergedStorage([a, b])
    a.remove_value("k1")
    assert merged.value("k1") == "b"
    b.set_int("n", 4)
    assert merged.int_value("n") == 4


def test_typed_getters_and_mixed_stores():
    a = MemoryStorage()
    a.set_data("blob", b"\x01")
    resource = PlistResourceStorage({"blob": b"\x02", "text": "hi"})
    merged = MergedStorage([a, resource])
    assert merged.data_value("blob") == b"\x01"
    assert merged.string_value("text") == "hi"
    assert merged.has_value("text") is True
    assert len(merged.storages) == 2


def test_empty_merge():
    merged = MergedStorage([])
    assert merged.count == 0
    assert merged.dictionary == {}
    assert merged.value("anything") is None
