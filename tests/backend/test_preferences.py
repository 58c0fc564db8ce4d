import logging

from kvstore_lib.storage import PreferencesDomain, PreferencesStorage


def test_for_identifier_layout(tmp_path):
    domain = PreferencesDomain.for_identifier("com.example.app", tmp_path)
    assert domain.path == tmp_path / "preferences" / "com.example.app.yml"


def test_instances_share_the_domain(tmp_path):
    path = tmp_path / "prefs.yml"
    first = PreferencesStorage(PreferencesDomain(path))
    second = PreferencesStorage(PreferencesDomain(path))
    first.set_string("name", "Ada")
    assert second.string_value("name") == "Ada"
    second.remove_value("name")
    assert first.has_value("name") is False


def test_persisted_as_yaml(tmp_path):
    path = tmp_path / "prefs.yml"
    storage = PreferencesStorage(PreferencesDomain(path))
    storage.set_values({"volume": 7, "muted": False})
    text = path.read_text(encoding="utf-8")
    assert "volume: 7" in text
    assert "muted: false" in text


def test_corrupt_file_reads_as_empty(tmp_path, caplog):
    caplog.set_level(logging.ERROR)
    path = tmp_path / "prefs.yml"
    path.write_text("key: [unclosed", encoding="utf-8")
    storage = PreferencesStorage(PreferencesDomain(path))
    assert storage.count == 0
    assert "treating as empty" in caplog.text
    # the next write replaces the corrupt document
    assert storage.set_int("fresh", 1) is True
    assert storage.dictionary == {"fresh": 1}


def test_non_mapping_document_reads_as_empty(tmp_path):
    path = tmp_path / "prefs.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    assert PreferencesStorage(PreferencesDomain(path)).dictionary == {}


def test_removing_missing_key_does_not_create_file(tmp_path):
    path = tmp_path / "prefs.yml"
    storage = PreferencesStorage(PreferencesDomain(path))
    assert storage.remove_value("absent") is True
    assert storage.remove_all() is True
    assert not path.exists()
