from pathlib import Path

import pytest

from kvstore_lib.config import StorageConfig, load_config
from kvstore_lib.config.config import ENV_VAULT_KEY, ENV_VAULT_PASSWORD
from kvstore_lib.storage.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv(ENV_VAULT_KEY, raising=False)
    monkeypatch.delenv(ENV_VAULT_PASSWORD, raising=False)


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_config(tmp_path / "absent.yml")
    assert cfg == StorageConfig()
    assert cfg.vault_path == Path("data") / "vault.bin"


def test_values_from_file(tmp_path):
    path = tmp_path / "storage_config.yml"
    path.write_text(
        "data_dir: /srv/app\n"
        "app_identifier: com.example\n"
        "debounce_interval: 0.25\n"
        "vault_file: /secure/vault.bin\n",
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.app_identifier == "com.example"
    assert cfg.debounce_interval == 0.25
    assert cfg.vault_path == Path("/secure/vault.bin")
    assert cfg.cloud_path == Path("/srv/app/cloud")


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "storage_config.yml"
    path.write_text("vault_password: from-file\n", encoding="utf-8")
    monkeypatch.setenv(ENV_VAULT_PASSWORD, "from-env")
    monkeypatch.setenv(ENV_VAULT_KEY, "key-from-env")
    cfg = load_config(path)
    assert cfg.vault_password == "from-env"
    assert cfg.vault_key == "key-from-env"


def test_unknown_keys_are_ignored(tmp_path, caplog):
    path = tmp_path / "storage_config.yml"
    path.write_text("colour: blue\n", encoding="utf-8")
    assert load_config(path) == StorageConfig()
    assert "colour" in caplog.text


@pytest.mark.parametrize(
    "content",
    ["data_dir: [unclosed\n", "- a list\n", "debounce_interval: soon\n", "debounce_interval: -1\n"],
)
def test_invalid_config(tmp_path, content):
    path = tmp_path / "storage_config.yml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)
