"""Tests for the configuration layer."""

from pathlib import Path

import pytest

from device_cleanup.config import Config, ConfigError
from device_cleanup.models.device import EMPTY_GUID, InventoryRecord


class StubCredentialManager:
    def __init__(self, secret=None):
        self.secret = secret
        self.requested = []

    def get_credential(self, username):
        self.requested.append(username)
        return self.secret


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("DEVICE_CLEANUP_TENANT_ID", "DEVICE_CLEANUP_CLIENT_ID",
                "DEVICE_CLEANUP_CLIENT_SECRET", "DEVICE_CLEANUP_INPUT",
                "DEVICE_CLEANUP_OUTPUT", "DEVICE_CLEANUP_SETTINGS"):
        monkeypatch.delenv(key, raising=False)


def test_settings_file_loaded(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "input_path: in.txt\n"
        "output_path: out.csv\n"
        "graph:\n"
        "  tenant_id: t-1\n"
        "  client_id: c-1\n"
        "  timeout: 12\n",
        encoding="utf-8",
    )

    config = Config(settings_path=str(path), credential_manager=StubCredentialManager())

    assert config.input_path == Path("in.txt")
    assert config.output_path == Path("out.csv")
    assert config.tenant_id == "t-1"
    assert config.graph_timeout == 12.0
    assert config.graph_endpoint == "https://graph.microsoft.com/v1.0"


def test_environment_overrides_settings(monkeypatch):
    monkeypatch.setenv("DEVICE_CLEANUP_TENANT_ID", "env-tenant")
    config = Config(settings={"graph": {"tenant_id": "file-tenant"}},
                    credential_manager=StubCredentialManager())

    assert config.tenant_id == "env-tenant"


def test_client_secret_from_keyring():
    keyring = StubCredentialManager("from-keyring")
    config = Config(settings={"graph": {"tenant_id": "t", "client_id": "c-1"}},
                    credential_manager=keyring)

    assert config.get_client_secret() == "from-keyring"
    assert config.get_client_secret() == "from-keyring"
    assert keyring.requested == ["c-1"]
    assert config.validate() == []


def test_client_secret_env_wins(monkeypatch):
    monkeypatch.setenv("DEVICE_CLEANUP_CLIENT_SECRET", "from-env")
    keyring = StubCredentialManager("from-keyring")
    config = Config(settings={"graph": {"client_id": "c-1"}}, credential_manager=keyring)

    assert config.get_client_secret() == "from-env"
    assert keyring.requested == []


def test_require_valid_lists_missing_credentials():
    config = Config(settings={}, credential_manager=StubCredentialManager())

    assert len(config.validate()) == 3
    with pytest.raises(ConfigError):
        config.require_valid()


def test_inventory_record_from_graph_json():
    record = InventoryRecord.model_validate(
        {"id": "i-1", "deviceName": "X", "azureADDeviceId": EMPTY_GUID, "serialNumber": "S"}
    )

    assert record.device_name == "X"
    assert record.directory_device_id is None
