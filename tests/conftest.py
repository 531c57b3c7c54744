"""Shared fixtures for the device cleanup tests."""

from typing import Dict, List

import pytest

from fakes import FakeDirectory, FakeInventory


@pytest.fixture
def journal() -> List[tuple]:
    return []


@pytest.fixture
def inventory(journal) -> FakeInventory:
    return FakeInventory(journal)


@pytest.fixture
def directory(journal) -> FakeDirectory:
    return FakeDirectory(journal)


@pytest.fixture
def graph_env(monkeypatch) -> Dict[str, str]:
    """Graph credentials supplied through the environment."""
    values = {
        "DEVICE_CLEANUP_TENANT_ID": "tenant-123",
        "DEVICE_CLEANUP_CLIENT_ID": "client-456",
        "DEVICE_CLEANUP_CLIENT_SECRET": "s3cret",
    }
    for key, value in values.items():
        monkeypatch.setenv(key, value)
    for key in ("DEVICE_CLEANUP_INPUT", "DEVICE_CLEANUP_OUTPUT", "DEVICE_CLEANUP_SETTINGS"):
        monkeypatch.delenv(key, raising=False)
    return values
