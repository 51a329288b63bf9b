from __future__ import annotations

import os

import pytest

from duedates.db import StructuredStorageProvider, init_store
from duedates.repositories import FileStorageProvider, get_provider
from duedates.settings import StorageType, get_settings

_VARS = (
    "DUE_DATES_ENABLED",
    "DUE_DATES_STORAGE",
    "DUE_DATES_DATABASE_URL",
    "DUE_DATES_DOCUMENTS_DIR",
    "DUE_DATES_FILENAME",
    "LOG_LEVEL",
    "CORS_ALLOW_ORIGINS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = get_settings()
    assert s.enabled is True
    assert s.storage_type is StorageType.FILE
    assert s.database_url == "sqlite:///./data/duedates.db"
    assert s.file_path == os.path.join("./data", "duedates.json")
    assert s.log_level == "INFO"
    assert s.cors_allow_origins == ["*"]


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("structured", StorageType.STRUCTURED),
        ("SQLite", StorageType.STRUCTURED),
        ("database", StorageType.STRUCTURED),
        ("json", StorageType.FILE),
        ("file", StorageType.FILE),
        ("carrier-pigeon", StorageType.FILE),
    ],
)
def test_storage_selection(monkeypatch: pytest.MonkeyPatch, raw: str, expected: StorageType) -> None:
    monkeypatch.setenv("DUE_DATES_STORAGE", raw)
    assert get_settings().storage_type is expected


@pytest.mark.parametrize("raw,expected", [("false", False), ("0", False), ("yes", True), ("maybe", True)])
def test_enabled_flag(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("DUE_DATES_ENABLED", raw)
    assert get_settings().enabled is expected


def test_origins_list(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.example, http://b.example,")
    assert get_settings().cors_allow_origins == ["http://a.example", "http://b.example"]


def test_factory_builds_file_provider(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("DUE_DATES_DOCUMENTS_DIR", str(tmp_path))
    monkeypatch.setenv("DUE_DATES_FILENAME", "dates.json")

    provider = get_provider()
    assert isinstance(provider, FileStorageProvider)
    assert provider.path == os.path.join(str(tmp_path), "dates.json")


def test_factory_builds_structured_provider(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DUE_DATES_STORAGE", "structured")
    init_store("sqlite://")

    assert isinstance(get_provider(), StructuredStorageProvider)
