from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from duedates.db import StoreHandle, StructuredStorageProvider, close_store
from duedates.repositories import FileStorageProvider, StorageProvider


@pytest.fixture()
def store() -> Iterator[StoreHandle]:
    """Private in-memory structured store; never the process-wide one."""
    handle = StoreHandle("sqlite://")
    yield handle
    handle.close()


@pytest.fixture(autouse=True)
def _no_shared_store() -> Iterator[None]:
    close_store()
    yield
    close_store()


@pytest.fixture()
def file_provider(tmp_path: Path) -> FileStorageProvider:
    return FileStorageProvider(str(tmp_path), "duedates.json")


@pytest.fixture()
def structured_provider(store: StoreHandle) -> StructuredStorageProvider:
    return StructuredStorageProvider(store)


@pytest.fixture(params=["structured", "file"])
def provider(request: pytest.FixtureRequest) -> StorageProvider:
    """Each contract test runs once per backend."""
    return request.getfixturevalue(f"{request.param}_provider")
