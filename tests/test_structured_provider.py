from __future__ import annotations

from pathlib import Path
from uuid import uuid4

import pytest
from sqlalchemy import text

from duedates.db import (
    StoreHandle,
    StructuredStorageProvider,
    TaskDueDateRow,
    close_store,
    get_store,
    init_store,
)
from duedates.errors import NotInitializedError, StorageIOError
from duedates.models import DueDateRecord


def test_constructing_without_shared_store_fails() -> None:
    with pytest.raises(NotInitializedError):
        StructuredStorageProvider()


def test_get_store_before_init_fails() -> None:
    with pytest.raises(NotInitializedError):
        get_store()


@pytest.mark.asyncio
async def test_providers_share_the_process_wide_store(tmp_path: Path) -> None:
    init_store(f"sqlite:///{tmp_path / 'nested' / 'duedates.db'}")
    writer = StructuredStorageProvider()
    reader = StructuredStorageProvider()
    record = DueDateRecord(task_uid=uuid4(), due_date="2099-03-01T07:45:00")

    await writer.save(record)

    assert await reader.load(record.task_uid) == record
    assert (tmp_path / "nested" / "duedates.db").exists()

    close_store()
    with pytest.raises(NotInitializedError):
        StructuredStorageProvider()


@pytest.mark.asyncio
async def test_update_mutates_existing_row(store: StoreHandle) -> None:
    provider = StructuredStorageProvider(store)
    task = uuid4()
    await provider.save(DueDateRecord(task_uid=task, due_date="2099-01-01"))
    row_id = store.session.query(TaskDueDateRow).one().id

    await provider.save(DueDateRecord(task_uid=task, due_date="2099-09-09"))

    rows = store.session.query(TaskDueDateRow).all()
    assert [(r.id, r.task_uid) for r in rows] == [(row_id, str(task))]
    assert rows[0].due_date.isoformat() == "2099-09-09T00:00:00"


@pytest.mark.asyncio
async def test_data_survives_reopening_the_store(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'duedates.db'}"
    record = DueDateRecord(task_uid=uuid4(), due_date="2099-10-10T10:10:00")

    first = StoreHandle(url)
    await StructuredStorageProvider(first).save(record)
    first.close()

    second = StoreHandle(url)
    try:
        assert await StructuredStorageProvider(second).load(record.task_uid) == record
    finally:
        second.close()


@pytest.mark.asyncio
async def test_backend_failure_surfaces_as_storage_io_error(store: StoreHandle) -> None:
    provider = StructuredStorageProvider(store)
    store.session.execute(text("DROP TABLE task_due_dates"))
    store.session.commit()

    with pytest.raises(StorageIOError):
        await provider.load(uuid4())
    with pytest.raises(StorageIOError):
        await provider.save(DueDateRecord(task_uid=uuid4(), due_date="2099-01-01"))
