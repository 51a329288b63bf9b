from __future__ import annotations

import logging
import os
from typing import List, Optional
from uuid import UUID

from sqlalchemy import Column, DateTime, Integer, String, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .errors import NotInitializedError, StorageIOError
from .models import DueDateRecord
from .repositories import StorageProvider

logger = logging.getLogger(__name__)

Base = declarative_base()


class TaskDueDateRow(Base):
    __tablename__ = "task_due_dates"
    id = Column(Integer, primary_key=True, autoincrement=True)
    task_uid = Column(String(36), nullable=False, unique=True, index=True)
    due_date = Column(DateTime, nullable=False)


# PUBLIC_INTERFACE
class StoreHandle:
    """
    Engine plus the single session every structured provider shares.

    The tables are created on construction; there is no migration step.
    """

    def __init__(self, url: str) -> None:
        parsed = make_url(url)
        kwargs: dict = {}
        if parsed.get_backend_name() == "sqlite":
            kwargs["connect_args"] = {"check_same_thread": False}
            if parsed.database in (None, "", ":memory:"):
                # One connection, otherwise every checkout sees a fresh empty database
                kwargs["poolclass"] = StaticPool
            else:
                os.makedirs(os.path.dirname(parsed.database) or ".", exist_ok=True)
        self.url = url
        self.engine = create_engine(url, **kwargs)
        Base.metadata.create_all(bind=self.engine)
        self.session: Session = sessionmaker(bind=self.engine, expire_on_commit=False)()

    def close(self) -> None:
        self.session.close()
        self.engine.dispose()


_shared: Optional[StoreHandle] = None


# PUBLIC_INTERFACE
def init_store(url: str) -> StoreHandle:
    """Open the process-wide store handle, replacing any previous one."""
    global _shared
    if _shared is not None:
        _shared.close()
    _shared = StoreHandle(url)
    logger.info("Structured store ready url=%s", _shared.engine.url.render_as_string(hide_password=True))
    return _shared


# PUBLIC_INTERFACE
def get_store() -> StoreHandle:
    """Return the process-wide store handle; NotInitializedError if init_store() never ran."""
    if _shared is None:
        raise NotInitializedError("Structured store not initialized; call init_store() at startup")
    return _shared


# PUBLIC_INTERFACE
def close_store() -> None:
    global _shared
    if _shared is not None:
        _shared.close()
        _shared = None


def _to_record(row: TaskDueDateRow) -> DueDateRecord:
    return DueDateRecord(task_uid=UUID(row.task_uid), due_date=row.due_date)


class StructuredStorageProvider(StorageProvider):
    """
    Due date storage over the SQLAlchemy session of a StoreHandle.

    Without an explicit handle the shared one from init_store() is used.
    """

    def __init__(self, store: Optional[StoreHandle] = None) -> None:
        self._store = store if store is not None else get_store()

    @property
    def _session(self) -> Session:
        return self._store.session

    def _rows(self, task_uid: UUID) -> List[TaskDueDateRow]:
        try:
            return (
                self._session.query(TaskDueDateRow)
                .filter(TaskDueDateRow.task_uid == str(task_uid))
                .all()
            )
        except SQLAlchemyError as e:
            self._session.rollback()
            raise StorageIOError(f"Due date query failed: {e}") from e

    def _commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise StorageIOError(f"Due date commit failed: {e}") from e

    async def load(self, task_uid: UUID) -> Optional[DueDateRecord]:
        rows = self._rows(task_uid)
        return _to_record(rows[0]) if rows else None

    async def save(self, record: DueDateRecord) -> None:
        rows = self._rows(record.task_uid)
        if rows:
            # Tracked by the session; the commit flushes the change
            rows[0].due_date = record.due_date
        else:
            self._session.add(TaskDueDateRow(task_uid=str(record.task_uid), due_date=record.due_date))
        self._commit()
        logger.debug("Saved due date task=%s due=%s", record.task_uid, record.due_date.isoformat())

    async def delete_by_task(self, task_uid: UUID) -> None:
        rows = self._rows(task_uid)
        for row in rows:
            self._session.delete(row)
        self._commit()
        logger.debug("Deleted %d due date record(s) for task=%s", len(rows), task_uid)
