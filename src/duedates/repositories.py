from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional, Tuple
from uuid import UUID

from pydantic import ValidationError

from .errors import DecodeError, StorageIOError
from .models import DueDateRecord, RecordList
from .settings import Settings, StorageType, get_settings

if TYPE_CHECKING:
    from .db import StoreHandle

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class StorageProvider(ABC):
    """Abstract storage contract for due date backends."""

    @abstractmethod
    async def load(self, task_uid: UUID) -> Optional[DueDateRecord]:
        """Return the record for task_uid, or None if the task has no due date."""

    @abstractmethod
    async def save(self, record: DueDateRecord) -> None:
        """Insert the record, or replace the due date of the existing record for its task."""

    @abstractmethod
    async def delete_by_task(self, task_uid: UUID) -> None:
        """Remove any record for task_uid. Removing a missing record is a no-op."""


class FileStorageProvider(StorageProvider):
    """
    Stores every record in one JSON array document.

    Reads on load are strict: an undecodable document raises DecodeError.
    Save and delete treat an undecodable document as empty so fresh data can
    still be written over it. Each rewrite goes to a temporary file that is
    then renamed over the document, and an asyncio.Lock serializes the
    read-modify-write sequence within the process.
    """

    def __init__(self, documents_dir: str = "./data", filename: str = "duedates.json") -> None:
        os.makedirs(documents_dir or ".", exist_ok=True)
        self._path = os.path.join(documents_dir, filename)
        self._lock = asyncio.Lock()
        logger.debug("FileStorageProvider document=%s", self._path)

    @property
    def path(self) -> str:
        return self._path

    def _read_bytes(self) -> Optional[bytes]:
        try:
            with open(self._path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageIOError(f"Could not read {self._path}: {e}") from e

    def _decode(self, data: bytes) -> List[DueDateRecord]:
        try:
            return RecordList.validate_json(data)
        except ValidationError as e:
            raise DecodeError(f"Malformed due date document {self._path}: {e.error_count()} error(s)") from e

    def _read_lenient(self) -> Tuple[List[DueDateRecord], bool]:
        """Return (records, clean); clean is False when the document had to be discarded."""
        data = self._read_bytes()
        if data is None:
            return [], True
        try:
            return self._decode(data), True
        except DecodeError:
            logger.warning("Discarding undecodable due date document %s", self._path)
            return [], False

    def _write(self, records: List[DueDateRecord]) -> None:
        payload = RecordList.dump_json(records, by_alias=True, indent=2)
        tmp = self._path + ".tmp"
        try:
            with open(tmp, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self._path)
        except OSError as e:
            raise StorageIOError(f"Could not write {self._path}: {e}") from e
        finally:
            if os.path.exists(tmp):
                with contextlib.suppress(OSError):
                    os.remove(tmp)

    def _load_sync(self, task_uid: UUID) -> Optional[DueDateRecord]:
        data = self._read_bytes()
        if data is None:
            return None
        for record in self._decode(data):
            if record.task_uid == task_uid:
                return record
        return None

    def _save_sync(self, record: DueDateRecord) -> None:
        records, _ = self._read_lenient()
        for i, existing in enumerate(records):
            if existing.task_uid == record.task_uid:
                records[i] = record
                break
        else:
            records.append(record)
        self._write(records)

    def _delete_sync(self, task_uid: UUID) -> int:
        records, clean = self._read_lenient()
        kept = [r for r in records if r.task_uid != task_uid]
        removed = len(records) - len(kept)
        # Nothing to drop from a clean document: leave the file untouched
        if removed or not clean:
            self._write(kept)
        return removed

    async def load(self, task_uid: UUID) -> Optional[DueDateRecord]:
        return await asyncio.to_thread(self._load_sync, task_uid)

    async def save(self, record: DueDateRecord) -> None:
        async with self._lock:
            await asyncio.to_thread(self._save_sync, record)
        logger.debug("Saved due date task=%s due=%s", record.task_uid, record.due_date.isoformat())

    async def delete_by_task(self, task_uid: UUID) -> None:
        async with self._lock:
            removed = await asyncio.to_thread(self._delete_sync, task_uid)
        logger.debug("Deleted %d due date record(s) for task=%s", removed, task_uid)


# PUBLIC_INTERFACE
def get_provider(settings: Optional[Settings] = None, store: Optional["StoreHandle"] = None) -> StorageProvider:
    """
    Factory to return the storage provider selected by settings.
    - file: FileStorageProvider over <documents_dir>/<filename>
    - structured: StructuredStorageProvider over the given store handle, or the
      shared one set up by db.init_store(); raises NotInitializedError if neither exists
    """
    settings = settings or get_settings()
    if settings.storage_type is StorageType.STRUCTURED:
        from .db import StructuredStorageProvider

        return StructuredStorageProvider(store)
    return FileStorageProvider(settings.documents_dir, settings.filename)
