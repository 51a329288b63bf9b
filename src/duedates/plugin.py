from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Union
from uuid import UUID

from .models import DueDateRecord
from .repositories import StorageProvider, get_provider
from .schemas import DueDateInput
from .settings import Settings, StorageType, get_settings

logger = logging.getLogger(__name__)

TaskId = Union[UUID, str]


def _as_uuid(task_uid: TaskId) -> UUID:
    return task_uid if isinstance(task_uid, UUID) else UUID(str(task_uid))


# PUBLIC_INTERFACE
class DueDatePlugin:
    """
    Facade the host application talks to.

    Lifecycle hooks (will_delete_task / did_delete_task) never raise: a failed
    cleanup is logged and the host's own deletion goes ahead. The get/set/clear
    operations used by the presentation layer propagate storage errors.
    While disabled every call is a no-op and storage is never touched.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        provider: Optional[StorageProvider] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._enabled = self._settings.enabled
        self._provider = provider
        if self._enabled:
            self._get_provider()
        logger.info(
            "DueDatePlugin initialized enabled=%s backend=%s",
            self._enabled,
            self._settings.storage_type.value,
        )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def backend(self) -> StorageType:
        return self._settings.storage_type

    @property
    def models(self) -> List[type]:
        """ORM classes this plugin contributes to the host's structured store."""
        from .db import TaskDueDateRow

        return [TaskDueDateRow]

    def set_enabled(self, enabled: bool) -> None:
        """Settings toggle ("Show Due Dates")."""
        if enabled != self._enabled:
            logger.info("DueDatePlugin %s", "enabled" if enabled else "disabled")
        self._enabled = enabled

    def _get_provider(self) -> StorageProvider:
        # Backend choice is fixed by the settings given at construction
        if self._provider is None:
            self._provider = get_provider(self._settings)
        return self._provider

    # ---- host lifecycle hooks ----

    async def will_delete_task(
        self,
        task_uid: TaskId,
        title: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Remove the task's due date before the host deletes the task itself."""
        if not self._enabled:
            return
        try:
            await self._get_provider().delete_by_task(_as_uuid(task_uid))
        except Exception:
            logger.exception("Could not remove due dates for task %s", task_uid)
            return
        logger.info("Removed due dates for task '%s' (%s)", title or "", task_uid)

    async def did_delete_task(self, task_uid: TaskId) -> None:
        if not self._enabled:
            return
        logger.info("Task %s deleted", task_uid)

    # ---- presentation layer ----

    async def get_due_date(self, task_uid: TaskId) -> Optional[DueDateRecord]:
        if not self._enabled:
            return None
        return await self._get_provider().load(_as_uuid(task_uid))

    async def set_due_date(self, task_uid: TaskId, due_date: Optional[DueDateInput]) -> Optional[DueDateRecord]:
        """
        Store due_date for the task and return the stored record.

        A None due_date clears the task's due date and returns None.
        """
        if not self._enabled:
            return None
        if due_date is None:
            await self.clear_due_date(task_uid)
            return None
        record = DueDateRecord(task_uid=_as_uuid(task_uid), due_date=due_date)
        await self._get_provider().save(record)
        return record

    async def clear_due_date(self, task_uid: TaskId) -> None:
        if not self._enabled:
            return
        await self._get_provider().delete_by_task(_as_uuid(task_uid))
