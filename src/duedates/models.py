from __future__ import annotations

from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from .schemas import DueDateInput, parse_due_date


# PUBLIC_INTERFACE
class DueDateRecord(BaseModel):
    """
    The due date attached to one task.

    Fields:
    - task_uid: Identifier of the owning task (JSON key 'taskUid'); never changes
    - due_date: Due datetime (JSON key 'dueDate'), normalized to a naive datetime

    Backends key every record by task_uid and hold at most one record per task.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    task_uid: UUID = Field(..., alias="taskUid")
    due_date: datetime = Field(..., alias="dueDate")

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, v: DueDateInput) -> datetime:
        return parse_due_date(v)


# JSON array of records as written by the file backend
RecordList = TypeAdapter(List[DueDateRecord])
