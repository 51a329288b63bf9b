from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Shared type for incoming due_date which can be a date, datetime, or ISO8601 string
DueDateInput = Union[date, datetime, str]


# PUBLIC_INTERFACE
def parse_due_date(value: Optional[DueDateInput]) -> Optional[datetime]:
    """
    Normalize due_date input into a naive datetime.
    - If value is a string, attempt to parse via datetime.fromisoformat; if time is missing, set to 00:00.
    - If value is a date (not datetime), convert to datetime at 00:00.
    - If value is an aware datetime, convert it to UTC and drop the tzinfo so both
      storage backends hold the same value.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, 0, 0, 0)

    if isinstance(value, str):
        s = value.strip()
        try:
            d = date.fromisoformat(s)
            return datetime(d.year, d.month, d.day, 0, 0, 0)
        except ValueError:
            pass
        try:
            return parse_due_date(datetime.fromisoformat(s))
        except ValueError as e:
            raise ValueError(
                "Invalid due_date format. Use ISO8601 date or datetime string (e.g., '2025-01-31' or '2025-01-31T13:45:00')."
            ) from e

    raise ValueError("Invalid type for due_date; expected date, datetime, or ISO8601 string.")


# PUBLIC_INTERFACE
class DueDateIn(BaseModel):
    """
    Body for setting a task's due date. A null due_date clears it.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "due_date": "2025-02-01",
            }
        }
    )

    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time of the task. Accepts ISO8601 date or datetime; dates are set to 00:00. Null clears it.",
    )

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        """
        Normalize due_date from str/date/datetime to datetime.
        """
        return parse_due_date(v)


# PUBLIC_INTERFACE
class DueDateOut(BaseModel):
    """
    Schema returned by the API for a task's due date.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "task_uid": "3f1b2c4d-5e6f-4a8b-9c0d-1e2f3a4b5c6d",
                "due_date": "2025-02-01T00:00:00",
            }
        }
    )

    task_uid: UUID = Field(..., description="Identifier of the owning task")
    due_date: datetime = Field(..., description="Due date/time of the task as an ISO8601 datetime")
