"""Todo API schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from teamtodo.utils.clock import to_naive_utc


class CreateTodoRequest(BaseModel):
    """POST /api/todos request."""

    title: str = Field(min_length=1)
    description: str | None = None
    due_date: datetime | None = None

    @field_validator("due_date", mode="after")
    @classmethod
    def normalize_due_date(cls, v: datetime | None) -> datetime | None:
        """Store due dates as naive UTC."""
        return to_naive_utc(v) if v is not None else None


class UpdateTodoRequest(BaseModel):
    """PATCH /api/todos/{id} - only fields sent are changed."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    status: Literal["PENDING", "COMPLETED"] | None = None
    due_date: datetime | None = None

    @field_validator("due_date", mode="after")
    @classmethod
    def normalize_due_date(cls, v: datetime | None) -> datetime | None:
        return to_naive_utc(v) if v is not None else None


class TodoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None
    status: str
    due_date: datetime | None
    created_by_id: str
    created_at: datetime
    updated_at: datetime
