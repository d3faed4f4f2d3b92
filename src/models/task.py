"""Task models."""

from enum import Enum
from typing import Optional, Any
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskStatus(str, Enum):
    """Task lifecycle status."""
    PENDING = "pending"
    COMPLETED = "completed"


class TaskType(str, Enum):
    """Kinds of follow-up a task represents."""
    CALL = "call"
    EMAIL = "email"
    REVIEW = "review"


class Task(BaseModel):
    """Task row as stored in the `tasks` table."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Task ID")
    description: Optional[str] = Field(None, description="Task title/description")
    related_id: str = Field(..., description="Parent application ID")
    due_at: datetime = Field(..., description="Due timestamp")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Status: pending, completed")
    type: TaskType = Field(default=TaskType.CALL, description="Type: call, email, review")
    tenant_id: str = Field(..., description="Tenant ID inherited from the parent application")

    @field_validator("due_at")
    @classmethod
    def ensure_timezone(cls, value: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED


class CreateTaskRequest(BaseModel):
    """Incoming task creation payload.

    Values are kept raw; validation order and messages are owned by the
    task creator. Unknown keys (including any client-supplied tenant_id)
    are dropped.
    """
    model_config = ConfigDict(extra="ignore")

    application_id: Optional[Any] = None
    task_type: Optional[Any] = None
    due_at: Optional[Any] = None
    title: Optional[Any] = None
    description: Optional[Any] = None


class CreateTaskResponse(BaseModel):
    """Successful task creation response body."""
    success: bool = True
    task_id: str
