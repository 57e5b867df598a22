"""Task data model for calboard."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from calboard.models.event import to_local_wall_clock


class TaskPriority(str, Enum):
    """Task priority enumeration."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TaskCreate(BaseModel):
    """Request body for creating a task."""

    event_id: Optional[str] = Field(None, description="Owning event ID")
    title: str = Field(..., min_length=1, description="Task title")
    completed: bool = Field(False, description="Whether the task is done")
    priority: TaskPriority = Field(TaskPriority.MEDIUM, description="Task priority")
    due_date: Optional[datetime] = Field(None, description="Optional due date")

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value):
        return to_local_wall_clock(value)

    class Config:
        """Pydantic configuration."""
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True


class TaskUpdate(BaseModel):
    """Partial update for a task."""

    title: Optional[str] = Field(None, min_length=1)
    completed: Optional[bool] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value):
        return to_local_wall_clock(value)

    class Config:
        """Pydantic configuration."""
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True


class Task(BaseModel):
    """Canonical Task model."""

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    event_id: Optional[str] = Field(None, description="Owning event ID (tasks are deleted with their event)")
    title: str = Field(..., description="Task title")
    completed: bool = Field(False, description="Whether the task is done")
    priority: TaskPriority = Field(TaskPriority.MEDIUM, description="Task priority")
    due_date: Optional[datetime] = Field(None, description="Optional due date (unused by generation)")

    class Config:
        """Pydantic configuration."""
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True
