"""Event data model for calboard."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from calboard.models.constants import DEFAULT_EVENT_CATEGORY, DEFAULT_EVENT_STATUS


class KanbanColumn(str, Enum):
    """Kanban column enumeration (derived from event fields, never stored)."""
    TODAY = "today"
    THIS_WEEK = "thisWeek"
    UPCOMING = "upcoming"
    BACKLOG = "backlog"
    NEEDS_ACTION = "needsAction"


# Canonical board order
KANBAN_COLUMNS = (
    KanbanColumn.TODAY,
    KanbanColumn.THIS_WEEK,
    KanbanColumn.UPCOMING,
    KanbanColumn.BACKLOG,
    KanbanColumn.NEEDS_ACTION,
)


def to_local_wall_clock(value: Optional[datetime]) -> Optional[datetime]:
    """Convert a timezone-aware datetime to naive local wall-clock time.

    Naive datetimes are already local and are returned unchanged.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


class EventCreate(BaseModel):
    """Request body for creating an event."""

    title: str = Field(..., min_length=1, description="Event title")
    description: Optional[str] = Field(None, description="Event description")
    start_time: datetime = Field(..., description="Event start (local wall-clock)")
    end_time: datetime = Field(..., description="Event end (local wall-clock)")
    location: Optional[str] = Field(None, description="Event location")
    category: str = Field(DEFAULT_EVENT_CATEGORY, description="Free-form category")
    status: str = Field(DEFAULT_EVENT_STATUS, description="Free-form status")
    needs_action: bool = Field(False, description="Whether the event is flagged as needing action")

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value):
        return to_local_wall_clock(value)

    class Config:
        """Pydantic configuration."""
        alias_generator = to_camel
        populate_by_name = True


class EventUpdate(BaseModel):
    """Partial update for an event (only fields that are set are applied)."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    needs_action: Optional[bool] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value):
        return to_local_wall_clock(value)

    class Config:
        """Pydantic configuration."""
        alias_generator = to_camel
        populate_by_name = True


class Event(BaseModel):
    """Canonical Event model."""

    id: str = Field(..., description="Unique event identifier (UUID v4)")
    title: str = Field(..., description="Event title")
    description: Optional[str] = Field(None, description="Event description")
    start_time: datetime = Field(..., description="Event start (local wall-clock)")
    end_time: datetime = Field(..., description="Event end (local wall-clock)")
    location: Optional[str] = Field(None, description="Event location")
    category: str = Field(DEFAULT_EVENT_CATEGORY, description="Free-form category")
    status: str = Field(DEFAULT_EVENT_STATUS, description="Free-form status")
    needs_action: bool = Field(False, description="Whether the event is flagged as needing action")

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value):
        return to_local_wall_clock(value)

    class Config:
        """Pydantic configuration."""
        alias_generator = to_camel
        populate_by_name = True
