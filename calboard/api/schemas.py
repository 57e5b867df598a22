"""Request/response models for the calboard API."""

from typing import Any, List
from pydantic import BaseModel, Field

from calboard.engine.importer import ImportFailure
from calboard.models.event import Event, KanbanColumn
from calboard.models.task import Task


class ImportRequest(BaseModel):
    """Bulk import body. Items are mapped permissively, so they stay untyped here."""
    events: Any = Field(None, description="Array of calendar items")


class ImportResponse(BaseModel):
    """Response for bulk event import."""
    imported: int
    events: List[Event]
    errors: List[ImportFailure] = Field(default_factory=list)


class GeneratedTasksResponse(BaseModel):
    """Response for task generation."""
    tasks: List[Task]


class EmailDraftResponse(BaseModel):
    """Response for email drafting."""
    email: str


class BoardColumn(BaseModel):
    """One kanban column with its events in start-time order."""
    column: KanbanColumn
    title: str
    events: List[Event]

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class BoardResponse(BaseModel):
    """The full kanban board."""
    columns: List[BoardColumn]
