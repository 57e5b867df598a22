"""Models for assistant-generated content."""

from typing import List
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from calboard.models.task import TaskPriority


class GeneratedTask(BaseModel):
    """A task suggestion produced for an event (not yet persisted)."""
    title: str
    priority: TaskPriority = TaskPriority.MEDIUM

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class WeekSummary(BaseModel):
    """Summary of the current week's events."""
    summary: str
    highlights: List[str] = Field(default_factory=list)
    total_events: int = 0

    class Config:
        """Pydantic configuration."""
        alias_generator = to_camel
        populate_by_name = True


class DailyPlan(BaseModel):
    """Plan for the current day."""
    plan: str
    tasks: List[str] = Field(default_factory=list)
