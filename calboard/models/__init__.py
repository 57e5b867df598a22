"""Data models for calboard."""

from calboard.models.event import Event, EventCreate, EventUpdate, KanbanColumn, KANBAN_COLUMNS
from calboard.models.task import Task, TaskCreate, TaskUpdate, TaskPriority
from calboard.models.free_slot import FreeSlot
from calboard.models.generated import GeneratedTask, WeekSummary, DailyPlan

__all__ = [
    "Event",
    "EventCreate",
    "EventUpdate",
    "KanbanColumn",
    "KANBAN_COLUMNS",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskPriority",
    "FreeSlot",
    "GeneratedTask",
    "WeekSummary",
    "DailyPlan",
]
