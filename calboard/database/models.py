"""SQLAlchemy database models for calboard."""

from typing import Union, TypeVar
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from calboard.database.database import Base
from calboard.models.constants import DEFAULT_EVENT_CATEGORY, DEFAULT_EVENT_STATUS
from calboard.models.task import TaskPriority

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string)."""
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


class EventDB(Base):
    """Database model for Event."""

    __tablename__ = "events"

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # Basic fields
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    location = Column(String, nullable=True)
    category = Column(String, nullable=False, default=DEFAULT_EVENT_CATEGORY)
    status = Column(String, nullable=False, default=DEFAULT_EVENT_STATUS)

    # Local wall-clock timestamps (naive)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)

    # Flags
    needs_action = Column(Boolean, nullable=False, default=False)

    # Deleting an event deletes its tasks
    tasks = relationship(
        "TaskDB",
        back_populates="event",
        cascade="all, delete-orphan",
    )

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from calboard.models.event import Event
        return Event(
            id=self.id,
            title=self.title,
            description=self.description,
            start_time=self.start_time,
            end_time=self.end_time,
            location=self.location,
            category=self.category or DEFAULT_EVENT_CATEGORY,
            status=self.status or DEFAULT_EVENT_STATUS,
            needs_action=bool(self.needs_action),
        )

    @classmethod
    def from_create(cls, event):
        """Create database model from an EventCreate."""
        return cls(
            id=str(uuid.uuid4()),
            title=event.title,
            description=event.description,
            start_time=event.start_time,
            end_time=event.end_time,
            location=event.location,
            category=event.category,
            status=event.status,
            needs_action=event.needs_action,
        )


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "tasks"

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # Owning event
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=True, index=True)

    title = Column(String, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    priority = Column(String, nullable=False, default=TaskPriority.MEDIUM.value)
    due_date = Column(DateTime, nullable=True)

    event = relationship("EventDB", back_populates="tasks")

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from calboard.models.task import Task
        priority = (self.priority or "").lower()
        if priority not in {p.value for p in TaskPriority}:
            priority = TaskPriority.MEDIUM.value
        return Task(
            id=self.id,
            event_id=self.event_id,
            title=self.title,
            completed=bool(self.completed),
            priority=priority,
            due_date=self.due_date,
        )

    @classmethod
    def from_create(cls, task):
        """Create database model from a TaskCreate."""
        return cls(
            id=str(uuid.uuid4()),
            event_id=task.event_id,
            title=task.title,
            completed=task.completed,
            priority=enum_to_value(task.priority),
            due_date=task.due_date,
        )
