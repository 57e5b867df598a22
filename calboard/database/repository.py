"""Repository layer for database operations."""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from calboard.models.event import Event, EventCreate, EventUpdate
from calboard.models.task import Task, TaskCreate, TaskUpdate
from calboard.models.generated import GeneratedTask
from calboard.database.models import EventDB, TaskDB, enum_to_value

logger = logging.getLogger(__name__)

# Columns that must never be cleared by a partial update
_REQUIRED_EVENT_FIELDS = {"title", "start_time", "end_time", "category", "status", "needs_action"}
_REQUIRED_TASK_FIELDS = {"title", "completed", "priority"}


class EventRepository:
    """Repository for Event database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _get_db(self, event_id: str) -> Optional[EventDB]:
        return self.db.query(EventDB).filter(EventDB.id == event_id).first()

    def create(self, event: EventCreate) -> Event:
        """Create a new event."""
        event_db = EventDB.from_create(event)
        try:
            self.db.add(event_db)
            self.db.commit()
            self.db.refresh(event_db)
            logger.debug(f"Created event {event_db.id}: {event.title[:50]}")
            return event_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create event: {type(e).__name__}: {str(e)}")
            raise

    def create_many(self, events: List[EventCreate]) -> List[Event]:
        """Create several events in a single commit (used by bulk import)."""
        rows = [EventDB.from_create(event) for event in events]
        if not rows:
            return []
        try:
            self.db.add_all(rows)
            self.db.commit()
            for row in rows:
                self.db.refresh(row)
            logger.debug(f"Created {len(rows)} events")
            return [row.to_pydantic() for row in rows]
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create {len(rows)} events: {type(e).__name__}: {str(e)}")
            raise

    def get(self, event_id: str) -> Optional[Event]:
        """Get event by ID."""
        event_db = self._get_db(event_id)
        return event_db.to_pydantic() if event_db else None

    def get_all(self) -> List[Event]:
        """Get all events sorted by start time (earliest first)."""
        events_db = self.db.query(EventDB).order_by(EventDB.start_time, EventDB.id).all()
        return [event_db.to_pydantic() for event_db in events_db]

    def get_starting_between(self, start: datetime, end: datetime) -> List[Event]:
        """Get events whose start time is within [start, end], sorted by start time."""
        events_db = self.db.query(EventDB).filter(
            EventDB.start_time >= start,
            EventDB.start_time <= end,
        ).order_by(EventDB.start_time, EventDB.id).all()
        return [event_db.to_pydantic() for event_db in events_db]

    def update(self, event_id: str, changes: EventUpdate) -> Optional[Event]:
        """Apply a partial update (last write wins). Returns None if the event does not exist."""
        event_db = self._get_db(event_id)
        if not event_db:
            return None

        for field, value in changes.model_dump(exclude_unset=True).items():
            if value is None and field in _REQUIRED_EVENT_FIELDS:
                continue
            setattr(event_db, field, value)

        try:
            self.db.commit()
            self.db.refresh(event_db)
            logger.debug(f"Updated event {event_id}")
            return event_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update event {event_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, event_id: str) -> bool:
        """Delete an event and, by cascade, its tasks."""
        event_db = self._get_db(event_id)
        if not event_db:
            return False

        try:
            self.db.delete(event_db)
            self.db.commit()
            logger.debug(f"Deleted event {event_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete event {event_id}: {type(e).__name__}: {str(e)}")
            raise


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _get_db(self, task_id: str) -> Optional[TaskDB]:
        return self.db.query(TaskDB).filter(TaskDB.id == task_id).first()

    def create(self, task: TaskCreate) -> Task:
        """Create a new task."""
        task_db = TaskDB.from_create(task)
        try:
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task_db.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task: {type(e).__name__}: {str(e)}")
            raise

    def get(self, task_id: str) -> Optional[Task]:
        """Get task by ID."""
        task_db = self._get_db(task_id)
        return task_db.to_pydantic() if task_db else None

    def get_all(self) -> List[Task]:
        """Get all tasks."""
        tasks_db = self.db.query(TaskDB).order_by(TaskDB.event_id, TaskDB.id).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def get_by_event(self, event_id: str) -> List[Task]:
        """Get all tasks belonging to an event."""
        tasks_db = self.db.query(TaskDB).filter(TaskDB.event_id == event_id).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def update(self, task_id: str, changes: TaskUpdate) -> Optional[Task]:
        """Apply a partial update. Returns None if the task does not exist."""
        task_db = self._get_db(task_id)
        if not task_db:
            return None

        for field, value in changes.model_dump(exclude_unset=True).items():
            if value is None and field in _REQUIRED_TASK_FIELDS:
                continue
            if field == "priority":
                value = enum_to_value(value)
            setattr(task_db, field, value)

        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task_id}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, task_id: str) -> bool:
        """Delete a task by ID."""
        task_db = self._get_db(task_id)
        if not task_db:
            return False

        try:
            self.db.delete(task_db)
            self.db.commit()
            logger.debug(f"Deleted task {task_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete_by_event(self, event_id: str) -> int:
        """Delete every task belonging to an event. Returns the number removed."""
        try:
            affected = (
                self.db.query(TaskDB)
                .filter(TaskDB.event_id == event_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            logger.debug(f"Deleted {affected} tasks for event {event_id}")
            return int(affected)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete tasks for event {event_id}: {type(e).__name__}: {str(e)}")
            raise

    def replace_for_event(self, event_id: str, generated: List[GeneratedTask]) -> List[Task]:
        """Replace an event's tasks with a new batch (delete then insert, no merge)."""
        rows = [
            TaskDB.from_create(TaskCreate(event_id=event_id, title=g.title, priority=g.priority, completed=False))
            for g in generated
        ]
        try:
            self.db.query(TaskDB).filter(TaskDB.event_id == event_id).delete(synchronize_session=False)
            self.db.add_all(rows)
            self.db.commit()
            for row in rows:
                self.db.refresh(row)
            logger.debug(f"Replaced tasks for event {event_id} with {len(rows)} generated tasks")
            return [row.to_pydantic() for row in rows]
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to replace tasks for event {event_id}: {type(e).__name__}: {str(e)}")
            raise
