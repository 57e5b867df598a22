"""FastAPI web application for calboard."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional
from fastapi import Depends, FastAPI, Query, Response
from sqlalchemy.orm import Session

from calboard.api.errors import NotFoundError, ValidationFailure, register_error_handlers
from calboard.api.schemas import (
    BoardColumn,
    BoardResponse,
    EmailDraftResponse,
    GeneratedTasksResponse,
    ImportRequest,
    ImportResponse,
)
from calboard.database.database import get_db, init_db
from calboard.database.repository import EventRepository, TaskRepository
from calboard.engine import assistant
from calboard.engine.bucketing import (
    column_title,
    end_of_day,
    end_of_week,
    group_by_column,
    start_of_day,
    start_of_week,
)
from calboard.engine.free_slots import find_free_slots
from calboard.engine.importer import map_import_items
from calboard.integrations.llm_client import GenerationGateway, get_gateway
from calboard.models.event import Event, EventCreate, EventUpdate
from calboard.models.free_slot import FreeSlot
from calboard.models.generated import DailyPlan, WeekSummary
from calboard.models.task import Task, TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="calboard API",
    description="Personal calendar and kanban board with AI-assisted planning",
    version=VERSION,
    lifespan=lifespan,
)
register_error_handlers(app)


def _require_event(events: EventRepository, event_id: str) -> Event:
    event = events.get(event_id)
    if not event:
        raise NotFoundError("Event not found")
    return event


def _parse_day(value: Optional[str]) -> datetime:
    """Parse an ISO date or datetime query value (defaults to now)."""
    if not value:
        return datetime.now()
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationFailure(f"Invalid date: {value}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": VERSION}


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@app.get("/api/events", response_model=List[Event])
def list_events(db: Session = Depends(get_db)):
    """List all events."""
    return EventRepository(db).get_all()


@app.post("/api/events/import", response_model=ImportResponse, status_code=201)
def import_events(body: ImportRequest, db: Session = Depends(get_db)):
    """Import events from permissive JSON calendar items."""
    if not isinstance(body.events, list):
        raise ValidationFailure("Expected an array of events")

    batch = map_import_items(body.events)
    created = EventRepository(db).create_many(batch.events)
    logger.info(f"Imported {len(created)} events ({len(batch.errors)} rejected)")

    return ImportResponse(imported=len(created), events=created, errors=batch.errors)


@app.get("/api/events/{event_id}", response_model=Event)
def get_event(event_id: str, db: Session = Depends(get_db)):
    """Get a single event."""
    return _require_event(EventRepository(db), event_id)


@app.post("/api/events", response_model=Event, status_code=201)
def create_event(event: EventCreate, db: Session = Depends(get_db)):
    """Create an event."""
    return EventRepository(db).create(event)


@app.patch("/api/events/{event_id}", response_model=Event)
def update_event(event_id: str, changes: EventUpdate, db: Session = Depends(get_db)):
    """Partially update an event (last write wins)."""
    updated = EventRepository(db).update(event_id, changes)
    if not updated:
        raise NotFoundError("Event not found")
    return updated


@app.delete("/api/events/{event_id}", status_code=204)
def delete_event(event_id: str, db: Session = Depends(get_db)):
    """Delete an event and its tasks."""
    if not EventRepository(db).delete(event_id):
        raise NotFoundError("Event not found")
    return Response(status_code=204)


@app.get("/api/board", response_model=BoardResponse)
def get_board(db: Session = Depends(get_db)):
    """Kanban board computed from current event fields."""
    grouped = group_by_column(EventRepository(db).get_all(), datetime.now())
    return BoardResponse(
        columns=[
            BoardColumn(column=column, title=column_title(column), events=events)
            for column, events in grouped.items()
        ]
    )


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

@app.get("/api/tasks", response_model=List[Task])
def list_tasks(event_id: Optional[str] = Query(None, alias="eventId"), db: Session = Depends(get_db)):
    """List all tasks, or only those of one event."""
    tasks = TaskRepository(db)
    if event_id:
        return tasks.get_by_event(event_id)
    return tasks.get_all()


@app.get("/api/tasks/{event_id}", response_model=List[Task])
def list_tasks_for_event(event_id: str, db: Session = Depends(get_db)):
    """List the tasks of one event."""
    return TaskRepository(db).get_by_event(event_id)


@app.post("/api/tasks", response_model=Task, status_code=201)
def create_task(task: TaskCreate, db: Session = Depends(get_db)):
    """Create a task."""
    if task.event_id:
        _require_event(EventRepository(db), task.event_id)
    return TaskRepository(db).create(task)


@app.patch("/api/tasks/{task_id}", response_model=Task)
def update_task(task_id: str, changes: TaskUpdate, db: Session = Depends(get_db)):
    """Partially update a task."""
    updated = TaskRepository(db).update(task_id, changes)
    if not updated:
        raise NotFoundError("Task not found")
    return updated


@app.delete("/api/tasks/{task_id}", status_code=204)
def delete_task(task_id: str, db: Session = Depends(get_db)):
    """Delete a task."""
    if not TaskRepository(db).delete(task_id):
        raise NotFoundError("Task not found")
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Assistant
# ---------------------------------------------------------------------------

@app.post("/api/ai/generate-tasks/{event_id}", response_model=GeneratedTasksResponse)
def generate_tasks(
    event_id: str,
    db: Session = Depends(get_db),
    gateway: GenerationGateway = Depends(get_gateway),
):
    """Replace an event's tasks with a freshly generated batch."""
    event = _require_event(EventRepository(db), event_id)
    generated = assistant.suggest_tasks(event, gateway)
    tasks = TaskRepository(db).replace_for_event(event.id, generated)
    return GeneratedTasksResponse(tasks=tasks)


@app.post("/api/ai/week-summary", response_model=WeekSummary)
def week_summary(db: Session = Depends(get_db), gateway: GenerationGateway = Depends(get_gateway)):
    """Summarize the current ISO week."""
    now = datetime.now()
    events = EventRepository(db).get_starting_between(start_of_week(now), end_of_week(now))
    return assistant.summarize_week(events, gateway)


@app.post("/api/ai/daily-plan", response_model=DailyPlan)
def daily_plan(db: Session = Depends(get_db), gateway: GenerationGateway = Depends(get_gateway)):
    """Plan the current calendar day."""
    now = datetime.now()
    events = EventRepository(db).get_starting_between(start_of_day(now), end_of_day(now))
    return assistant.plan_day(events, gateway)


@app.post("/api/ai/draft-email/{event_id}", response_model=EmailDraftResponse)
def draft_email(
    event_id: str,
    db: Session = Depends(get_db),
    gateway: GenerationGateway = Depends(get_gateway),
):
    """Draft an email about an event."""
    event = _require_event(EventRepository(db), event_id)
    return EmailDraftResponse(email=assistant.draft_email(event, gateway))


@app.get("/api/ai/free-slots", response_model=List[FreeSlot])
def free_slots(date: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Free slots in the working-hours window of a day (defaults to today)."""
    day = _parse_day(date)
    return find_free_slots(EventRepository(db).get_all(), day)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
