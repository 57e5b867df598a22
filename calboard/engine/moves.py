"""Move rules for kanban drops and calendar drags.

The same functions compute both the speculative local state and the body of
the update request, so the two can never drift apart.

Column drops (all at COLUMN_DROP_HOUR local time):
- today        -> today
- thisWeek     -> the day after today
- upcoming     -> the day after the current week ends (next Monday)
- backlog      -> now + BACKLOG_OFFSET_DAYS
- needsAction  -> start unchanged, needs_action set
Every move preserves the event's duration. Only needsAction sets the flag;
every other column clears it.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Union

from calboard.engine.bucketing import end_of_day, end_of_week
from calboard.models.event import Event, EventUpdate, KanbanColumn
from calboard.models.constants import COLUMN_DROP_HOUR, BACKLOG_OFFSET_DAYS


def _at_drop_hour(dt: datetime) -> datetime:
    return dt.replace(hour=COLUMN_DROP_HOUR, minute=0, second=0, microsecond=0)


def target_start_for_column(column: KanbanColumn, current_start: datetime, now: datetime) -> datetime:
    """Start time an event gets when dropped into a column."""
    column = KanbanColumn(column)

    if column == KanbanColumn.TODAY:
        return _at_drop_hour(now)
    if column == KanbanColumn.THIS_WEEK:
        return _at_drop_hour(end_of_day(now) + timedelta(days=1))
    if column == KanbanColumn.UPCOMING:
        return _at_drop_hour(end_of_week(now) + timedelta(days=1))
    if column == KanbanColumn.BACKLOG:
        return _at_drop_hour(now + timedelta(days=BACKLOG_OFFSET_DAYS))
    # needsAction keeps its place in time
    return current_start


def plan_column_move(event: Event, column: KanbanColumn, now: Optional[datetime] = None) -> EventUpdate:
    """Build the update that moves an event into a kanban column.

    Args:
        event: Event being dropped
        column: Destination column
        now: Reference moment (defaults to the current local time)

    Returns:
        EventUpdate carrying start_time, end_time and needs_action
    """
    if now is None:
        now = datetime.now()

    duration = event.end_time - event.start_time
    new_start = target_start_for_column(column, event.start_time, now)

    return EventUpdate(
        start_time=new_start,
        end_time=new_start + duration,
        needs_action=KanbanColumn(column) == KanbanColumn.NEEDS_ACTION,
    )


def plan_date_move(event: Event, new_date: Union[date, datetime]) -> EventUpdate:
    """Build the update that drags an event onto another calendar date.

    The wall-clock hour and minute are kept (seconds dropped) and the duration
    is preserved. needs_action is left untouched.
    """
    if isinstance(new_date, datetime):
        new_date = new_date.date()

    duration = event.end_time - event.start_time
    new_start = datetime.combine(new_date, event.start_time.time()).replace(second=0, microsecond=0)

    return EventUpdate(start_time=new_start, end_time=new_start + duration)


def apply_update(event: Event, update: EventUpdate) -> Event:
    """Return a copy of the event with the update's set fields applied."""
    changes = update.model_dump(exclude_unset=True)
    return event.model_copy(update=changes)
