"""Kanban bucketing for calboard.

Maps an event to exactly one kanban column from its needs-action flag and
its start time relative to "now". Columns are derived on every read and are
never persisted, so a moving clock changes membership without migration.

Rules, first match wins:
1. needs_action set            -> needsAction
2. start within today          -> today
3. after today, by week end    -> thisWeek   (weeks start on Monday)
4. after week end, by now+14d  -> upcoming
5. anything else               -> backlog    (including past events)
"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from calboard.models.event import Event, KanbanColumn, KANBAN_COLUMNS
from calboard.models.constants import UPCOMING_HORIZON_DAYS


_COLUMN_TITLES = {
    KanbanColumn.TODAY: "Today",
    KanbanColumn.THIS_WEEK: "This Week",
    KanbanColumn.UPCOMING: "Upcoming",
    KanbanColumn.BACKLOG: "Backlog",
    KanbanColumn.NEEDS_ACTION: "Needs Action",
}


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=23, minute=59, second=59, microsecond=999999)


def start_of_week(dt: datetime) -> datetime:
    """Monday 00:00 of the ISO week containing dt."""
    return start_of_day(dt) - timedelta(days=dt.weekday())


def end_of_week(dt: datetime) -> datetime:
    """Sunday 23:59:59.999999 of the ISO week containing dt."""
    return end_of_day(start_of_week(dt) + timedelta(days=6))


def classify(event: Event, now: Optional[datetime] = None) -> KanbanColumn:
    """Assign an event to its kanban column.

    This function is deterministic - same (event, now) always gives the same column.

    Args:
        event: Event to classify
        now: Reference moment (defaults to the current local time)

    Returns:
        The single KanbanColumn the event belongs to
    """
    if event.needs_action:
        return KanbanColumn.NEEDS_ACTION

    if now is None:
        now = datetime.now()

    start = event.start_time
    today_start = start_of_day(now)
    today_end = end_of_day(now)
    week_end = end_of_week(now)
    horizon = now + timedelta(days=UPCOMING_HORIZON_DAYS)

    if today_start <= start <= today_end:
        return KanbanColumn.TODAY

    if today_end < start <= week_end:
        return KanbanColumn.THIS_WEEK

    if week_end < start <= horizon:
        return KanbanColumn.UPCOMING

    # Stale events without an action flag land here too
    return KanbanColumn.BACKLOG


def group_by_column(events: Iterable[Event], now: Optional[datetime] = None) -> Dict[KanbanColumn, List[Event]]:
    """Group events into every kanban column, each sorted ascending by start time.

    All five columns are present in the result (possibly empty), in board order.
    The sort is stable, so events sharing a start time keep their input order.
    """
    if now is None:
        now = datetime.now()

    groups: Dict[KanbanColumn, List[Event]] = {column: [] for column in KANBAN_COLUMNS}
    for event in events:
        groups[classify(event, now)].append(event)

    for column in groups:
        groups[column].sort(key=lambda e: e.start_time)

    return groups


def column_title(column: KanbanColumn) -> str:
    """Human-readable column title."""
    return _COLUMN_TITLES[KanbanColumn(column)]
