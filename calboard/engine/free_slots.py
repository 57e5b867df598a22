"""Free-slot finder for calboard.

Computes the uncovered intervals of a day starting at the working-hours
open. Gaps between events are emitted up to the next event start, and the
trailing gap ends at the working-hours close. The result does not depend on
input order, and overlapping events simply collapse because the sweep cursor
never moves backward.
"""

import math
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Union

from calboard.models.event import Event
from calboard.models.free_slot import FreeSlot
from calboard.models.constants import (
    WORK_DAY_START_HOUR,
    WORK_DAY_END_HOUR,
    MIN_FREE_SLOT_MINUTES,
)


def _whole_minutes(delta: timedelta) -> int:
    """Round a duration to the nearest whole minute (halves round up)."""
    return int(math.floor(delta.total_seconds() / 60 + 0.5))


def _candidate(start: datetime, end: datetime) -> Optional[FreeSlot]:
    duration = _whole_minutes(end - start)
    if duration < MIN_FREE_SLOT_MINUTES:
        return None
    return FreeSlot(start=start, end=end, duration=duration)


def find_free_slots(events: Iterable[Event], day: Union[date, datetime]) -> List[FreeSlot]:
    """Find free slots on the given day, sweeping from 09:00 (trailing gap ends at 18:00).

    Only events whose start falls on the same calendar date are considered.
    Gaps shorter than MIN_FREE_SLOT_MINUTES are dropped, never merged or truncated.

    Args:
        events: Events to treat as busy time (any day; filtered here)
        day: Day to inspect (a datetime is reduced to its calendar date)

    Returns:
        Free slots sorted ascending by start, never overlapping
    """
    if isinstance(day, datetime):
        day = day.date()

    window_open = datetime.combine(day, time(hour=WORK_DAY_START_HOUR))
    window_close = datetime.combine(day, time(hour=WORK_DAY_END_HOUR))

    day_events = sorted(
        (e for e in events if e.start_time.date() == day),
        key=lambda e: e.start_time,
    )

    slots: List[FreeSlot] = []
    cursor = window_open

    for event in day_events:
        # The window close only bounds the trailing gap; a gap up to an
        # evening event runs to that event's start
        if event.start_time > cursor:
            slot = _candidate(cursor, event.start_time)
            if slot is not None:
                slots.append(slot)
        cursor = max(cursor, event.end_time)

    if cursor < window_close:
        slot = _candidate(cursor, window_close)
        if slot is not None:
            slots.append(slot)

    return slots
