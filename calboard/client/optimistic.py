"""Optimistic mutation protocol.

A mutation is a three-step unit against a shared local view:

1. snapshot()  - remember the canonical event list
2. apply()     - swap in the speculative list immediately
3. commit() or rollback() - keep the speculative state until the next
   canonical refresh, or restore the exact snapshot

The protocol knows nothing about HTTP or UI bindings; BoardClient drives it.
"""

from enum import Enum
from typing import Callable, List, Optional

from calboard.engine.moves import apply_update
from calboard.models.event import Event, EventUpdate


class MutationState(str, Enum):
    """Lifecycle of an optimistic mutation."""
    PENDING = "pending"
    APPLIED = "applied"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class EventView:
    """Local copy of the canonical event list shared by all mutations."""

    def __init__(self, events: Optional[List[Event]] = None):
        self.events: List[Event] = list(events or [])

    def replace(self, events: List[Event]) -> None:
        self.events = list(events)

    def find(self, event_id: str) -> Optional[Event]:
        for event in self.events:
            if event.id == event_id:
                return event
        return None


def update_event(event_id: str, update: EventUpdate) -> Callable[[List[Event]], List[Event]]:
    """Transform that applies an update to one event, leaving the rest untouched."""
    def transform(events: List[Event]) -> List[Event]:
        return [apply_update(e, update) if e.id == event_id else e for e in events]
    return transform


class OptimisticMutation:
    """Snapshot, speculative apply, then commit or rollback."""

    def __init__(self, view: EventView, transform: Callable[[List[Event]], List[Event]]):
        self.view = view
        self.transform = transform
        self.state = MutationState.PENDING
        self._snapshot: Optional[List[Event]] = None

    def snapshot(self) -> List[Event]:
        if self.state != MutationState.PENDING:
            raise RuntimeError(f"Cannot snapshot a mutation in state {self.state.value}")
        self._snapshot = list(self.view.events)
        return self._snapshot

    def apply(self) -> List[Event]:
        if self._snapshot is None:
            self.snapshot()
        speculative = self.transform(list(self._snapshot))
        self.view.replace(speculative)
        self.state = MutationState.APPLIED
        return speculative

    def commit(self) -> None:
        if self.state != MutationState.APPLIED:
            raise RuntimeError(f"Cannot commit a mutation in state {self.state.value}")
        self._snapshot = None
        self.state = MutationState.COMMITTED

    def rollback(self) -> None:
        if self.state != MutationState.APPLIED:
            raise RuntimeError(f"Cannot roll back a mutation in state {self.state.value}")
        self.view.replace(self._snapshot)
        self._snapshot = None
        self.state = MutationState.ROLLED_BACK
