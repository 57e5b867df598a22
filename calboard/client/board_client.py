"""HTTP client for the calboard API with optimistic board moves.

Moves are computed locally with the same engine functions the server uses,
shown immediately, and then confirmed or rolled back depending on the PATCH
result. Every settled mutation is followed by a canonical refresh.
"""

import logging
import os
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

import requests
from dotenv import load_dotenv
from pydantic import ValidationError

from calboard.client.optimistic import EventView, OptimisticMutation, update_event
from calboard.engine.bucketing import group_by_column
from calboard.engine.moves import plan_column_move, plan_date_move
from calboard.models.event import Event, EventUpdate, KanbanColumn
from calboard.models.task import Task

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000"
REQUEST_TIMEOUT_SEC = 15


class ClientError(Exception):
    """A request to the calboard API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class MutationOutcome:
    """Result of an optimistic mutation after it settled."""
    ok: bool
    error: Optional[str] = None


class BoardClient:
    """Client-side board state kept in sync with the API."""

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or os.getenv("CALBOARD_API_URL", DEFAULT_API_URL)).rstrip("/")
        self.session = session or requests.Session()
        self.view = EventView()

    @property
    def events(self) -> List[Event]:
        return self.view.events

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=REQUEST_TIMEOUT_SEC, **kwargs)
        except requests.RequestException as e:
            raise ClientError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            message = None
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                message = body.get("error")
            message = message or response.text or f"HTTP {response.status_code}"
            raise ClientError(str(message), status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ClientError(f"{method} {path} returned a non-JSON body", status_code=response.status_code) from e

    def refresh(self) -> List[Event]:
        """Replace the local view with the server's event list."""
        data = self._request("GET", "/api/events")
        if not isinstance(data, list):
            raise ClientError("GET /api/events did not return a list of events")
        try:
            events = [Event.model_validate(item) for item in data]
        except ValidationError as e:
            raise ClientError(f"GET /api/events returned an invalid event: {e.error_count()} error(s)") from e
        self.view.replace(events)
        return events

    def _refresh_after_settle(self) -> None:
        # A failed refresh keeps whatever local state the mutation left behind
        try:
            self.refresh()
        except ClientError as e:
            logger.warning(f"Refresh after mutation failed: {e}")

    def columns(self, now: Optional[datetime] = None) -> Dict[KanbanColumn, List[Event]]:
        """Group the local view into board columns."""
        return group_by_column(self.view.events, now)

    def _mutate(self, event_id: str, update: EventUpdate) -> MutationOutcome:
        mutation = OptimisticMutation(self.view, update_event(event_id, update))
        mutation.snapshot()
        mutation.apply()
        payload = update.model_dump(mode="json", by_alias=True, exclude_unset=True)
        try:
            self._request("PATCH", f"/api/events/{event_id}", json=payload)
        except ClientError as e:
            mutation.rollback()
            logger.warning(f"Rolled back move of event {event_id}: {e}")
            outcome = MutationOutcome(ok=False, error=str(e))
        else:
            mutation.commit()
            outcome = MutationOutcome(ok=True)
        finally:
            self._refresh_after_settle()
        return outcome

    def move_to_column(
        self,
        event_id: str,
        column: Union[KanbanColumn, str],
        now: Optional[datetime] = None,
    ) -> MutationOutcome:
        """Drop an event on a kanban column."""
        event = self.view.find(event_id)
        if event is None:
            return MutationOutcome(ok=False, error=f"Event {event_id} is not on the board")
        update = plan_column_move(event, KanbanColumn(column), now)
        return self._mutate(event_id, update)

    def move_to_date(self, event_id: str, new_date: Union[date, datetime]) -> MutationOutcome:
        """Drop an event on a calendar day, keeping its time of day."""
        event = self.view.find(event_id)
        if event is None:
            return MutationOutcome(ok=False, error=f"Event {event_id} is not on the board")
        return self._mutate(event_id, plan_date_move(event, new_date))

    def import_events(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Bulk import raw calendar items, then refresh."""
        try:
            return self._request("POST", "/api/events/import", json={"events": items})
        finally:
            self._refresh_after_settle()

    def generate_tasks(self, event_id: str) -> List[Task]:
        """Ask the server to regenerate an event's tasks."""
        data = self._request("POST", f"/api/ai/generate-tasks/{event_id}")
        if not isinstance(data, dict):
            raise ClientError("Task generation returned an unexpected body")
        try:
            return [Task.model_validate(item) for item in data.get("tasks", [])]
        except ValidationError as e:
            raise ClientError(f"Task generation returned an invalid task: {e.error_count()} error(s)") from e
