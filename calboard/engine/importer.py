"""Bulk-import field mapping for calboard.

Imported calendar items come from many tools, so each canonical event field
is resolved from an ordered list of accepted source names. The first name
holding a non-empty value wins.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
from pydantic import BaseModel, Field, ValidationError

from calboard.models.event import EventCreate
from calboard.models.constants import (
    DEFAULT_EVENT_CATEGORY,
    DEFAULT_EVENT_STATUS,
    UNTITLED_EVENT_TITLE,
)

logger = logging.getLogger(__name__)


# Ordered fallback names per canonical field.
# end falls back to start, which makes a zero-duration event.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "title": ("title", "summary"),
    "description": ("description", "notes"),
    "start_time": ("start", "startTime"),
    "end_time": ("end", "endTime", "start", "startTime"),
    "location": ("location",),
    "category": ("category", "type"),
}


class ImportItemError(ValueError):
    """Raised when a single import item cannot be mapped to an event."""


class ImportFailure(BaseModel):
    """A rejected import item."""
    index: int = Field(..., description="Position of the item in the submitted list")
    error: str = Field(..., description="Why the item was rejected")


class ImportBatch(BaseModel):
    """Result of mapping a list of import items."""
    events: List[EventCreate] = Field(default_factory=list)
    errors: List[ImportFailure] = Field(default_factory=list)


def resolve_field(item: Mapping[str, Any], names: Sequence[str]) -> Optional[Any]:
    """Return the first non-empty value among the given names, or None."""
    for name in names:
        value = item.get(name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def map_import_item(item: Any) -> EventCreate:
    """Map one permissive import item onto canonical event fields.

    Args:
        item: Raw JSON object from the import body

    Returns:
        EventCreate ready to persist

    Raises:
        ImportItemError: If the item is not an object, or has no usable start time
    """
    if not isinstance(item, Mapping):
        raise ImportItemError("Event must be a JSON object")

    resolved = {field: resolve_field(item, names) for field, names in FIELD_ALIASES.items()}

    if resolved["start_time"] is None:
        raise ImportItemError("Event is missing a start time ('start' or 'startTime')")

    title = resolved["title"]
    try:
        return EventCreate(
            title=str(title) if title is not None else UNTITLED_EVENT_TITLE,
            description=resolved["description"],
            start_time=resolved["start_time"],
            end_time=resolved["end_time"],
            location=resolved["location"],
            category=str(resolved["category"]) if resolved["category"] is not None else DEFAULT_EVENT_CATEGORY,
            status=DEFAULT_EVENT_STATUS,
            needs_action=False,
        )
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ImportItemError(f"Invalid event fields: {fields}") from e


def map_import_items(items: Sequence[Any]) -> ImportBatch:
    """Map every import item, collecting per-item failures instead of aborting."""
    batch = ImportBatch()
    for index, item in enumerate(items):
        try:
            batch.events.append(map_import_item(item))
        except ImportItemError as e:
            logger.warning(f"Rejected import item {index}: {e}")
            batch.errors.append(ImportFailure(index=index, error=str(e)))
    return batch
