"""Tests for permissive bulk-import mapping."""

import pytest
from datetime import datetime

from calboard.engine.importer import ImportItemError, map_import_item, map_import_items


class TestMapImportItem:
    """Test field alias resolution."""

    def test_canonical_names(self):
        event = map_import_item({
            "title": "Standup",
            "description": "Daily",
            "start": "2024-01-10T09:00:00",
            "end": "2024-01-10T09:15:00",
            "location": "Zoom",
            "category": "work",
        })

        assert event.title == "Standup"
        assert event.description == "Daily"
        assert event.start_time == datetime(2024, 1, 10, 9, 0)
        assert event.end_time == datetime(2024, 1, 10, 9, 15)
        assert event.location == "Zoom"
        assert event.category == "work"
        assert event.status == "upcoming"
        assert event.needs_action is False

    def test_alternative_names(self):
        event = map_import_item({
            "summary": "Review",
            "notes": "Bring laptop",
            "startTime": "2024-01-10T13:00:00",
            "endTime": "2024-01-10T14:00:00",
            "type": "meeting",
        })

        assert event.title == "Review"
        assert event.description == "Bring laptop"
        assert event.start_time == datetime(2024, 1, 10, 13, 0)
        assert event.end_time == datetime(2024, 1, 10, 14, 0)
        assert event.category == "meeting"

    def test_primary_name_wins_over_alternative(self):
        event = map_import_item({"title": "A", "summary": "B", "start": "2024-01-10T09:00:00"})
        assert event.title == "A"

    def test_empty_primary_falls_through(self):
        event = map_import_item({"title": "", "summary": "B", "start": "2024-01-10T09:00:00"})
        assert event.title == "B"

    def test_missing_end_uses_start(self):
        event = map_import_item({"title": "Deadline", "start": "2024-01-10T17:00:00"})
        assert event.end_time == event.start_time

    def test_defaults(self):
        event = map_import_item({"start": "2024-01-10T17:00:00"})

        assert event.title == "Untitled Event"
        assert event.category == "default"
        assert event.description is None
        assert event.location is None

    def test_missing_start_is_rejected(self):
        with pytest.raises(ImportItemError):
            map_import_item({"title": "No time"})

    def test_unparseable_start_is_rejected(self):
        with pytest.raises(ImportItemError):
            map_import_item({"title": "Bad", "start": "next tuesday-ish"})

    def test_non_object_is_rejected(self):
        with pytest.raises(ImportItemError):
            map_import_item("2024-01-10T09:00:00")


def test_map_import_items_collects_failures():
    batch = map_import_items([
        {"title": "Good", "start": "2024-01-10T09:00:00"},
        {"title": "No start"},
        42,
        {"summary": "Also good", "startTime": "2024-01-11T09:00:00"},
    ])

    assert [e.title for e in batch.events] == ["Good", "Also good"]
    assert [f.index for f in batch.errors] == [1, 2]
    assert all(f.error for f in batch.errors)
