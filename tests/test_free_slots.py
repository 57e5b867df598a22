"""Tests for the free-slot finder."""

import random
from datetime import date, datetime

from calboard.engine.free_slots import find_free_slots


DAY = date(2024, 1, 10)


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 1, 10, hour, minute)


class TestFindFreeSlots:
    """Test gaps inside the 09:00-18:00 window."""

    def test_empty_day_is_one_full_slot(self):
        slots = find_free_slots([], DAY)

        assert len(slots) == 1
        assert slots[0].start == _at(9)
        assert slots[0].end == _at(18)
        assert slots[0].duration == 540

    def test_single_meeting_splits_the_day(self, make_event):
        slots = find_free_slots([make_event(_at(10), 30)], DAY)

        assert [(s.start, s.end, s.duration) for s in slots] == [
            (_at(9), _at(10), 60),
            (_at(10, 30), _at(18), 450),
        ]

    def test_short_gap_is_dropped(self, make_event):
        events = [make_event(_at(9), 60), make_event(_at(10, 20), 60)]
        slots = find_free_slots(events, DAY)

        # The 20 minute gap at 10:00 is not a slot
        assert [s.start for s in slots] == [_at(11, 20)]

    def test_thirty_minute_gap_is_kept(self, make_event):
        events = [make_event(_at(9), 60), make_event(_at(10, 30), 450)]
        slots = find_free_slots(events, DAY)

        assert [(s.start, s.duration) for s in slots] == [(_at(10), 30)]

    def test_overlapping_events_collapse(self, make_event):
        events = [make_event(_at(10), 120), make_event(_at(11), 30)]
        slots = find_free_slots(events, DAY)

        assert [(s.start, s.end) for s in slots] == [(_at(9), _at(10)), (_at(12), _at(18))]

    def test_early_event_pushes_window_open(self, make_event):
        slots = find_free_slots([make_event(_at(8), 90)], DAY)

        assert [(s.start, s.end) for s in slots] == [(_at(9, 30), _at(18))]

    def test_gap_before_evening_event_runs_to_its_start(self, make_event):
        slots = find_free_slots([make_event(_at(19), 60)], DAY)

        assert [(s.start, s.end, s.duration) for s in slots] == [(_at(9), _at(19), 600)]

    def test_gap_between_evening_events_is_kept(self, make_event):
        events = [make_event(_at(20), 60), make_event(_at(9), 600)]
        slots = find_free_slots(events, DAY)

        assert [(s.start, s.end, s.duration) for s in slots] == [(_at(19), _at(20), 60)]

    def test_fully_booked_day(self, make_event):
        assert find_free_slots([make_event(_at(8), 11 * 60)], DAY) == []

    def test_events_on_other_days_are_ignored(self, make_event):
        other_day = make_event(datetime(2024, 1, 11, 10, 0), 120)
        slots = find_free_slots([other_day], DAY)

        assert [s.duration for s in slots] == [540]

    def test_datetime_day_is_reduced_to_date(self, make_event):
        slots = find_free_slots([make_event(_at(10), 30)], _at(15, 45))
        assert [s.duration for s in slots] == [60, 450]

    def test_result_does_not_depend_on_input_order(self, make_event):
        events = [
            make_event(_at(9, 30), 45),
            make_event(_at(11), 60),
            make_event(_at(11, 30), 90),
            make_event(_at(15), 30),
            make_event(_at(16, 45), 30),
        ]
        expected = find_free_slots(events, DAY)

        rng = random.Random(7)
        for _ in range(10):
            shuffled = list(events)
            rng.shuffle(shuffled)
            assert find_free_slots(shuffled, DAY) == expected

    def test_slots_are_ordered_and_disjoint(self, make_event):
        events = [make_event(_at(10), 30), make_event(_at(13), 60), make_event(_at(16), 15)]
        slots = find_free_slots(events, DAY)

        for earlier, later in zip(slots, slots[1:]):
            assert earlier.end <= later.start
        assert all(s.duration >= 30 for s in slots)
