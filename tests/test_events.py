"""Tests for the event data model."""

from datetime import date, time

import pytest

from homecal.core.events import (
    CalendarEvent,
    EventDraft,
    EventType,
    Occurrence,
    Recurrence,
    apply_changes,
)
from homecal.errors import InvalidRecurrenceState


class TestRecurrenceParse:
    @pytest.mark.parametrize("value", [None, "", "none", Recurrence.NONE])
    def test_none_values(self, value):
        assert Recurrence.parse(value) == Recurrence.NONE

    def test_case_insensitive(self):
        assert Recurrence.parse("Weekly") == Recurrence.WEEKLY

    def test_unknown(self):
        with pytest.raises(InvalidRecurrenceState):
            Recurrence.parse("fortnightly")


class TestCalendarEvent:
    def test_from_api(self):
        event = CalendarEvent.from_api(
            {
                "id": 42,
                "title": "Standup",
                "date": "2024-01-01",
                "time": "09:30:00",
                "recurrence": "weekly",
                "type": "event",
                "description": "",
            }
        )
        assert event.id == "42"
        assert event.date == date(2024, 1, 1)
        assert event.time == time(9, 30)
        assert event.recurrence == Recurrence.WEEKLY
        assert event.type == EventType.EVENT
        assert event.description is None

    def test_from_api_null_recurrence_and_time(self):
        event = CalendarEvent.from_api({"id": "x", "title": "Pay rent", "date": "2024-01-01", "type": "task"})
        assert event.recurrence == Recurrence.NONE
        assert event.all_day
        assert event.type == EventType.TASK

    def test_from_api_bad_date(self):
        with pytest.raises(InvalidRecurrenceState):
            CalendarEvent.from_api({"id": "x", "title": "T", "date": "01/02/2024"})

    def test_from_api_bad_recurrence(self):
        with pytest.raises(InvalidRecurrenceState):
            CalendarEvent.from_api({"id": "x", "title": "T", "date": "2024-01-02", "recurrence": "yearly"})

    def test_from_api_not_a_dict(self):
        with pytest.raises(TypeError):
            CalendarEvent.from_api(None)

    def test_to_api_round_trip(self, make_event):
        event = make_event(anchor=date(2024, 2, 29), recurrence=Recurrence.MONTHLY, at=time(18, 5))
        data = event.to_api()
        assert data["date"] == "2024-02-29"
        assert data["time"] == "18:05"
        assert data["recurrence"] == "monthly"
        assert CalendarEvent.from_api(data) == event

    def test_no_recurrence_is_null_on_the_wire(self, make_event):
        assert make_event().to_api()["recurrence"] is None

    def test_empty_title_rejected(self):
        with pytest.raises(ValueError):
            CalendarEvent(id="a", title="  ", date=date(2024, 1, 1))

    def test_format_time(self, make_event):
        assert make_event().format_time() == "All day"
        assert make_event(at=time(7, 5)).format_time() == "07:05"


class TestEventDraft:
    def test_with_id(self):
        draft = EventDraft(title="Gym", date=date(2024, 1, 2), recurrence=Recurrence.DAILY)
        event = draft.with_id("new")
        assert event.id == "new"
        assert event.title == "Gym"
        assert event.recurrence == Recurrence.DAILY

    def test_to_api_has_no_id(self):
        assert "id" not in EventDraft(title="Gym", date=date(2024, 1, 2)).to_api()


class TestApplyChanges:
    def test_merges_fields(self, make_event):
        event = make_event(recurrence=Recurrence.WEEKLY)
        updated = apply_changes(event, {"recurrence": "none", "time": "10:00", "title": "Renamed"})
        assert updated.recurrence == Recurrence.NONE
        assert updated.time == time(10, 0)
        assert updated.title == "Renamed"
        assert updated.id == event.id

    def test_date_string_is_parsed(self, make_event):
        updated = apply_changes(make_event(), {"date": "2024-01-05"})
        assert updated.date == date(2024, 1, 5)

    def test_bad_date_string(self, make_event):
        with pytest.raises(ValueError):
            apply_changes(make_event(), {"date": "05/01/2024"})

    def test_clear_time(self, make_event):
        updated = apply_changes(make_event(at=time(9, 0)), {"time": None})
        assert updated.all_day

    def test_id_is_immutable(self, make_event):
        with pytest.raises(ValueError, match="immutable"):
            apply_changes(make_event(), {"id": "other"})

    def test_unknown_field(self, make_event):
        with pytest.raises(ValueError, match="colour"):
            apply_changes(make_event(), {"colour": "red"})


class TestOccurrence:
    def test_of_carries_event_fields(self, make_event):
        event = make_event(anchor=date(2024, 1, 1), recurrence=Recurrence.WEEKLY, at=time(9, 0))
        occurrence = Occurrence.of(event, date(2024, 1, 8))
        assert occurrence.key == ("a", date(2024, 1, 8))
        assert occurrence.anchor_date == date(2024, 1, 1)
        assert occurrence.title == event.title
        assert occurrence.time == time(9, 0)

    def test_untimed_sorts_as_midnight(self, make_event):
        occurrence = Occurrence.of(make_event(), date(2024, 1, 1))
        assert occurrence.sort_key == (date(2024, 1, 1), time(0, 0))

    def test_to_api(self, make_event):
        data = Occurrence.of(make_event(recurrence=Recurrence.DAILY), date(2024, 1, 3)).to_api()
        assert data["date"] == "2024-01-03"
        assert data["anchor_date"] == "2024-01-01"
        assert data["recurrence"] == "daily"
