"""Shared fixtures."""

from datetime import date, time

import pytest

from homecal.core.events import CalendarEvent, EventType, Recurrence


@pytest.fixture
def make_event():
    """Factory for creating catalog events."""
    def _make(
        event_id: str = "a",
        anchor: date = date(2024, 1, 1),
        recurrence: Recurrence | str = Recurrence.NONE,
        at: time | None = None,
        title: str | None = None,
        kind: EventType = EventType.EVENT,
    ) -> CalendarEvent:
        return CalendarEvent(
            id=event_id,
            title=title or f"Event {event_id}",
            date=anchor,
            time=at,
            recurrence=recurrence,
            type=kind,
        )
    return _make
