"""Event persistence interface."""

from datetime import date
from typing import Protocol

from homecal.core.events import CalendarEvent, EventDraft


class EventStore(Protocol):
    """
    Interface for persisting calendar events in any backend.

    Implementations raise NotFound for unknown ids and
    PersistenceUnavailable when the backend fails.
    """

    async def fetch_by_range(self, start: date, end: date) -> list[CalendarEvent]:
        """Fetch events whose anchor date lies in [start, end]."""
        ...

    async def get(self, event_id: str) -> CalendarEvent:
        """Fetch one event by id, whatever its anchor date."""
        ...

    async def insert(self, draft: EventDraft) -> CalendarEvent:
        """Store a new event and return it with its assigned id."""
        ...

    async def replace(self, event_id: str, event: CalendarEvent) -> CalendarEvent:
        """Overwrite an existing event."""
        ...

    async def remove(self, event_id: str) -> None:
        """Delete an event."""
        ...
