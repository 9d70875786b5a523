"""Calendar event data model - no I/O dependencies."""

import datetime as dt
from dataclasses import dataclass, fields, replace
from datetime import time
from enum import Enum

from homecal.errors import InvalidRecurrenceState

from .dates import format_date, parse_date

MIDNIGHT = time(0, 0)


class Recurrence(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, value) -> "Recurrence":
        """Parse a stored recurrence value. Null or empty means no recurrence."""
        if isinstance(value, cls):
            return value
        if value is None or value == "":
            return cls.NONE
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidRecurrenceState(f"Unknown recurrence: {value!r}") from None


class EventType(str, Enum):
    """Display classification only."""

    EVENT = "event"
    TASK = "task"


def _parse_time(value) -> time | None:
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    return time.fromisoformat(value).replace(second=0, microsecond=0)


@dataclass(frozen=True)
class CalendarEvent:
    """A stored calendar entry. `date` is the anchor (first) occurrence."""

    id: str
    title: str
    date: dt.date
    time: dt.time | None = None
    recurrence: Recurrence = Recurrence.NONE
    type: EventType = EventType.EVENT
    description: str | None = None

    def __post_init__(self):
        if not self.title or not self.title.strip():
            raise ValueError("Event title must not be empty")

    @property
    def all_day(self) -> bool:
        return self.time is None

    @property
    def is_recurring(self) -> bool:
        return self.recurrence != Recurrence.NONE

    def format_time(self) -> str:
        """Format the event time for display."""
        if self.time is None:
            return "All day"
        return self.time.strftime("%H:%M")

    @classmethod
    def from_api(cls, data: dict) -> "CalendarEvent":
        """
        Create a CalendarEvent from its stored JSON shape.

        Raises InvalidRecurrenceState for a malformed anchor date or
        recurrence, KeyError/ValueError for other missing or bad fields.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected an event object, got {type(data).__name__}")
        try:
            anchor = parse_date(data["date"])
        except (TypeError, ValueError) as e:
            raise InvalidRecurrenceState(
                f"Malformed anchor date {data.get('date')!r} for event {data.get('id')!r}"
            ) from e

        return cls(
            id=str(data["id"]),
            title=data["title"],
            date=anchor,
            time=_parse_time(data.get("time")),
            recurrence=Recurrence.parse(data.get("recurrence")),
            type=EventType(data.get("type") or EventType.EVENT.value),
            description=data.get("description") or None,
        )

    def to_api(self) -> dict:
        return {
            "id": self.id,
            **EventDraft.from_event(self).to_api(),
        }


@dataclass(frozen=True)
class EventDraft:
    """The fields of a new event, before the store assigns an id."""

    title: str
    date: dt.date
    time: dt.time | None = None
    recurrence: Recurrence = Recurrence.NONE
    type: EventType = EventType.EVENT
    description: str | None = None

    def __post_init__(self):
        if not self.title or not self.title.strip():
            raise ValueError("Event title must not be empty")

    def with_id(self, event_id: str) -> CalendarEvent:
        return CalendarEvent(id=event_id, **{f.name: getattr(self, f.name) for f in fields(self)})

    @classmethod
    def from_event(cls, event: CalendarEvent) -> "EventDraft":
        return cls(**{f.name: getattr(event, f.name) for f in fields(cls)})

    def to_api(self) -> dict:
        return {
            "title": self.title,
            "date": format_date(self.date),
            "time": self.time.strftime("%H:%M") if self.time else None,
            # The backend stores "no recurrence" as null
            "recurrence": None if self.recurrence == Recurrence.NONE else self.recurrence.value,
            "type": self.type.value,
            "description": self.description,
        }


EDITABLE_FIELDS = frozenset(f.name for f in fields(EventDraft))


def apply_changes(event: CalendarEvent, changes: dict) -> CalendarEvent:
    """Merge partial field changes into an event. The id cannot change."""
    if "id" in changes and changes["id"] != event.id:
        raise ValueError("Event id is immutable")
    unknown = set(changes) - EDITABLE_FIELDS - {"id"}
    if unknown:
        raise ValueError(f"Unknown event fields: {', '.join(sorted(unknown))}")

    updates = {k: v for k, v in changes.items() if k != "id"}
    if isinstance(updates.get("date"), str):
        updates["date"] = parse_date(updates["date"])
    if "recurrence" in updates:
        updates["recurrence"] = Recurrence.parse(updates["recurrence"])
    if "type" in updates:
        updates["type"] = EventType(updates["type"])
    if "time" in updates:
        updates["time"] = _parse_time(updates["time"])
    return replace(event, **updates)


@dataclass(frozen=True)
class Occurrence:
    """A projection of an event onto one calendar day. A value, not an entity."""

    id: str
    title: str
    date: dt.date
    anchor_date: dt.date
    time: dt.time | None
    recurrence: Recurrence
    type: EventType
    description: str | None = None

    @classmethod
    def of(cls, event: CalendarEvent, day: dt.date) -> "Occurrence":
        return cls(
            id=event.id,
            title=event.title,
            date=day,
            anchor_date=event.date,
            time=event.time,
            recurrence=Recurrence.parse(event.recurrence),
            type=event.type,
            description=event.description,
        )

    @property
    def key(self) -> tuple[str, dt.date]:
        """Identity within a resolved result: (event id, occurrence date)."""
        return (self.id, self.date)

    @property
    def sort_key(self) -> tuple[dt.date, dt.time]:
        # untimed entries sort as midnight
        return (self.date, self.time or MIDNIGHT)

    def format_time(self) -> str:
        if self.time is None:
            return "All day"
        return self.time.strftime("%H:%M")

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "date": format_date(self.date),
            "anchor_date": format_date(self.anchor_date),
            "time": self.time.strftime("%H:%M") if self.time else None,
            "recurrence": self.recurrence.value,
            "type": self.type.value,
            "description": self.description,
        }
