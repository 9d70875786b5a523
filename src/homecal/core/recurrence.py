"""
Recurrence expansion - decides on which days an event occurs.

Pure functions - no I/O. Rules only look at the anchor date and the
frequency: there are no end dates, counts, intervals or exceptions.

A monthly event anchored on the 29th-31st has no occurrence in months that
lack that day (no roll-over to month end).
"""

from datetime import date, timedelta
from typing import Iterator

from homecal.errors import InvalidRecurrenceState

from .calendar_math import shift_month
from .dates import DateRange
from .events import CalendarEvent, Recurrence

# How far next_occurrence looks ahead before giving up
NEXT_OCCURRENCE_HORIZON_DAYS = 366 * 4


def validate_event(event: CalendarEvent) -> None:
    """Raise InvalidRecurrenceState if the event cannot be expanded."""
    if not isinstance(event.date, date):
        raise InvalidRecurrenceState(f"Malformed anchor date {event.date!r} for event {event.id!r}")
    if not isinstance(event.recurrence, Recurrence):
        # also accepts raw stored strings that name a known frequency
        Recurrence.parse(event.recurrence)


def recurs_on(event: CalendarEvent, target: date) -> bool:
    """Whether the event has an occurrence on `target`."""
    validate_event(event)
    recurrence = Recurrence.parse(event.recurrence)
    anchor = event.date

    if recurrence == Recurrence.NONE:
        return target == anchor
    if target < anchor:
        return False
    if target == anchor:
        return True

    match recurrence:
        case Recurrence.DAILY:
            return True
        case Recurrence.WEEKLY:
            return target.weekday() == anchor.weekday()
        case Recurrence.MONTHLY:
            return target.day == anchor.day
    return False


def occurrences_in_range(event: CalendarEvent, window: DateRange) -> Iterator[date]:
    """
    Yield every day in `window` on which the event occurs, ascending.

    Steps straight from one occurrence to the next instead of testing each
    day. Calling again with the same arguments yields the same dates.
    """
    validate_event(event)
    recurrence = Recurrence.parse(event.recurrence)
    anchor = event.date

    if recurrence == Recurrence.NONE:
        if anchor in window:
            yield anchor
        return

    first = max(anchor, window.start)
    if first > window.end:
        return

    match recurrence:
        case Recurrence.DAILY:
            day = first
            while day <= window.end:
                yield day
                day += timedelta(days=1)

        case Recurrence.WEEKLY:
            day = first + timedelta(days=(anchor.weekday() - first.weekday()) % 7)
            while day <= window.end:
                yield day
                day += timedelta(days=7)

        case Recurrence.MONTHLY:
            months = (first.year - anchor.year) * 12 + (first.month - anchor.month)
            while True:
                candidate = shift_month(anchor, months)
                if candidate > window.end:
                    break
                # shift_month clamps short months; those are not occurrences
                if candidate.day == anchor.day and candidate >= first:
                    yield candidate
                months += 1


def next_occurrence(
    event: CalendarEvent,
    after: date,
    horizon_days: int = NEXT_OCCURRENCE_HORIZON_DAYS,
) -> date | None:
    """First occurrence on or after `after`, or None within the horizon."""
    window = DateRange(after, after + timedelta(days=horizon_days))
    return next(occurrences_in_range(event, window), None)
