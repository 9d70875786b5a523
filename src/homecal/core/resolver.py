"""
Range resolution - turns an event catalog into the occurrences to display.

Pure functions - no I/O. The catalog is read, never mutated.
"""

import logging
from datetime import date
from typing import Iterable

from homecal.errors import InvalidRecurrenceState

from .dates import DateRange
from .events import CalendarEvent, Occurrence
from .recurrence import recurs_on, validate_event

logger = logging.getLogger(__name__)


def _valid_events(catalog: Iterable[CalendarEvent]) -> list[CalendarEvent]:
    """Drop entries that cannot be expanded, so one bad record can't blank the view."""
    valid = []
    for event in catalog:
        try:
            validate_event(event)
        except InvalidRecurrenceState as e:
            logger.warning(f"Skipping event {getattr(event, 'id', '?')!r}: {e}")
            continue
        valid.append(event)
    return valid


def sort_occurrences(occurrences: Iterable[Occurrence]) -> list[Occurrence]:
    """Sort by (date, time), untimed as midnight. Stable for ties."""
    return sorted(occurrences, key=lambda o: o.sort_key)


def dedupe(occurrences: Iterable[Occurrence]) -> list[Occurrence]:
    """Keep the first occurrence of each (id, date) key."""
    seen: set[tuple[str, date]] = set()
    unique = []
    for occurrence in occurrences:
        if occurrence.key in seen:
            continue
        seen.add(occurrence.key)
        unique.append(occurrence)
    return unique


def resolve(catalog: Iterable[CalendarEvent], window: DateRange) -> list[Occurrence]:
    """
    Resolve every occurrence in `window`, deduplicated and sorted.

    Walks the range day by day and tests each event against each day.
    Cost is O(days x events), which is fine for a few weeks of a personal
    calendar.
    """
    events = _valid_events(catalog)
    emitted = (
        Occurrence.of(event, day)
        for day in window.days()
        for event in events
        if recurs_on(event, day)
    )
    return sort_occurrences(dedupe(emitted))


def resolve_for_day(catalog: Iterable[CalendarEvent], day: date) -> list[Occurrence]:
    """Occurrences on a single day. Same result as a one-day resolve()."""
    return resolve(catalog, DateRange.single(day))


def merge(*results: Iterable[Occurrence]) -> list[Occurrence]:
    """Merge partial resolutions, keeping the first of each occurrence key."""
    combined = [occurrence for result in results for occurrence in result]
    return sort_occurrences(dedupe(combined))


def group_by_day(occurrences: Iterable[Occurrence], window: DateRange) -> dict[date, list[Occurrence]]:
    """Bucket occurrences by day, including empty days of the window."""
    grouped: dict[date, list[Occurrence]] = {day: [] for day in window.days()}
    for occurrence in occurrences:
        if occurrence.date in grouped:
            grouped[occurrence.date].append(occurrence)
    return grouped
