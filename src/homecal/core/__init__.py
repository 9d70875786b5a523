"""Functional core - pure business logic with no I/O."""

from .dates import DateRange, format_date, parse_date
from .calendar_math import MONDAY, SUNDAY, visible_weeks, window_range, week_start
from .events import CalendarEvent, EventDraft, EventType, Occurrence, Recurrence
from .recurrence import next_occurrence, occurrences_in_range, recurs_on
from .resolver import group_by_day, merge, resolve, resolve_for_day

__all__ = [
    # Dates
    "DateRange",
    "format_date",
    "parse_date",
    # Calendar math
    "MONDAY",
    "SUNDAY",
    "visible_weeks",
    "window_range",
    "week_start",
    # Events
    "CalendarEvent",
    "EventDraft",
    "EventType",
    "Occurrence",
    "Recurrence",
    # Recurrence
    "recurs_on",
    "occurrences_in_range",
    "next_occurrence",
    # Resolution
    "resolve",
    "resolve_for_day",
    "merge",
    "group_by_day",
]
