"""Week and month arithmetic for the multi-week calendar window."""

import calendar
from datetime import date, timedelta

from .dates import DateRange, format_month_year, is_first_day_of_month

SUNDAY = 0
MONDAY = 1


def week_start(day: date, first_day_of_week: int = MONDAY) -> date:
    """
    Get the first day of the week containing `day`.

    first_day_of_week: SUNDAY (0) or MONDAY (1).
    """
    if first_day_of_week == SUNDAY:
        # weekday(): Monday=0 .. Sunday=6
        offset = (day.weekday() + 1) % 7
    elif first_day_of_week == MONDAY:
        offset = day.weekday()
    else:
        raise ValueError(f"first_day_of_week must be 0 (Sunday) or 1 (Monday), got {first_day_of_week}")
    return day - timedelta(days=offset)


def week_dates(start: date) -> list[date]:
    """The seven days of the week beginning at `start`."""
    return [start + timedelta(days=i) for i in range(7)]


def visible_weeks(
    current: date,
    first_day_of_week: int = MONDAY,
    weeks_before: int = 1,
    weeks_after: int = 2,
) -> list[list[date]]:
    """
    Weeks shown around `current`.

    The default is the four-week view: previous, current, next and following.
    """
    current_start = week_start(current, first_day_of_week)
    return [
        week_dates(shift_week(current_start, offset))
        for offset in range(-weeks_before, weeks_after + 1)
    ]


def window_range(weeks: list[list[date]]) -> DateRange:
    """The date range covered by a grid of weeks."""
    if not weeks or not weeks[0]:
        raise ValueError("Cannot take the range of an empty week grid")
    return DateRange(weeks[0][0], weeks[-1][-1])


def month_labels(weeks: list[list[date]]) -> list[str | None]:
    """Month label for each week that contains the 1st of a month."""
    labels = []
    for week in weeks:
        first = next((d for d in week if is_first_day_of_month(d)), None)
        labels.append(format_month_year(first) if first else None)
    return labels


def shift_date(day: date, days: int) -> date:
    return day + timedelta(days=days)


def shift_week(day: date, weeks: int) -> date:
    return shift_date(day, weeks * 7)


def shift_month(day: date, months: int) -> date:
    """Shift by whole months, clamping to the last day of the target month."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def days_between(a: date, b: date) -> int:
    return abs((b - a).days)


def month_start(day: date) -> date:
    return day.replace(day=1)


def month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def expand_range(window: DateRange, months: int) -> DateRange:
    """Widen a range by `months` on each side."""
    return DateRange(shift_month(window.start, -months), shift_month(window.end, months))
