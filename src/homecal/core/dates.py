"""Day-grain date helpers - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator

DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class DateRange:
    """A closed interval of calendar days, inclusive on both ends."""

    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Range start {self.start} is after end {self.end}")

    @classmethod
    def single(cls, day: date) -> "DateRange":
        return cls(day, day)

    @property
    def length(self) -> int:
        """Number of days in the range."""
        return (self.end - self.start).days + 1

    def days(self) -> Iterator[date]:
        """Yield every day in the range, in order."""
        for offset in range(self.length):
            yield self.start + timedelta(days=offset)

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    def __str__(self) -> str:
        return f"{format_date(self.start)}..{format_date(self.end)}"


def format_date(day: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return day.strftime(DATE_FORMAT)


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD string. Raises ValueError on anything else."""
    return datetime.strptime(value, DATE_FORMAT).date()


def is_same_day(a: date, b: date) -> bool:
    # datetimes compare by their calendar day
    if isinstance(a, datetime):
        a = a.date()
    if isinstance(b, datetime):
        b = b.date()
    return a == b


def is_today(day: date, today: date | None = None) -> bool:
    return is_same_day(day, today or date.today())


def is_weekend(day: date) -> bool:
    """Saturday or Sunday."""
    return day.weekday() >= 5


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def format_month_year(day: date) -> str:
    """Format as e.g. 'January 2024'."""
    return day.strftime("%B %Y")


def is_first_day_of_month(day: date) -> bool:
    return day.day == 1
