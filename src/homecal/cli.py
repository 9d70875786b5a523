"""homecal CLI - personal calendar."""

import asyncio
import json
import logging
import sys
from datetime import date, datetime

import click
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .config import Config, build_store, load_config
from .core.calendar_math import month_labels, shift_week, visible_weeks, window_range
from .core.dates import DateRange, is_today, is_weekend
from .core.events import EventDraft, EventType, Occurrence, Recurrence
from .core.resolver import group_by_day
from .errors import HomecalError
from .synchronizer import EventSynchronizer

logger = logging.getLogger(__name__)

DATE = click.DateTime(formats=["%Y-%m-%d"])
RECURRENCES = click.Choice([r.value for r in Recurrence], case_sensitive=False)
TYPES = click.Choice([t.value for t in EventType], case_sensitive=False)


def _synchronizer(config: Config) -> EventSynchronizer:
    return EventSynchronizer(build_store(config), fetch_margin_months=config.fetch_margin_months)


def _as_date(value: datetime | None) -> date | None:
    return value.date() if value else None


def _fail(error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def _window(config: Config, current: date) -> list[list[date]]:
    return visible_weeks(current, config.first_day_of_week, config.weeks_before, config.weeks_after)


def _show_occurrences(occurrences: list[Occurrence], as_json: bool, empty_msg: str = "No events.") -> None:
    """Shared occurrence display logic."""
    if as_json:
        click.echo(json.dumps([o.to_api() for o in occurrences], indent=2))
        return

    if not occurrences:
        click.echo(empty_msg)
        return

    current_date = None
    for occurrence in occurrences:
        if occurrence.date != current_date:
            if current_date is not None:
                click.echo()
            click.echo(f"### {occurrence.date.strftime('%A, %B %d')}")
            current_date = occurrence.date

        repeat = "" if occurrence.recurrence == Recurrence.NONE else f" ({occurrence.recurrence.value})"
        marker = "[ ]" if occurrence.type == EventType.TASK else "   "
        click.echo(f"  {occurrence.format_time():8} {marker} {occurrence.title}{repeat}  [{occurrence.id}]")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="homecal")
def main(verbose: bool):
    """homecal - personal calendar."""
    level = logging.DEBUG if verbose else load_config().log_level
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=level,
    )


@main.command()
@click.option("--date", "current", type=DATE, help="Date to center the view on (default: today)")
@click.option("--offset", default=0, help="Page forward/backward by N weeks")
def weeks(current: datetime | None, offset: int):
    """Show the multi-week calendar view."""
    config = load_config()
    center = shift_week(_as_date(current) or date.today(), offset)
    grid = _window(config, center)
    window = window_range(grid)

    synchronizer = _synchronizer(config)
    occurrences = asyncio.run(synchronizer.load(window))
    by_day = group_by_day(occurrences, window)

    for week, label in zip(grid, month_labels(grid)):
        if label:
            click.echo(f"== {label} ==")
        for day in week:
            flag = "*" if is_today(day) else ("." if is_weekend(day) else " ")
            entries = ", ".join(f"{o.format_time()} {o.title}" for o in by_day[day])
            click.echo(f"{flag} {day.strftime('%a %m/%d')}  {entries}")
        click.echo()


@main.command()
@click.argument("day", type=DATE, required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def day(day: datetime | None, as_json: bool):
    """Show one day's events (default: today)."""
    target = _as_date(day) or date.today()
    synchronizer = _synchronizer(load_config())
    occurrences = asyncio.run(synchronizer.load(DateRange.single(target)))
    _show_occurrences(occurrences, as_json, "No events today." if is_today(target) else "No events.")


@main.command()
@click.option("--start", type=DATE, required=True, help="First day (YYYY-MM-DD)")
@click.option("--end", type=DATE, required=True, help="Last day (YYYY-MM-DD)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def agenda(start: datetime, end: datetime, as_json: bool):
    """List all occurrences in a date range."""
    try:
        window = DateRange(start.date(), end.date())
    except ValueError as e:
        _fail(e)
    synchronizer = _synchronizer(load_config())
    occurrences = asyncio.run(synchronizer.load(window))
    _show_occurrences(occurrences, as_json)


@main.command()
@click.argument("title")
@click.option("--date", "anchor", type=DATE, required=True, help="Event date (YYYY-MM-DD)")
@click.option("--time", "at", help="Start time (HH:MM); omit for all-day")
@click.option("--recurrence", type=RECURRENCES, default="none", help="Repeat frequency")
@click.option("--type", "kind", type=TYPES, default="event", help="Entry type")
@click.option("--description", help="Optional description")
def add(title: str, anchor: datetime, at: str | None, recurrence: str, kind: str, description: str | None):
    """Create an event."""
    try:
        draft = EventDraft(
            title=title,
            date=anchor.date(),
            time=datetime.strptime(at, "%H:%M").time() if at else None,
            recurrence=Recurrence.parse(recurrence),
            type=EventType(kind.lower()),
            description=description,
        )
    except ValueError as e:
        _fail(e)

    synchronizer = _synchronizer(load_config())
    try:
        event = asyncio.run(synchronizer.create(draft))
    except HomecalError as e:
        _fail(e)
    click.echo(f"Created {event.id}: {event.title} on {event.date.isoformat()}")


@main.command()
@click.argument("event_id")
@click.option("--title", help="New title")
@click.option("--date", "anchor", type=DATE, help="New anchor date")
@click.option("--time", "at", help="New start time (HH:MM)")
@click.option("--clear-time", is_flag=True, help="Make the event all-day")
@click.option("--recurrence", type=RECURRENCES, help="New repeat frequency")
@click.option("--type", "kind", type=TYPES, help="New entry type")
@click.option("--description", help="New description")
def edit(event_id, title, anchor, at, clear_time, recurrence, kind, description):
    """Change fields of an event."""
    changes = {}
    if title is not None:
        changes["title"] = title
    if anchor is not None:
        changes["date"] = anchor.date()
    if clear_time:
        changes["time"] = None
    elif at is not None:
        changes["time"] = at
    if recurrence is not None:
        changes["recurrence"] = recurrence
    if kind is not None:
        changes["type"] = kind.lower()
    if description is not None:
        changes["description"] = description

    if not changes:
        click.echo("Nothing to change.")
        return

    synchronizer = _synchronizer(load_config())
    try:
        event = asyncio.run(synchronizer.update(event_id, **changes))
    except (HomecalError, ValueError) as e:
        _fail(e)
    click.echo(f"Updated {event.id}: {event.title} on {event.date.isoformat()}")


@main.command()
@click.argument("event_id")
def delete(event_id: str):
    """Delete an event and all its occurrences."""
    synchronizer = _synchronizer(load_config())
    try:
        asyncio.run(synchronizer.remove(event_id))
    except HomecalError as e:
        _fail(e)
    click.echo(f"Deleted {event_id}")


@main.command()
def watch():
    """Keep re-syncing the calendar view every SYNC_INTERVAL seconds."""
    config = load_config()

    async def _watch():
        synchronizer = _synchronizer(config)

        async def sync():
            window = window_range(_window(config, date.today()))
            occurrences = await synchronizer.load(window)
            click.echo(f"--- {datetime.now().strftime('%H:%M:%S')} {window} ---")
            _show_occurrences(occurrences, as_json=False)

        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            sync,
            IntervalTrigger(seconds=config.sync_interval),
            id="calendar_sync",
            next_run_time=datetime.now(),
        )
        scheduler.start()
        logger.info(f"Syncing every {config.sync_interval}s")
        try:
            await asyncio.Event().wait()
        finally:
            scheduler.shutdown(wait=False)

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        click.echo("Stopped.")
