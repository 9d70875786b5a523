"""
Event store synchronizer - owns the catalog and keeps the resolved view current.

Every catalog change (load, create, update, remove) is followed by a full
re-resolution of the displayed range from the catalog snapshot. The resolved
list is never patched in place; recurring events interleave with everything
else and recomputing is cheap at personal-calendar scale.

Each load or write bumps `version`. A load that suspends on the store and
comes back to find a newer load discards its result. Writes that landed while
it was suspended are replayed onto its fetched catalog instead, so the write
still wins without losing the rest of the fetch.
"""

import logging
from datetime import date
from typing import Callable

from .core.calendar_math import expand_range, month_end, month_start, shift_month
from .core.dates import DateRange
from .core.events import CalendarEvent, EventDraft, Occurrence, apply_changes
from .core.resolver import resolve, resolve_for_day
from .errors import NotFound, PersistenceUnavailable
from .ports.event_store import EventStore

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "default"
DEFAULT_FETCH_MARGIN_MONTHS = 6

Listener = Callable[[list[Occurrence]], None]
CatalogPatch = Callable[[tuple[CalendarEvent, ...]], tuple[CalendarEvent, ...]]


def _upsert(catalog: tuple[CalendarEvent, ...], event: CalendarEvent) -> tuple[CalendarEvent, ...]:
    if any(e.id == event.id for e in catalog):
        return tuple(event if e.id == event.id else e for e in catalog)
    return catalog + (event,)


def _without(catalog: tuple[CalendarEvent, ...], event_id: str) -> tuple[CalendarEvent, ...]:
    return tuple(e for e in catalog if e.id != event_id)


def default_range(today: date | None = None) -> DateRange:
    """Start of last month through the end of next month."""
    today = today or date.today()
    return DateRange(month_start(shift_month(today, -1)), month_end(shift_month(today, 1)))


class EventSynchronizer:
    """
    Single writer of the event catalog.

    Mediates CRUD against an EventStore and re-resolves the displayed range
    after every change. Also holds the UI selection state, since deleting an
    event must clear a selection that points at it.
    """

    def __init__(
        self,
        store: EventStore,
        fetch_margin_months: int = DEFAULT_FETCH_MARGIN_MONTHS,
        default_window: DateRange | None = None,
    ):
        self._store = store
        self.fetch_margin_months = fetch_margin_months
        self._default_window = default_window
        self._catalog: tuple[CalendarEvent, ...] = ()
        self._displayed_range: DateRange | None = None
        self._occurrences: list[Occurrence] = []
        self._version = 0
        self._latest_load = 0
        self._loading: set[str] = set()
        self._pending_writes: list[tuple[int, CatalogPatch]] = []
        self._listeners: list[Listener] = []
        self.selected_date: date | None = None
        self.selected_occurrence: Occurrence | None = None

    # ============== State ==============

    @property
    def catalog(self) -> tuple[CalendarEvent, ...]:
        return self._catalog

    @property
    def displayed_range(self) -> DateRange | None:
        return self._displayed_range

    @property
    def occurrences(self) -> list[Occurrence]:
        return list(self._occurrences)

    @property
    def version(self) -> int:
        return self._version

    def is_loading(self, scope: str = DEFAULT_SCOPE) -> bool:
        return scope in self._loading

    def add_listener(self, listener: Listener) -> None:
        """Register a callback for every authoritative re-resolution."""
        self._listeners.append(listener)

    def occurrences_for_day(self, day: date) -> list[Occurrence]:
        return resolve_for_day(self._catalog, day)

    def select_date(self, day: date | None) -> None:
        self.selected_date = day
        self.selected_occurrence = None

    def select_occurrence(self, occurrence: Occurrence | None) -> None:
        self.selected_occurrence = occurrence
        self.selected_date = occurrence.date if occurrence else None

    # ============== Resolution ==============

    def _publish(self, catalog: tuple[CalendarEvent, ...], window: DateRange | None) -> list[Occurrence]:
        """Install a new catalog snapshot and fully re-resolve the window."""
        self._catalog = catalog
        self._displayed_range = window
        self._occurrences = resolve(catalog, window) if window else []
        for listener in self._listeners:
            listener(list(self._occurrences))
        return list(self._occurrences)

    def _bump_version(self) -> int:
        self._version += 1
        return self._version

    def _apply_write(self, patch: CatalogPatch) -> None:
        """Patch the catalog after a successful write and re-resolve."""
        version = self._bump_version()
        if self._loading:
            self._pending_writes.append((version, patch))
        self._publish(patch(self._catalog), self._displayed_range)

    # ============== Loading ==============

    async def load(self, window: DateRange | None = None, scope: str = DEFAULT_SCOPE) -> list[Occurrence]:
        """
        Fetch the catalog around `window` and resolve the window.

        The store is asked for a margin-expanded window so recurring events
        anchored before the range still show up; the result is resolved over
        the original window only. A second load for a scope that is already
        loading is dropped. A store failure degrades to an empty view.
        """
        if scope in self._loading:
            logger.debug(f"Load already in flight for scope {scope!r}, dropping")
            return list(self._occurrences)

        window = window or self._default_window or default_range()
        fetch_window = expand_range(window, self.fetch_margin_months)
        version = self._bump_version()
        self._latest_load = version
        self._loading.add(scope)
        try:
            catalog = await self._store.fetch_by_range(fetch_window.start, fetch_window.end)
        except PersistenceUnavailable as e:
            logger.warning(f"Failed to load events for {window}: {e}")
            if version != self._version:
                return list(self._occurrences)
            return self._publish((), window)
        finally:
            self._loading.discard(scope)
            writes = [patch for v, patch in self._pending_writes if v > version]
            if not self._loading:
                self._pending_writes.clear()

        if self._latest_load != version:
            logger.info(f"Discarding stale load for {window} (version {version}, now {self._version})")
            return list(self._occurrences)

        catalog = tuple(catalog)
        if writes:
            logger.info(f"Replaying {len(writes)} write(s) made during load of {window}")
            for patch in writes:
                catalog = patch(catalog)
        return self._publish(catalog, window)

    async def refresh(self, scope: str = DEFAULT_SCOPE) -> list[Occurrence]:
        """Re-load the displayed range."""
        return await self.load(self._displayed_range, scope)

    # ============== Writes ==============

    async def _find(self, event_id: str) -> CalendarEvent:
        """Look an event up in the catalog, then in the store."""
        for event in self._catalog:
            if event.id == event_id:
                return event
        return await self._store.get(event_id)

    async def create(self, draft: EventDraft) -> CalendarEvent:
        """Store a new event and re-resolve the displayed range."""
        try:
            event = await self._store.insert(draft)
        except PersistenceUnavailable as e:
            logger.error(f"Failed to create event {draft.title!r}: {e}")
            raise

        self._apply_write(lambda catalog: _upsert(catalog, event))
        return event

    async def update(self, event_id: str, **changes) -> CalendarEvent:
        """
        Merge field changes into an event and re-resolve.

        Events outside the loaded catalog are read from the store first.
        Raises NotFound if the store has no such id, and ValueError for
        unknown fields or an id change.
        """
        try:
            current = await self._find(event_id)
            merged = apply_changes(current, changes)
            updated = await self._store.replace(event_id, merged)
        except (NotFound, PersistenceUnavailable) as e:
            logger.error(f"Failed to update event {event_id!r}: {e}")
            raise

        self._apply_write(lambda catalog: _upsert(catalog, updated))
        return updated

    async def remove(self, event_id: str) -> None:
        """Delete an event, clear a selection pointing at it, and re-resolve."""
        try:
            await self._store.remove(event_id)
        except (NotFound, PersistenceUnavailable) as e:
            logger.error(f"Failed to remove event {event_id!r}: {e}")
            raise

        if self.selected_occurrence and self.selected_occurrence.id == event_id:
            self.selected_occurrence = None

        self._apply_write(lambda catalog: _without(catalog, event_id))
