"""File-based event storage adapter."""

import asyncio
import json
import logging
import uuid
from datetime import date
from pathlib import Path

from homecal.core.events import CalendarEvent, EventDraft
from homecal.errors import InvalidRecurrenceState, NotFound, PersistenceUnavailable

logger = logging.getLogger(__name__)


def _record_id(record):
    return record.get("id") if isinstance(record, dict) else record


class FileEventStore:
    """
    Local JSON file storage.

    Implements EventStore protocol. All events live in one JSON array.
    File I/O runs in a worker thread so the event loop never blocks on disk.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _read(self) -> list:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PersistenceUnavailable(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, list):
            raise PersistenceUnavailable(f"Expected a JSON array in {self.path}")
        return data

    def _write(self, records: list) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(".tmp")
            tmp.write_text(json.dumps(records, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            raise PersistenceUnavailable(f"Cannot write {self.path}: {e}") from e

    def _index_of(self, records: list, event_id: str) -> int:
        for i, record in enumerate(records):
            if isinstance(record, dict) and str(record.get("id")) == event_id:
                return i
        raise NotFound(event_id)

    # ============== Sync implementations ==============

    def _fetch(self, start: date, end: date) -> list[CalendarEvent]:
        events = []
        for record in self._read():
            try:
                event = CalendarEvent.from_api(record)
            except (InvalidRecurrenceState, KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed record {_record_id(record)!r} in {self.path}: {e}")
                continue
            if start <= event.date <= end:
                events.append(event)
        return events

    def _get(self, event_id: str) -> CalendarEvent:
        records = self._read()
        record = records[self._index_of(records, event_id)]
        try:
            return CalendarEvent.from_api(record)
        except (InvalidRecurrenceState, KeyError, ValueError, TypeError) as e:
            raise PersistenceUnavailable(f"Malformed record {event_id!r} in {self.path}: {e}") from e

    def _insert(self, draft: EventDraft) -> CalendarEvent:
        records = self._read()
        event = draft.with_id(str(uuid.uuid4()))
        records.append(event.to_api())
        self._write(records)
        return event

    def _replace(self, event_id: str, event: CalendarEvent) -> CalendarEvent:
        records = self._read()
        index = self._index_of(records, event_id)
        records[index] = event.to_api()
        self._write(records)
        return event

    def _remove(self, event_id: str) -> None:
        records = self._read()
        index = self._index_of(records, event_id)
        del records[index]
        self._write(records)

    # ============== EventStore ==============

    async def fetch_by_range(self, start: date, end: date) -> list[CalendarEvent]:
        """Fetch events anchored in [start, end]. Malformed records are skipped."""
        return await asyncio.to_thread(self._fetch, start, end)

    async def get(self, event_id: str) -> CalendarEvent:
        return await asyncio.to_thread(self._get, event_id)

    async def insert(self, draft: EventDraft) -> CalendarEvent:
        return await asyncio.to_thread(self._insert, draft)

    async def replace(self, event_id: str, event: CalendarEvent) -> CalendarEvent:
        return await asyncio.to_thread(self._replace, event_id, event)

    async def remove(self, event_id: str) -> None:
        await asyncio.to_thread(self._remove, event_id)
