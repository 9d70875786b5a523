"""REST API adapter - HTTP client for the calendar backend."""

import asyncio
import logging
import time
from datetime import date

import requests

from homecal.core.dates import format_date
from homecal.core.events import CalendarEvent, EventDraft
from homecal.errors import InvalidRecurrenceState, NotFound, PersistenceUnavailable

logger = logging.getLogger(__name__)

# Status codes worth another attempt
RETRYABLE_STATUS_CODES = {502, 503, 504}
MAX_BACKOFF = 30.0


def _error_message(resp: requests.Response) -> str:
    """Extract the backend's error text, falling back to the status code."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("error") or body.get("details")
        if message:
            return str(message)
    return f"HTTP {resp.status_code}"


class ApiEventStore:
    """
    Calendar backend adapter.

    Implements EventStore protocol. Handles HTTP, retries and error
    translation. No business logic - just I/O. Requests are blocking, so each
    call runs in a worker thread.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self._session = session or requests.Session()
        self._session.headers.setdefault("Content-Type", "application/json")

    def _backoff(self, attempt: int) -> float:
        return min(self.retry_delay * (2**attempt), MAX_BACKOFF)

    def _request(self, method: str, path: str, event_id: str | None = None, **kwargs):
        """Make a request, retrying transient failures. Returns decoded JSON or None."""
        url = f"{self.base_url}{path}"
        attempts = self.retry_attempts + 1

        for attempt in range(attempts):
            last_try = attempt >= attempts - 1
            try:
                resp = self._session.request(method, url, timeout=self.timeout, **kwargs)
            except (requests.ConnectionError, requests.Timeout) as e:
                if last_try:
                    raise PersistenceUnavailable(f"{method} {url} failed: {e}") from e
                delay = self._backoff(attempt)
                logger.info(f"{method} {url} failed ({e}), retrying in {delay:.1f}s")
                time.sleep(delay)
                continue
            except requests.RequestException as e:
                raise PersistenceUnavailable(f"{method} {url} failed: {e}") from e

            if resp.status_code in RETRYABLE_STATUS_CODES and not last_try:
                delay = self._backoff(attempt)
                logger.info(f"{method} {url} returned {resp.status_code}, retrying in {delay:.1f}s")
                time.sleep(delay)
                continue

            if resp.status_code == 404 and event_id is not None:
                raise NotFound(event_id)
            if not resp.ok:
                raise PersistenceUnavailable(f"{method} {url}: {_error_message(resp)}")

            if not resp.content:
                return None
            try:
                return resp.json()
            except ValueError as e:
                raise PersistenceUnavailable(f"{method} {url}: invalid JSON response") from e

        raise RuntimeError("Unexpected exit from request retry loop")

    def _fetch_by_range(self, start: date, end: date) -> list[CalendarEvent]:
        data = self._request(
            "GET",
            "/calendar/range",
            params={"start": format_date(start), "end": format_date(end)},
        )
        events = []
        for item in data or []:
            try:
                events.append(CalendarEvent.from_api(item))
            except (InvalidRecurrenceState, KeyError, ValueError, TypeError) as e:
                item_id = item.get("id") if isinstance(item, dict) else item
                logger.warning(f"Skipping malformed event {item_id!r}: {e}")
        return events

    def _get(self, event_id: str) -> CalendarEvent:
        data = self._request("GET", f"/calendar/{event_id}", event_id=event_id)
        return self._parse_record(data)

    def _insert(self, draft: EventDraft) -> CalendarEvent:
        data = self._request("POST", "/calendar", json=draft.to_api())
        return self._parse_record(data)

    def _replace(self, event_id: str, event: CalendarEvent) -> CalendarEvent:
        data = self._request("PUT", f"/calendar/{event_id}", event_id=event_id, json=event.to_api())
        return self._parse_record(data)

    def _remove(self, event_id: str) -> None:
        self._request("DELETE", f"/calendar/{event_id}", event_id=event_id)

    def _parse_record(self, data) -> CalendarEvent:
        try:
            return CalendarEvent.from_api(data)
        except (InvalidRecurrenceState, KeyError, ValueError, TypeError) as e:
            raise PersistenceUnavailable(f"Backend returned a malformed event: {e}") from e

    async def fetch_by_range(self, start: date, end: date) -> list[CalendarEvent]:
        return await asyncio.to_thread(self._fetch_by_range, start, end)

    async def get(self, event_id: str) -> CalendarEvent:
        return await asyncio.to_thread(self._get, event_id)

    async def insert(self, draft: EventDraft) -> CalendarEvent:
        return await asyncio.to_thread(self._insert, draft)

    async def replace(self, event_id: str, event: CalendarEvent) -> CalendarEvent:
        return await asyncio.to_thread(self._replace, event_id, event)

    async def remove(self, event_id: str) -> None:
        await asyncio.to_thread(self._remove, event_id)

    def close(self) -> None:
        self._session.close()
