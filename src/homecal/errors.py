"""Error taxonomy shared by the core, the synchronizer and the adapters."""


class HomecalError(Exception):
    """Base class for all homecal errors."""

    pass


class NotFound(HomecalError):
    """Raised when an event id is absent from the catalog or the store."""

    def __init__(self, event_id: str):
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class PersistenceUnavailable(HomecalError):
    """Raised when the persistence backend cannot be reached or fails."""

    pass


class InvalidRecurrenceState(HomecalError):
    """Raised for a catalog entry with a malformed anchor date or recurrence."""

    pass
