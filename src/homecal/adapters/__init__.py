"""Adapters - I/O implementations of ports."""

from .api_store import ApiEventStore
from .file_store import FileEventStore

__all__ = [
    "ApiEventStore",
    "FileEventStore",
]
