"""Entry storage backends and the loading adapter."""

from .base import EntryRepository, parse_entries
from .json_store import JsonFileRepository
from .loader import EntryLoader, LoadResult
from .memory import InMemoryEntryRepository

__all__ = [
    "EntryRepository",
    "EntryLoader",
    "InMemoryEntryRepository",
    "JsonFileRepository",
    "LoadResult",
    "parse_entries",
]
