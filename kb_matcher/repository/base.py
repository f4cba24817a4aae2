"""Entry repository interface and record validation."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple

import structlog
from pydantic import ValidationError

from ..exceptions import InvalidEntryError
from ..models.entry import KnowledgeEntry

logger = structlog.get_logger(__name__)

# Checked in order; the first spelling present in a document is kept
USAGE_FIELDS = ("usage_count", "usageCount")


def bump_usage(document: Dict[str, Any]) -> None:
    """Increment a stored usage counter under the field name it already uses."""
    field = next((f for f in USAGE_FIELDS if f in document), USAGE_FIELDS[0])
    document[field] = int(document.get(field) or 0) + 1


class EntryRepository(ABC):
    """
    External document store holding knowledge-base entries.
    
    The matcher only relies on `fetch_all` and `increment_usage`; the
    remaining CRUD methods serve administration tooling.
    """
    
    name: str = "repository"
    
    @abstractmethod
    async def fetch_all(self) -> List[Dict[str, Any]]:
        """
        Return every stored entry document.
        
        Raises:
            RepositoryUnavailableError: The store cannot be reached or read
        """
    
    @abstractmethod
    async def increment_usage(self, entry_id: str) -> None:
        """
        Atomically add one to an entry's usage counter.
        
        Raises:
            EntryNotFoundError: No entry has this id
        """
    
    @abstractmethod
    async def get(self, entry_id: str) -> Optional[KnowledgeEntry]:
        """Fetch a single entry, or None."""
    
    @abstractmethod
    async def upsert(self, entry: KnowledgeEntry) -> None:
        """Create or replace an entry."""
    
    @abstractmethod
    async def delete(self, entry_id: str) -> bool:
        """Delete an entry; True if it existed."""


def _describe(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(p) for p in detail.get("loc", ()))
        parts.append(f"{location}: {detail.get('msg')}" if location else detail.get("msg", ""))
    return "; ".join(parts)


def parse_entries(
    records: Iterable[Any],
    source: str = "repository"
) -> Tuple[List[KnowledgeEntry], List[InvalidEntryError]]:
    """
    Validate raw documents into entries.
    
    Malformed records and repeated ids are skipped and reported instead
    of aborting the whole load.
    
    Args:
        records: Raw entry documents
        source: Label used in log events
        
    Returns:
        Tuple of (valid entries in input order, rejected records)
    """
    entries: List[KnowledgeEntry] = []
    rejected: List[InvalidEntryError] = []
    seen = set()
    
    for record in records:
        if not isinstance(record, dict):
            rejected.append(InvalidEntryError(None, f"expected an object, got {type(record).__name__}"))
            continue
        
        entry_id = record.get("id")
        try:
            entry = KnowledgeEntry.model_validate(record)
        except ValidationError as e:
            rejected.append(InvalidEntryError(entry_id, _describe(e)))
            continue
        
        if entry.id in seen:
            rejected.append(InvalidEntryError(entry.id, "duplicate id"))
            continue
        
        seen.add(entry.id)
        entries.append(entry)
    
    for error in rejected:
        logger.warning(
            "Skipping invalid entry",
            source=source,
            entry_id=error.entry_id,
            reason=error.reason
        )
    
    return entries, rejected
