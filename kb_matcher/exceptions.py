"""Exception hierarchy for the knowledge-base matcher."""

from typing import Optional


class KnowledgeBaseError(Exception):
    """Base class for all matcher errors."""


class RepositoryUnavailableError(KnowledgeBaseError):
    """The backing entry store could not be reached or read."""
    
    def __init__(self, message: str, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source


class NoEntriesAvailableError(KnowledgeBaseError):
    """Neither the repository nor the bundled seed set produced any entries."""


class EntryNotFoundError(KnowledgeBaseError):
    """An operation referenced an entry id the store does not hold."""
    
    def __init__(self, entry_id: str) -> None:
        super().__init__(f"Entry not found: {entry_id}")
        self.entry_id = entry_id


class InvalidEntryError(KnowledgeBaseError):
    """A stored record could not be turned into a usable entry."""
    
    def __init__(self, entry_id: Optional[str], reason: str) -> None:
        super().__init__(f"Invalid entry {entry_id!r}: {reason}")
        self.entry_id = entry_id
        self.reason = reason
