"""Loads the entry set, degrading to the bundled seed set."""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

import structlog

from ..exceptions import InvalidEntryError, NoEntriesAvailableError
from ..models.entry import KnowledgeEntry
from .base import EntryRepository, parse_entries
from .json_store import read_documents

logger = structlog.get_logger(__name__)

SEED_SOURCE = "seed"


@dataclass
class LoadResult:
    """Entries produced by one load, with provenance."""
    
    entries: List[KnowledgeEntry]
    source: str
    rejected: List[InvalidEntryError] = field(default_factory=list)
    
    @property
    def degraded(self) -> bool:
        return self.source == SEED_SOURCE


class EntryLoader:
    """
    Fetches the current entry set from the repository.
    
    When the repository fails for any reason the bundled seed set is
    served instead, so the matcher stays usable. Only a failing
    repository together with a missing or unreadable seed set is a
    hard error.
    """
    
    def __init__(
        self,
        repository: Optional[EntryRepository],
        seed_path: Optional[Union[str, Path]] = None
    ) -> None:
        """
        Initialize the loader.
        
        Args:
            repository: Primary store (None means seed only)
            seed_path: Bundled fallback entry file
        """
        self.repository = repository
        self.seed_path = Path(seed_path) if seed_path else None
    
    async def load_all(self) -> LoadResult:
        """
        Load and validate every entry.
        
        Raises:
            NoEntriesAvailableError: Repository and seed set both unusable
        """
        if self.repository is not None:
            try:
                records = await self.repository.fetch_all()
            except Exception as e:
                logger.warning(
                    "Entry repository unavailable, falling back to seed entries",
                    repository=self.repository.name,
                    error=str(e)
                )
            else:
                entries, rejected = parse_entries(records, source=self.repository.name)
                logger.info(
                    "Entries loaded",
                    source=self.repository.name,
                    total=len(entries),
                    skipped=len(rejected)
                )
                return LoadResult(entries=entries, source=self.repository.name, rejected=rejected)
        
        return await self.load_seed()
    
    async def load_seed(self) -> LoadResult:
        """
        Load the bundled seed set.
        
        Raises:
            NoEntriesAvailableError: No seed configured or it cannot be read
        """
        if self.seed_path is None:
            raise NoEntriesAvailableError("Entry repository failed and no seed set is configured")
        
        try:
            records = await asyncio.to_thread(read_documents, self.seed_path)
        except (OSError, ValueError) as e:
            logger.error("Seed entries unavailable", path=str(self.seed_path), error=str(e))
            raise NoEntriesAvailableError(
                f"Entry repository failed and seed set {self.seed_path} is unreadable"
            ) from e
        
        entries, rejected = parse_entries(records, source=SEED_SOURCE)
        if not entries:
            raise NoEntriesAvailableError(f"Seed set {self.seed_path} contains no valid entries")
        
        logger.warning(
            "Serving seed entries",
            path=str(self.seed_path),
            total=len(entries),
            skipped=len(rejected)
        )
        return LoadResult(entries=entries, source=SEED_SOURCE, rejected=rejected)
