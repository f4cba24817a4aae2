"""Index data structures built from a loaded entry set."""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import structlog

from ..models.entry import KnowledgeEntry
from .fuzzy_matcher import FuzzyIndex
from .normalizer import TextNormalizer

logger = structlog.get_logger(__name__)


class ExactMatchIndex:
    """Hash map from normalized phrasings and keywords to their entry."""
    
    def __init__(self, normalizer: Optional[TextNormalizer] = None) -> None:
        """Initialize the exact-match index."""
        self.normalizer = normalizer or TextNormalizer()
        self._index: Dict[str, KnowledgeEntry] = {}
        self._stats = {
            "total_keys": 0,
            "overwritten_keys": 0,
            "last_updated": None
        }
    
    def add_entry(self, entry: KnowledgeEntry) -> None:
        """
        Register every phrasing and keyword of an entry.
        
        A key already owned by another entry is overwritten (last
        registered wins); the collision is counted and logged.
        
        Args:
            entry: Entry to register
        """
        for text in [*entry.phrasings, *entry.keywords]:
            key = self.normalizer.normalize(text)
            if not key:
                continue
            
            previous = self._index.get(key)
            if previous is not None and previous.id != entry.id:
                self._stats["overwritten_keys"] += 1
                logger.debug(
                    "Exact-match key reassigned",
                    key=key,
                    previous_entry=previous.id,
                    entry=entry.id
                )
            self._index[key] = entry
        
        self._stats["total_keys"] = len(self._index)
        self._stats["last_updated"] = time.time()
    
    def lookup(self, normalized_query: str) -> Optional[KnowledgeEntry]:
        """
        Look up an already-normalized query.
        
        Args:
            normalized_query: Query passed through the same normalizer
            
        Returns:
            The owning entry or None
        """
        if not normalized_query:
            return None
        return self._index.get(normalized_query)
    
    def __len__(self) -> int:
        return len(self._index)
    
    def __contains__(self, key: str) -> bool:
        return key in self._index
    
    def get_stats(self) -> Dict[str, any]:
        """Get index statistics."""
        return self._stats.copy()


@dataclass(frozen=True)
class IndexSnapshot:
    """An entry set with both of its indices, published as one unit."""
    
    entries: Tuple[KnowledgeEntry, ...]
    exact_index: ExactMatchIndex
    fuzzy_index: FuzzyIndex
    source: str
    skipped: int = 0
    built_at: float = field(default_factory=time.time)
    
    @classmethod
    def build(
        cls,
        entries: List[KnowledgeEntry],
        fuzzy_index: FuzzyIndex,
        normalizer: TextNormalizer,
        source: str,
        skipped: int = 0
    ) -> "IndexSnapshot":
        """
        Build fresh indices over an entry set.
        
        Nothing is shared with any previous snapshot, so publishing the
        result is a single reference swap.
        
        Args:
            entries: Validated entries
            fuzzy_index: Empty fuzzy index to populate
            normalizer: Normalizer shared by indexing and querying
            source: Label of where the entries came from
            skipped: Number of records rejected during loading
        """
        exact_index = ExactMatchIndex(normalizer)
        for entry in entries:
            exact_index.add_entry(entry)
        fuzzy_index.build(entries)
        
        logger.info(
            "Search indices built",
            entries=len(entries),
            exact_keys=len(exact_index),
            overwritten_keys=exact_index.get_stats()["overwritten_keys"],
            source=source
        )
        
        return cls(
            entries=tuple(entries),
            exact_index=exact_index,
            fuzzy_index=fuzzy_index,
            source=source,
            skipped=skipped
        )
