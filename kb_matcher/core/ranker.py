"""Merging, deduplication and ordering of candidate matches."""

from enum import Enum
from typing import Dict, Iterable, List

from ..models.entry import Match


class DedupStrategy(str, Enum):
    """Which candidate survives when several name the same entry."""
    
    FIRST = "first"  # first-encountered wins, whatever its confidence
    BEST = "best"    # highest confidence wins, first-encountered on ties


class Ranker:
    """Merges candidates from all strategies into the final result list."""
    
    def __init__(
        self,
        tie_break_margin: float = 0.1,
        dedup_strategy: DedupStrategy = DedupStrategy.FIRST
    ) -> None:
        """
        Initialize the ranker.
        
        Args:
            tie_break_margin: Confidences closer than this are ordered by priority
            dedup_strategy: Duplicate resolution policy
        """
        self.tie_break_margin = tie_break_margin
        self.dedup_strategy = DedupStrategy(dedup_strategy)
    
    def deduplicate(self, candidates: Iterable[Match]) -> List[Match]:
        """
        Keep one candidate per entry id, in first-seen order.
        
        Args:
            candidates: Candidates in strategy order (exact, keyword, fuzzy)
        """
        kept: Dict[str, Match] = {}
        for match in candidates:
            entry_id = match.entry.id
            current = kept.get(entry_id)
            if current is None:
                kept[entry_id] = match
            elif (
                self.dedup_strategy is DedupStrategy.BEST
                and match.confidence > current.confidence
            ):
                kept[entry_id] = match
        return list(kept.values())
    
    def compare(self, a: Match, b: Match) -> int:
        """
        Ordering used for the final sort.
        
        Confidence descending; when two confidences are within the
        tie-break margin, entry priority descending instead.
        """
        if abs(a.confidence - b.confidence) < self.tie_break_margin:
            return b.entry.priority - a.entry.priority
        return -1 if a.confidence > b.confidence else 1
    
    def order(self, matches: Iterable[Match]) -> List[Match]:
        """
        Arrange matches so every adjacent pair respects `compare`.
        
        `compare` is not transitive (priority can overrule a confidence
        gap spread across several near-ties), so a plain sort only
        guarantees a consistent order for pairs it happens to compare.
        Each match is instead inserted before the first neighbour it
        must precede, keeping the whole list valid after every insertion.
        """
        ordered: List[Match] = []
        for match in matches:
            position = len(ordered)
            for i, placed in enumerate(ordered):
                if self.compare(match, placed) < 0:
                    position = i
                    break
            ordered.insert(position, match)
        return ordered
    
    def rank(
        self,
        candidates: Iterable[Match],
        max_results: int,
        min_confidence: float
    ) -> List[Match]:
        """
        Deduplicate, filter, sort and truncate.
        
        Args:
            candidates: Unordered union of all strategy candidates
            max_results: Maximum number of matches to keep
            min_confidence: Matches below this are discarded
            
        Returns:
            Final ranked matches
        """
        if max_results <= 0:
            return []
        
        unique = self.deduplicate(candidates)
        eligible = [m for m in unique if m.confidence >= min_confidence]
        
        # A fixed pre-order keeps ties deterministic
        eligible.sort(key=lambda m: (-m.confidence, -m.entry.priority, m.entry.id))
        
        return self.order(eligible)[:max_results]
