"""Token-overlap scoring between a query and entry keyword lists."""

from typing import Iterable, List, Optional

from ..models.entry import KnowledgeEntry, Match, MatchType
from .normalizer import TextNormalizer


class KeywordScorer:
    """Scores entries by how many of their keywords the query touches."""
    
    def __init__(
        self,
        floor: float = 0.3,
        scale: float = 0.8,
        cap: float = 0.95,
        normalizer: Optional[TextNormalizer] = None
    ) -> None:
        """
        Initialize the keyword scorer.
        
        Args:
            floor: Confidence added to every non-zero overlap
            scale: Weight of the matched keyword ratio
            cap: Upper bound, kept below the exact-match tier
        """
        self.floor = floor
        self.scale = scale
        self.cap = cap
        self.normalizer = normalizer or TextNormalizer()
    
    def confidence(self, matched: int, total: int) -> float:
        """Confidence for `matched` of `total` keywords hit."""
        if matched <= 0 or total <= 0:
            return 0.0
        return min(self.cap, (matched / total) * self.scale + self.floor)
    
    def count_matches(self, query_tokens: List[str], keywords: Iterable[str]) -> int:
        """
        Count keywords with at least one token overlapping a query token.
        
        Two tokens overlap when either one contains the other.
        """
        matched = 0
        for keyword in keywords:
            keyword_tokens = self.normalizer.tokenize(keyword)
            if any(
                qt in kt or kt in qt
                for kt in keyword_tokens
                for qt in query_tokens
            ):
                matched += 1
        return matched
    
    def find_matches(
        self,
        query: str,
        entries: Iterable[KnowledgeEntry],
        limit: Optional[int] = None
    ) -> List[Match]:
        """
        Produce keyword candidates for a query.
        
        Entries without any keyword overlap produce no candidate.
        
        Args:
            query: Original query string
            entries: Entries to score
            limit: Keep only this many of the strongest candidates
            
        Returns:
            Candidates in descending confidence, corpus order on ties
        """
        query_tokens = self.normalizer.tokenize(query)
        if not query_tokens:
            return []
        
        matches = []
        for entry in entries:
            if not entry.keywords:
                continue
            
            matched = self.count_matches(query_tokens, entry.keywords)
            if matched == 0:
                continue
            
            matches.append(Match(
                entry=entry,
                confidence=self.confidence(matched, len(entry.keywords)),
                matched_query=query,
                match_type=MatchType.KEYWORD
            ))
        
        # sort is stable, so equal scores keep corpus order
        matches.sort(key=lambda m: m.confidence, reverse=True)
        if limit is not None:
            return matches[:limit]
        return matches
