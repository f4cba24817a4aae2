"""Approximate string matching over weighted entry fields."""

import sys
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from rapidfuzz import fuzz
from rapidfuzz.distance import Levenshtein

from ..models.entry import KnowledgeEntry, Match, MatchType
from .normalizer import TextNormalizer

# Stand-in for a perfect field score so the weighted product stays positive
EPSILON = sys.float_info.epsilon

PHRASINGS = "phrasings"
KEYWORDS = "keywords"
ANSWER = "answer"


@dataclass(frozen=True)
class IndexedEntry:
    """An entry with its searchable fields pre-normalized."""
    
    entry: KnowledgeEntry
    position: int
    fields: Dict[str, Tuple[str, ...]]


class FuzzyIndex:
    """
    Weighted fuzzy index over phrasings, keywords and answer body.
    
    Raw scores follow the usual fuzzy-search convention: 0.0 is a perfect
    hit and 1.0 no match at all. Each field value is scored by the best
    alignment of the query inside it, plus a proximity penalty of
    ``offset / distance`` so hits deep inside a long body count less.
    Values scoring above ``threshold`` are misses. The per-field best
    scores are combined as ``prod(score ** weight)`` over the fields
    that hit, which rewards entries that match in several fields.
    """
    
    def __init__(
        self,
        phrasing_weight: float = 0.7,
        keyword_weight: float = 0.2,
        answer_weight: float = 0.1,
        threshold: float = 0.4,
        distance: int = 100,
        min_match_length: int = 3,
        normalizer: Optional[TextNormalizer] = None
    ) -> None:
        """
        Initialize the fuzzy index.
        
        Args:
            phrasing_weight: Weight of the phrasings field
            keyword_weight: Weight of the keywords field
            answer_weight: Weight of the answer body
            threshold: Largest raw score still counted as a hit (lower = stricter)
            distance: Offset budget; a hit this many characters in costs 1.0
            min_match_length: Shortest query or field value considered
        """
        total = phrasing_weight + keyword_weight + answer_weight
        if total <= 0:
            raise ValueError("Field weights must sum to a positive number")
        if distance <= 0:
            raise ValueError("Distance must be positive")
        
        self.weights = {
            PHRASINGS: phrasing_weight / total,
            KEYWORDS: keyword_weight / total,
            ANSWER: answer_weight / total,
        }
        self.threshold = threshold
        self.distance = distance
        self.min_match_length = min_match_length
        self.normalizer = normalizer or TextNormalizer()
        self._records: List[IndexedEntry] = []
    
    def build(self, entries: Iterable[KnowledgeEntry]) -> None:
        """
        (Re)build the index over an entry set.
        
        Args:
            entries: Entries to index
        """
        records = []
        for position, entry in enumerate(entries):
            fields = {
                PHRASINGS: self._normalize_all(entry.phrasings),
                KEYWORDS: self._normalize_all(entry.keywords),
                ANSWER: self._normalize_all([entry.answer]),
            }
            records.append(IndexedEntry(entry=entry, position=position, fields=fields))
        self._records = records
    
    def _normalize_all(self, values: Iterable[str]) -> Tuple[str, ...]:
        normalized = (self.normalizer.normalize(v) for v in values)
        return tuple(v for v in normalized if len(v) >= self.min_match_length)
    
    def __len__(self) -> int:
        return len(self._records)
    
    def score_value(self, pattern: str, text: str) -> Optional[float]:
        """
        Raw score of a normalized pattern against one normalized value.
        
        Args:
            pattern: Normalized query
            text: Normalized field value
            
        Returns:
            Score in [0, threshold], or None when the value is a miss
        """
        if len(pattern) <= len(text):
            alignment = fuzz.partial_ratio_alignment(pattern, text)
            similarity = alignment.score / 100.0
            offset = alignment.dest_start
        else:
            # Pattern longer than the value: every missing character is an error
            similarity = Levenshtein.normalized_similarity(pattern, text)
            offset = 0
        
        score = (1.0 - similarity) + offset / self.distance
        if score > self.threshold:
            return None
        return max(0.0, score)
    
    def score_entry(self, pattern: str, record: IndexedEntry) -> Optional[float]:
        """
        Combined raw score of a pattern against every field of an entry.
        
        Returns:
            Score in [0, 1], or None when no field hit
        """
        total = 1.0
        hit = False
        for name, weight in self.weights.items():
            if weight <= 0:
                continue
            
            scores = [
                s for s in (self.score_value(pattern, v) for v in record.fields[name])
                if s is not None
            ]
            if not scores:
                continue
            
            hit = True
            best = min(scores)
            total *= (EPSILON if best == 0 else best) ** weight
        
        if not hit:
            return None
        return min(1.0, max(0.0, total))
    
    def search(self, query: str, limit: Optional[int] = None) -> List[Tuple[KnowledgeEntry, float]]:
        """
        Search the index.
        
        Args:
            query: Raw query
            limit: Maximum number of hits
            
        Returns:
            (entry, raw score) pairs, best first, corpus order on ties
        """
        pattern = self.normalizer.normalize(query)
        if len(pattern) < self.min_match_length:
            return []
        
        hits = []
        for record in self._records:
            score = self.score_entry(pattern, record)
            if score is not None:
                hits.append((score, record.position, record.entry))
        
        hits.sort(key=lambda h: (h[0], h[1]))
        if limit is not None:
            hits = hits[:limit]
        return [(entry, score) for score, _, entry in hits]
    
    def find_matches(self, query: str, limit: Optional[int] = None) -> List[Match]:
        """
        Fuzzy candidates with confidence ``1 - raw score``.
        
        Args:
            query: Original query string
            limit: Maximum number of candidates
        """
        return [
            Match(
                entry=entry,
                confidence=1.0 - score,
                matched_query=query,
                match_type=MatchType.FUZZY
            )
            for entry, score in self.search(query, limit)
        ]
