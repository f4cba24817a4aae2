"""Core matching functionality."""

from .engine import MatchingEngine
from .fuzzy_matcher import FuzzyIndex
from .index import ExactMatchIndex, IndexSnapshot
from .keyword_scorer import KeywordScorer
from .normalizer import TextNormalizer
from .ranker import DedupStrategy, Ranker
from .usage import UsageTracker

__all__ = [
    "MatchingEngine",
    "FuzzyIndex",
    "ExactMatchIndex",
    "IndexSnapshot",
    "KeywordScorer",
    "TextNormalizer",
    "DedupStrategy",
    "Ranker",
    "UsageTracker",
]
