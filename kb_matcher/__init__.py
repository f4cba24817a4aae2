"""
Knowledge Base Matcher - layered question-to-answer matching for self-service help.

Matches free-text questions against knowledge-base entries using exact,
keyword-overlap and fuzzy strategies, ranks the candidates by confidence and
priority, and records which entries were surfaced.
"""

__version__ = "1.0.0"

from .core.engine import MatchingEngine
from .models.entry import KnowledgeEntry, Match, MatchType, UsageStats

__all__ = [
    "MatchingEngine",
    "KnowledgeEntry",
    "Match",
    "MatchType",
    "UsageStats",
]
