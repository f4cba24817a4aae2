"""Data models for the knowledge-base matcher."""

from .entry import KnowledgeEntry, Match, MatchType, UsageStats
from .request import BestMatchRequest, MatchRequest
from .response import (
    BestMatchResponse,
    CategoryResponse,
    EntryListResponse,
    ErrorResponse,
    HealthResponse,
    MatchResponse,
    ReloadResponse,
    UsageResponse,
)

__all__ = [
    "KnowledgeEntry",
    "Match",
    "MatchType",
    "UsageStats",
    "MatchRequest",
    "BestMatchRequest",
    "MatchResponse",
    "BestMatchResponse",
    "CategoryResponse",
    "EntryListResponse",
    "ErrorResponse",
    "HealthResponse",
    "ReloadResponse",
    "UsageResponse",
]
