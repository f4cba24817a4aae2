"""Domain models for knowledge-base entries and matches."""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class MatchType(str, Enum):
    """Strategy that produced a match."""
    
    EXACT = "exact"
    KEYWORD = "keyword"
    FUZZY = "fuzzy"


class KnowledgeEntry(BaseModel):
    """A unit of reusable help content."""
    
    model_config = ConfigDict(populate_by_name=True)
    
    id: str = Field(..., min_length=1, description="Stable unique identifier")
    category: str = Field(default="General", description="Free-text grouping label")
    phrasings: List[str] = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("phrasings", "questions"),
        description="Distinct ways to ask the same underlying question",
    )
    answer: str = Field(..., description="Response body, may contain placeholders")
    keywords: List[str] = Field(default_factory=list, description="Supplementary matching terms")
    priority: int = Field(default=0, description="Tie-breaker, higher sorts first")
    last_updated: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        validation_alias=AliasChoices("last_updated", "lastUpdated"),
    )
    usage_count: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("usage_count", "usageCount"),
    )
    
    @field_validator("phrasings")
    @classmethod
    def validate_phrasings(cls, v: List[str]) -> List[str]:
        """Drop blank phrasings and require at least one real one."""
        phrasings = [p.strip() for p in v if p and p.strip()]
        if not phrasings:
            raise ValueError("Entry must have at least one non-blank phrasing")
        return phrasings
    
    @field_validator("keywords")
    @classmethod
    def validate_keywords(cls, v: List[str]) -> List[str]:
        return [k.strip() for k in v if k and k.strip()]


class Match(BaseModel):
    """A candidate entry for a query, with its confidence."""
    
    entry: KnowledgeEntry
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence score (0-1)")
    matched_query: str = Field(..., description="Original, un-normalized query")
    match_type: MatchType


class UsageStats(BaseModel):
    """Corpus-level usage statistics."""
    
    total_queries: int = Field(..., description="Sum of usage counts across entries")
    entries_hit: int = Field(..., description="Entries surfaced at least once")
    per_category_totals: Dict[str, int] = Field(default_factory=dict)
