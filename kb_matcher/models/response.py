"""Response models for API endpoints."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .entry import KnowledgeEntry, Match


class MatchResponse(BaseModel):
    """Response for match queries."""
    
    query: str = Field(..., description="Original query")
    execution_time_ms: float = Field(..., description="Query execution time in milliseconds")
    exact_match: bool = Field(..., description="Whether an exact match was found")
    total_results: int = Field(..., description="Total number of matches")
    matches: List[Match] = Field(..., description="Ranked matches")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Response timestamp")


class BestMatchResponse(BaseModel):
    """Response for best-match queries."""
    
    query: str
    execution_time_ms: float
    match: Match
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EntryListResponse(BaseModel):
    """All loaded entries."""
    
    total: int
    entries: List[KnowledgeEntry]


class CategoryResponse(BaseModel):
    """Entries grouped by category, priority descending."""
    
    total_categories: int
    categories: Dict[str, List[KnowledgeEntry]]


class UsageResponse(BaseModel):
    """Usage statistics plus tracker counters."""
    
    total_queries: int
    entries_hit: int
    per_category_totals: Dict[str, int]
    tracker: Dict[str, int] = Field(..., description="Usage tracker delivery counters")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ReloadResponse(BaseModel):
    """Result of an explicit reload."""
    
    status: str
    total_entries: int
    source: str
    skipped_entries: int
    execution_time_ms: float


class ErrorResponse(BaseModel):
    """Error response model."""
    
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Error timestamp")


class HealthResponse(BaseModel):
    """Health check response."""
    
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
    uptime: float = Field(..., description="Service uptime in seconds")
    entries_loaded: int = Field(..., description="Entries currently indexed")
    entry_source: Optional[str] = Field(None, description="Where the entry set came from")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Check timestamp")
    dependencies: Dict[str, str] = Field(..., description="Dependency status")
