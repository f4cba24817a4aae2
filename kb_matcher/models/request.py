"""Request models for API endpoints."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class MatchRequest(BaseModel):
    """Request model for match queries."""
    
    query: str = Field(..., min_length=1, max_length=500, description="Free-text question")
    max_results: Optional[int] = Field(
        None, ge=1, le=50, description="Maximum number of matches to return"
    )
    min_confidence: Optional[float] = Field(
        None, ge=0.0, le=1.0, description="Minimum confidence for a match"
    )

    @field_validator('query')
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Validate query input."""
        if not v or not v.strip():
            raise ValueError("Query cannot be empty")
        return v.strip()


class BestMatchRequest(BaseModel):
    """Request model for best-match queries."""
    
    query: str = Field(..., min_length=1, max_length=500, description="Free-text question")
    min_confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    substitution: Optional[str] = Field(
        None, max_length=200, description="Value substituted for the answer placeholder"
    )

    @field_validator('query')
    @classmethod
    def validate_query(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Query cannot be empty")
        return v.strip()
