"""Match API endpoints."""

import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..config import get_settings
from ..core.engine import MatchingEngine
from ..dependencies import get_engine
from ..models.entry import MatchType
from ..models.request import BestMatchRequest, MatchRequest
from ..models.response import BestMatchResponse, MatchResponse

router = APIRouter(prefix="/api/v1", tags=["matches"])
settings = get_settings()


def _check_length(query: str) -> None:
    if len(query) > settings.max_query_length:
        raise HTTPException(
            status_code=400,
            detail=f"Query too long. Maximum length is {settings.max_query_length} characters"
        )


async def _match(
    engine: MatchingEngine,
    query: str,
    max_results: Optional[int],
    min_confidence: Optional[float]
) -> MatchResponse:
    _check_length(query)
    start_time = time.time()
    
    matches = await engine.find_matches(query, max_results, min_confidence)
    
    return MatchResponse(
        query=query,
        execution_time_ms=(time.time() - start_time) * 1000,
        exact_match=bool(matches) and matches[0].match_type is MatchType.EXACT,
        total_results=len(matches),
        matches=matches
    )


@router.get(
    "/matches",
    response_model=MatchResponse,
    summary="Find matching entries",
    description="Rank knowledge-base entries against a free-text question"
)
async def find_matches(
    q: str = Query(..., min_length=1, description="The question to match"),
    max_results: Optional[int] = Query(
        None,
        ge=1,
        le=50,
        description="Maximum number of matches to return"
    ),
    min_confidence: Optional[float] = Query(
        None,
        ge=0.0,
        le=1.0,
        description="Minimum confidence (0.0-1.0)"
    ),
    engine: MatchingEngine = Depends(get_engine)
) -> MatchResponse:
    """
    Find entries matching a question.
    
    Exact phrasing hits are returned alone with confidence 1.0; otherwise
    keyword and fuzzy candidates are merged and ranked.
    """
    return await _match(engine, q, max_results, min_confidence)


@router.post(
    "/matches",
    response_model=MatchResponse,
    summary="Find matching entries with request body"
)
async def find_matches_with_body(
    request: MatchRequest,
    engine: MatchingEngine = Depends(get_engine)
) -> MatchResponse:
    """Find entries matching a question given as a JSON body."""
    return await _match(engine, request.query, request.max_results, request.min_confidence)


async def _best(
    engine: MatchingEngine,
    query: str,
    min_confidence: Optional[float],
    substitution: Optional[str]
) -> BestMatchResponse:
    _check_length(query)
    start_time = time.time()
    
    match = await engine.get_best_match(query, min_confidence, substitution)
    if match is None:
        raise HTTPException(status_code=404, detail="No matching entry found")
    
    return BestMatchResponse(
        query=query,
        execution_time_ms=(time.time() - start_time) * 1000,
        match=match
    )


@router.get(
    "/matches/best",
    response_model=BestMatchResponse,
    summary="Best single match",
    description="Return the best entry with its answer placeholders resolved"
)
async def best_match(
    q: str = Query(..., min_length=1, description="The question to match"),
    min_confidence: Optional[float] = Query(None, ge=0.0, le=1.0),
    substitution: Optional[str] = Query(
        None,
        max_length=200,
        description="Value substituted for the answer placeholder"
    ),
    engine: MatchingEngine = Depends(get_engine)
) -> BestMatchResponse:
    """Return the best match for a question, or 404."""
    return await _best(engine, q, min_confidence, substitution)


@router.post(
    "/matches/best",
    response_model=BestMatchResponse,
    summary="Best single match with request body"
)
async def best_match_with_body(
    request: BestMatchRequest,
    engine: MatchingEngine = Depends(get_engine)
) -> BestMatchResponse:
    return await _best(engine, request.query, request.min_confidence, request.substitution)
