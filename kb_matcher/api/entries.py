"""Entry listing, usage and reload endpoints."""

import time

from fastapi import APIRouter, Depends

from ..core.engine import MatchingEngine
from ..dependencies import get_engine
from ..models.response import (
    CategoryResponse,
    EntryListResponse,
    ReloadResponse,
    UsageResponse,
)

router = APIRouter(prefix="/api/v1", tags=["entries"])


@router.get(
    "/entries",
    response_model=EntryListResponse,
    summary="List entries"
)
async def list_entries(engine: MatchingEngine = Depends(get_engine)) -> EntryListResponse:
    """List every loaded entry in load order."""
    entries = await engine.get_all_entries()
    return EntryListResponse(total=len(entries), entries=entries)


@router.get(
    "/entries/categories",
    response_model=CategoryResponse,
    summary="Entries by category",
    description="Entries grouped by category, highest priority first"
)
async def entries_by_category(engine: MatchingEngine = Depends(get_engine)) -> CategoryResponse:
    categories = await engine.get_entries_by_category()
    return CategoryResponse(total_categories=len(categories), categories=categories)


@router.post(
    "/entries/reload",
    response_model=ReloadResponse,
    summary="Reload entries",
    description="Re-fetch entries from the store and rebuild the search indices"
)
async def reload_entries(engine: MatchingEngine = Depends(get_engine)) -> ReloadResponse:
    """
    Reload the entry set.
    
    Queries in flight keep using the previous entry set until the new
    one is fully indexed.
    """
    start_time = time.time()
    snapshot = await engine.reload_entries()
    
    return ReloadResponse(
        status="reloaded",
        total_entries=len(snapshot.entries),
        source=snapshot.source,
        skipped_entries=snapshot.skipped,
        execution_time_ms=(time.time() - start_time) * 1000
    )


@router.get(
    "/usage",
    response_model=UsageResponse,
    summary="Usage statistics"
)
async def usage_stats(engine: MatchingEngine = Depends(get_engine)) -> UsageResponse:
    """Usage totals per category plus usage tracker delivery counters."""
    stats = await engine.get_usage_stats()
    return UsageResponse(
        total_queries=stats.total_queries,
        entries_hit=stats.entries_hit,
        per_category_totals=stats.per_category_totals,
        tracker=engine.usage_tracker.get_stats()
    )
