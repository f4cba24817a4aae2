"""Main matching engine implementation."""

import asyncio
import time
from typing import Dict, List, Optional

import structlog

from ..config import Settings, get_settings
from ..models.entry import KnowledgeEntry, Match, MatchType, UsageStats
from ..repository.json_store import JsonFileRepository
from ..repository.loader import EntryLoader
from .fuzzy_matcher import FuzzyIndex
from .index import IndexSnapshot
from .keyword_scorer import KeywordScorer
from .normalizer import TextNormalizer
from .ranker import Ranker
from .usage import UsageTracker

logger = structlog.get_logger(__name__)


class MatchingEngine:
    """
    Matches free-text questions against the knowledge base.
    
    The entry set is loaded lazily on first use and held as an immutable
    `IndexSnapshot`. Concurrent first callers share one in-flight load,
    and a reload publishes its new snapshot only once fully built, so
    queries never see a half-built index.
    """
    
    def __init__(
        self,
        loader: EntryLoader,
        usage_tracker: Optional[UsageTracker] = None,
        settings: Optional[Settings] = None
    ) -> None:
        """
        Initialize the matching engine.
        
        Args:
            loader: Source of the entry set
            usage_tracker: Usage recorder (defaults to one on the loader's repository)
            settings: Engine configuration
        """
        self.settings = settings or get_settings()
        self.loader = loader
        self.normalizer = TextNormalizer()
        self.keyword_scorer = KeywordScorer(
            floor=self.settings.keyword_floor,
            scale=self.settings.keyword_scale,
            cap=self.settings.keyword_cap,
            normalizer=self.normalizer
        )
        self.ranker = Ranker(
            tie_break_margin=self.settings.tie_break_margin,
            dedup_strategy=self.settings.dedup_strategy
        )
        if usage_tracker is None:
            usage_tracker = UsageTracker(loader.repository, self.settings.usage_queue_size)
        self.usage_tracker = usage_tracker
        
        self._snapshot: Optional[IndexSnapshot] = None
        self._loading: Optional[asyncio.Task] = None
        self._pending_reload: Optional[asyncio.Task] = None
        
        # Performance tracking
        self._stats = {
            "total_queries": 0,
            "exact_matches": 0,
            "ranked_matches": 0,
            "no_matches": 0,
            "total_execution_time": 0.0,
            "loads": 0
        }
    
    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "MatchingEngine":
        """Build an engine backed by the configured JSON store and seed set."""
        settings = settings or get_settings()
        repository = JsonFileRepository(settings.entries_path) if settings.entries_path else None
        loader = EntryLoader(repository, settings.seed_path)
        return cls(loader, settings=settings)
    
    @property
    def snapshot(self) -> Optional[IndexSnapshot]:
        """Currently published entry set and indices, if loaded."""
        return self._snapshot
    
    @property
    def loaded(self) -> bool:
        return self._snapshot is not None
    
    def _new_fuzzy_index(self) -> FuzzyIndex:
        return FuzzyIndex(
            phrasing_weight=self.settings.phrasing_weight,
            keyword_weight=self.settings.keyword_weight,
            answer_weight=self.settings.answer_weight,
            threshold=self.settings.fuzzy_threshold,
            distance=self.settings.fuzzy_distance,
            min_match_length=self.settings.fuzzy_min_match_length,
            normalizer=self.normalizer
        )
    
    async def _load_and_publish(self) -> IndexSnapshot:
        result = await self.loader.load_all()
        snapshot = IndexSnapshot.build(
            result.entries,
            self._new_fuzzy_index(),
            self.normalizer,
            source=result.source,
            skipped=len(result.rejected)
        )
        self._snapshot = snapshot
        self.usage_tracker.reset_counts()
        self._stats["loads"] += 1
        return snapshot
    
    def _clear_loading(self, task: asyncio.Task) -> None:
        if self._loading is task:
            self._loading = None
    
    def _start_load(self) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._load_and_publish())
        task.add_done_callback(self._clear_loading)
        self._loading = task
        return task
    
    async def _reload_after(self, previous: asyncio.Task) -> IndexSnapshot:
        # Only the ordering matters here; the previous load's own callers
        # receive its result or error.
        await asyncio.wait([previous])
        self._pending_reload = None
        if self._loading is None:
            self._start_load()
        return await self._loading
    
    async def ensure_loaded(self) -> IndexSnapshot:
        """
        Return the published snapshot, loading it on first use.
        
        Raises:
            NoEntriesAvailableError: Repository and seed set both unusable
        """
        if self._snapshot is not None:
            return self._snapshot
        if self._loading is None:
            self._start_load()
        # Every caller awaits the same task; shield keeps one caller's
        # cancellation from aborting the load for the others.
        return await asyncio.shield(self._loading)
    
    async def reload_entries(self) -> IndexSnapshot:
        """
        Re-fetch the entry set and rebuild both indices.
        
        Queries keep using the previous snapshot until the new one is
        published. A load already in flight may have read the store
        before the caller's change, so a reload arriving during one
        waits for it and then loads again. Reloads arriving during the
        same load share that follow-up load.
        """
        logger.info("Reloading entries")
        if self._loading is None:
            task = self._start_load()
        else:
            if self._pending_reload is None:
                self._pending_reload = asyncio.get_running_loop().create_task(
                    self._reload_after(self._loading)
                )
            task = self._pending_reload
        return await asyncio.shield(task)
    
    async def find_matches(
        self,
        query: str,
        max_results: Optional[int] = None,
        min_confidence: Optional[float] = None
    ) -> List[Match]:
        """
        Find knowledge-base entries matching a question.
        
        An exact hit on a normalized phrasing or keyword short-circuits
        keyword and fuzzy scoring.
        
        Args:
            query: Free-text question
            max_results: Maximum number of matches to return
            min_confidence: Matches below this confidence are dropped
            
        Returns:
            Ranked matches, possibly empty
        """
        if max_results is None:
            max_results = self.settings.default_max_results
        if min_confidence is None:
            min_confidence = self.settings.default_min_confidence
        
        snapshot = await self.ensure_loaded()
        start_time = time.time()
        self._stats["total_queries"] += 1
        
        normalized = self.normalizer.normalize(query or "")
        exact_entry = snapshot.exact_index.lookup(normalized)
        
        if exact_entry is not None:
            candidates = [Match(
                entry=exact_entry,
                confidence=1.0,
                matched_query=query,
                match_type=MatchType.EXACT
            )]
        elif normalized:
            keyword_matches = self.keyword_scorer.find_matches(
                query, snapshot.entries, limit=max_results
            )
            fuzzy_matches = snapshot.fuzzy_index.find_matches(query, limit=max_results)
            candidates = keyword_matches + fuzzy_matches
        else:
            candidates = []
        
        matches = self.ranker.rank(candidates, max_results, min_confidence)
        
        if matches:
            self.usage_tracker.record(m.entry.id for m in matches)
            if matches[0].match_type is MatchType.EXACT:
                self._stats["exact_matches"] += 1
            else:
                self._stats["ranked_matches"] += 1
        else:
            self._stats["no_matches"] += 1
        
        execution_time = (time.time() - start_time) * 1000
        self._stats["total_execution_time"] += execution_time
        logger.debug(
            "Query matched",
            query=query,
            candidates=len(candidates),
            results=len(matches),
            execution_time_ms=round(execution_time, 3)
        )
        
        return matches
    
    def resolve_placeholders(self, text: str, value: str) -> str:
        """Substitute the configured placeholder token in an answer body."""
        return text.replace(self.settings.placeholder_token, value)
    
    async def get_best_match(
        self,
        query: str,
        min_confidence: Optional[float] = None,
        substitution: Optional[str] = None
    ) -> Optional[Match]:
        """
        Return the single best match with its answer placeholders resolved.
        
        The returned match carries a copy of the entry; the cached entry
        keeps its unresolved answer.
        
        Args:
            query: Free-text question
            min_confidence: Minimum confidence for the match
            substitution: Value for the placeholder token (None uses the configured default)
            
        Returns:
            The best match, or None
        """
        if min_confidence is None:
            min_confidence = self.settings.best_match_min_confidence
        
        matches = await self.find_matches(query, 1, min_confidence)
        if not matches:
            return None
        
        match = matches[0]
        value = self.settings.default_substitution if substitution is None else substitution
        entry = match.entry.model_copy(
            update={"answer": self.resolve_placeholders(match.entry.answer, value)}
        )
        return match.model_copy(update={"entry": entry})
    
    async def get_entries_by_category(self) -> Dict[str, List[KnowledgeEntry]]:
        """Entries grouped by category, priority descending within each."""
        snapshot = await self.ensure_loaded()
        categories: Dict[str, List[KnowledgeEntry]] = {}
        
        for entry in snapshot.entries:
            categories.setdefault(entry.category, []).append(entry)
        
        for entries in categories.values():
            entries.sort(key=lambda e: e.priority, reverse=True)
        
        return categories
    
    async def get_all_entries(self) -> List[KnowledgeEntry]:
        """All loaded entries, in load order."""
        snapshot = await self.ensure_loaded()
        return list(snapshot.entries)
    
    async def get_usage_stats(self) -> UsageStats:
        """
        Usage totals across the loaded entry set.
        
        Stored counters plus increments delivered since the set was loaded.
        """
        snapshot = await self.ensure_loaded()
        recorded = self.usage_tracker.recorded_counts()
        
        total = 0
        hit = 0
        per_category: Dict[str, int] = {}
        for entry in snapshot.entries:
            count = entry.usage_count + recorded.get(entry.id, 0)
            total += count
            if count > 0:
                hit += 1
            per_category[entry.category] = per_category.get(entry.category, 0) + count
        
        return UsageStats(
            total_queries=total,
            entries_hit=hit,
            per_category_totals=per_category
        )
    
    def get_stats(self) -> Dict[str, any]:
        """Get engine statistics."""
        stats = self._stats.copy()
        
        if stats["total_queries"] > 0:
            stats["average_execution_time_ms"] = (
                stats["total_execution_time"] / stats["total_queries"]
            )
            stats["exact_match_rate"] = stats["exact_matches"] / stats["total_queries"]
            stats["no_match_rate"] = stats["no_matches"] / stats["total_queries"]
        else:
            stats["average_execution_time_ms"] = 0.0
            stats["exact_match_rate"] = 0.0
            stats["no_match_rate"] = 0.0
        
        snapshot = self._snapshot
        stats["entries_loaded"] = len(snapshot.entries) if snapshot else 0
        stats["entry_source"] = snapshot.source if snapshot else None
        stats["usage_tracker"] = self.usage_tracker.get_stats()
        
        return stats
    
    async def close(self) -> None:
        """Flush pending usage increments and stop background work."""
        await self.usage_tracker.close()
