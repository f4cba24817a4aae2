"""Fire-and-forget recording of which entries were surfaced."""

import asyncio
from collections import Counter
from typing import Dict, Iterable, Optional

import structlog

from ..repository.base import EntryRepository

logger = structlog.get_logger(__name__)


class UsageTracker:
    """
    Records usage increments through a bounded queue and a worker task.
    
    `record` never blocks and never raises: ids are queued and a
    background worker pushes them to the repository one at a time.
    Failures are logged and counted, never propagated.
    """
    
    def __init__(self, repository: Optional[EntryRepository], queue_size: int = 1000) -> None:
        """
        Initialize the tracker.
        
        Args:
            repository: Store receiving the increments (None disables delivery)
            queue_size: Pending increments kept before new ones are dropped
        """
        self.repository = repository
        self.queue_size = queue_size
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None
        self._recorded: Counter = Counter()
        self._stats = {
            "dispatched": 0,
            "recorded": 0,
            "failed": 0,
            "dropped": 0
        }
    
    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()
    
    def start(self) -> None:
        """Start the worker on the running event loop (idempotent)."""
        if self.running:
            return
        # One queue per tracker; a restarted worker drains what is already queued
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self.queue_size)
        self._worker = asyncio.get_running_loop().create_task(self._run())
    
    def record(self, entry_ids: Iterable[str]) -> None:
        """
        Queue one usage increment per id.
        
        Must be called from inside a running event loop.
        
        Args:
            entry_ids: Ids of entries returned to a caller
        """
        if self.repository is None:
            return
        self.start()
        
        for entry_id in entry_ids:
            try:
                self._queue.put_nowait(entry_id)
                self._stats["dispatched"] += 1
            except asyncio.QueueFull:
                self._stats["dropped"] += 1
                logger.warning("Usage queue full, dropping increment", entry_id=entry_id)
    
    async def _run(self) -> None:
        while True:
            entry_id = await self._queue.get()
            try:
                await self.repository.increment_usage(entry_id)
                self._recorded[entry_id] += 1
                self._stats["recorded"] += 1
            except Exception as e:
                self._stats["failed"] += 1
                logger.warning("Failed to record usage", entry_id=entry_id, error=str(e))
            finally:
                self._queue.task_done()
    
    async def flush(self) -> None:
        """Wait until every queued increment has been attempted."""
        if self._queue is not None and self.running:
            await self._queue.join()
    
    async def close(self) -> None:
        """Drain pending increments and stop the worker."""
        if not self.running:
            return
        await self.flush()
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
    
    def recorded_counts(self) -> Dict[str, int]:
        """Increments delivered since the last reset, by entry id."""
        return dict(self._recorded)
    
    def reset_counts(self) -> None:
        """Forget delivered increments (a fresh entry set already includes them)."""
        self._recorded.clear()
    
    def get_stats(self) -> Dict[str, int]:
        """Get delivery counters."""
        stats = self._stats.copy()
        stats["pending"] = self._queue.qsize() if self._queue is not None else 0
        return stats
