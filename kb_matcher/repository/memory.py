"""In-process entry repository."""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Union

from ..exceptions import EntryNotFoundError
from ..models.entry import KnowledgeEntry
from .base import EntryRepository, bump_usage


class InMemoryEntryRepository(EntryRepository):
    """Holds entry documents in a dict; useful for embedding and tests."""
    
    name = "memory"
    
    def __init__(self, records: Optional[Iterable[Union[KnowledgeEntry, Dict[str, Any]]]] = None) -> None:
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        for record in records or []:
            document = self._to_document(record)
            self._documents[document["id"]] = document
    
    @staticmethod
    def _to_document(record: Union[KnowledgeEntry, Dict[str, Any]]) -> Dict[str, Any]:
        if isinstance(record, KnowledgeEntry):
            return record.model_dump(mode="json")
        return dict(record)
    
    async def fetch_all(self) -> List[Dict[str, Any]]:
        return [dict(doc) for doc in self._documents.values()]
    
    async def increment_usage(self, entry_id: str) -> None:
        async with self._lock:
            document = self._documents.get(entry_id)
            if document is None:
                raise EntryNotFoundError(entry_id)
            bump_usage(document)
    
    async def get(self, entry_id: str) -> Optional[KnowledgeEntry]:
        document = self._documents.get(entry_id)
        if document is None:
            return None
        return KnowledgeEntry.model_validate(document)
    
    async def upsert(self, entry: KnowledgeEntry) -> None:
        async with self._lock:
            self._documents[entry.id] = self._to_document(entry)
    
    async def delete(self, entry_id: str) -> bool:
        async with self._lock:
            return self._documents.pop(entry_id, None) is not None
