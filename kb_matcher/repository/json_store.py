"""JSON file backed entry repository."""

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog

from ..exceptions import EntryNotFoundError, RepositoryUnavailableError
from ..models.entry import KnowledgeEntry
from .base import EntryRepository, bump_usage

logger = structlog.get_logger(__name__)


def read_documents(path: Path) -> List[Dict[str, Any]]:
    """
    Read entry documents from a JSON file (blocking).
    
    Accepts either a top-level list or an object with an ``entries`` list.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("entries", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a list of entries")
    return data


def write_documents(path: Path, documents: List[Dict[str, Any]]) -> None:
    """Write entry documents atomically (blocking)."""
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(documents, f, ensure_ascii=False, indent=2)
    os.replace(tmp_path, path)


class JsonFileRepository(EntryRepository):
    """
    Entry documents stored in a single JSON file.
    
    File I/O runs in a worker thread; writes are serialized so the usage
    increment is a read-modify-write that cannot interleave.
    """
    
    name = "json_file"
    
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()
    
    async def fetch_all(self) -> List[Dict[str, Any]]:
        try:
            return await asyncio.to_thread(read_documents, self.path)
        except (OSError, ValueError) as e:
            raise RepositoryUnavailableError(
                f"Cannot read entries from {self.path}: {e}", source=str(self.path)
            ) from e
    
    async def _modify(self, mutate, create: bool = False) -> Any:
        async with self._lock:
            if create and not self.path.exists():
                documents = []
            else:
                documents = await self.fetch_all()
            result = mutate(documents)
            try:
                await asyncio.to_thread(write_documents, self.path, documents)
            except OSError as e:
                raise RepositoryUnavailableError(
                    f"Cannot write entries to {self.path}: {e}", source=str(self.path)
                ) from e
            return result
    
    async def increment_usage(self, entry_id: str) -> None:
        def bump(documents: List[Dict[str, Any]]) -> None:
            for document in documents:
                if isinstance(document, dict) and document.get("id") == entry_id:
                    bump_usage(document)
                    return
            raise EntryNotFoundError(entry_id)
        
        await self._modify(bump)
    
    async def get(self, entry_id: str) -> Optional[KnowledgeEntry]:
        for document in await self.fetch_all():
            if isinstance(document, dict) and document.get("id") == entry_id:
                return KnowledgeEntry.model_validate(document)
        return None
    
    async def upsert(self, entry: KnowledgeEntry) -> None:
        document = entry.model_dump(mode="json")
        
        def replace(documents: List[Dict[str, Any]]) -> None:
            for i, existing in enumerate(documents):
                if isinstance(existing, dict) and existing.get("id") == entry.id:
                    documents[i] = document
                    return
            documents.append(document)
        
        await self._modify(replace, create=True)
        logger.info("Entry saved", entry_id=entry.id, path=str(self.path))
    
    async def delete(self, entry_id: str) -> bool:
        def remove(documents: List[Dict[str, Any]]) -> bool:
            for i, existing in enumerate(documents):
                if isinstance(existing, dict) and existing.get("id") == entry_id:
                    del documents[i]
                    return True
            return False
        
        return await self._modify(remove)
