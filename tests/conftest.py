"""Shared fixtures for the knowledge-base matcher tests."""

import asyncio
from typing import Any, Dict, List

import pytest

from kb_matcher.config import Settings
from kb_matcher.exceptions import RepositoryUnavailableError
from kb_matcher.repository import EntryLoader, InMemoryEntryRepository


class UnavailableRepository(InMemoryEntryRepository):
    """Repository whose store can never be reached."""
    
    name = "unavailable"
    
    async def fetch_all(self) -> List[Dict[str, Any]]:
        raise RepositoryUnavailableError("store offline")


class SlowRepository(InMemoryEntryRepository):
    """Repository that counts loads and takes a while to answer."""
    
    name = "slow"
    
    def __init__(self, records, delay: float = 0.05) -> None:
        super().__init__(records)
        self.delay = delay
        self.fetch_calls = 0
    
    async def fetch_all(self) -> List[Dict[str, Any]]:
        self.fetch_calls += 1
        await asyncio.sleep(self.delay)
        return await super().fetch_all()


@pytest.fixture
def settings():
    """Settings isolated from the environment."""
    return Settings(entries_path=None)


@pytest.fixture
def sample_records():
    """Sample entry documents for testing."""
    return [
        {
            "id": "password-reset",
            "category": "Account & Password",
            "phrasings": [
                "How do I reset my password?",
                "I forgot my password",
                "Password reset"
            ],
            "answer": "Call {SUPPORT_PHONE} to reset your password.",
            "keywords": ["password", "reset", "login"],
            "priority": 10
        },
        {
            "id": "vpn-issues",
            "category": "Network & Internet",
            "phrasings": ["VPN not working", "Can't connect to VPN"],
            "answer": "Restart the VPN client.",
            "keywords": ["vpn", "remote", "tunnel"],
            "priority": 7
        },
        {
            "id": "printer-problems",
            "category": "Hardware & Peripherals",
            "phrasings": ["Printer not working", "Can't print"],
            "answer": "Clear the print queue and power cycle the printer.",
            "keywords": ["printer", "print", "toner"],
            "priority": 7
        },
        {
            "id": "email-not-working",
            "category": "Email & Communication",
            "phrasings": ["Email not working", "Outlook problems"],
            "answer": "Restart Outlook and check your connection.",
            "keywords": ["email", "outlook", "mail"],
            "priority": 9,
            "usage_count": 4
        },
    ]


@pytest.fixture
def repository(sample_records):
    """In-memory repository holding the sample entries."""
    return InMemoryEntryRepository(sample_records)


@pytest.fixture
def loader(repository, settings):
    return EntryLoader(repository, settings.seed_path)


@pytest.fixture
def unavailable_repository():
    return UnavailableRepository()


@pytest.fixture
def slow_repository(sample_records):
    """Repository that counts loads and answers after a short delay."""
    return SlowRepository(sample_records)


class StaleReadRepository(SlowRepository):
    """Repository that reads its documents before the delay, like a slow network reply."""
    
    name = "stale_read"
    
    async def fetch_all(self) -> List[Dict[str, Any]]:
        self.fetch_calls += 1
        documents = [dict(doc) for doc in self._documents.values()]
        await asyncio.sleep(self.delay)
        return documents


@pytest.fixture
def stale_read_repository(sample_records):
    """Repository whose answer reflects the store as it was when the load began."""
    return StaleReadRepository(sample_records)
