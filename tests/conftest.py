"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory vector store adapter, settings and service fixtures
Dependencies: pytest, pytest-asyncio
System role: Test infrastructure and fixture management
"""

import asyncio
import re
from collections.abc import AsyncIterator
from typing import Any

import pytest

from feedback_rag.application.services import DeletionService, FeedbackService, RetrievalService
from feedback_rag.boundary.vdb import StoreStats, VectorStoreAdapter
from feedback_rag.configs import Settings
from feedback_rag.core.exceptions import VectorStoreError
from feedback_rag.core.session import clear_session
from feedback_rag.models import Record, RecordMetadata, VectorMatch, record_id

_WORD = re.compile(r"\w+")


def _tokens(text: str) -> set[str]:
    return {w.lower() for w in _WORD.findall(text)}


class InMemoryVectorStore(VectorStoreAdapter):
    """
    Dict-backed adapter with exact-match filters and paginated listing.

    Similarity is word overlap with the query; ties keep insertion order.
    """

    def __init__(
        self,
        supports_listing: bool = True,
        supports_bulk_delete: bool = False,
        page_size: int = 2,
        dimension: int | None = None,
    ) -> None:
        self.supports_listing = supports_listing
        self.supports_bulk_delete = supports_bulk_delete
        self.page_size = page_size
        self.dimension = dimension
        self.records: dict[str, Record] = {}
        self.fail_ids: set[str] = set()
        self.ignore_filter = False
        self.upsert_shortfall = 0
        self.connect_calls = 0
        self.pages_served = 0
        self.query_calls: list[tuple[dict[str, Any], int]] = []
        self.search_calls: list[dict[str, Any]] = []
        self.delete_calls: list[list[str]] = []
        self.delete_delay = 0.0
        self._in_flight = 0
        self.max_in_flight = 0

    def stored(self, record: Record) -> dict[str, Any]:
        return record.metadata.to_store()

    def _matches(self, record: Record, filter: dict[str, Any]) -> bool:
        metadata = self.stored(record)
        return all(metadata.get(key) == value for key, value in filter.items())

    def ids_for(self, user_id: str) -> list[str]:
        return [rid for rid, r in self.records.items() if r.metadata.user_id == user_id]

    async def connect(self) -> None:
        self.connect_calls += 1

    async def add_records(self, records: list[Record]) -> int:
        for record in records:
            record.embedding = [float(len(record.content))]
            self.records[record.id] = record
        return len(records) - self.upsert_shortfall

    async def similarity_search(self, query, k, filter):
        self.search_calls.append({"query": query, "k": k, "filter": filter})
        query_tokens = _tokens(query)
        candidates = [
            r for r in self.records.values() if self.ignore_filter or self._matches(r, filter)
        ]
        ranked = sorted(
            enumerate(candidates),
            key=lambda pair: (-len(query_tokens & _tokens(pair[1].content)), pair[0]),
        )
        return [
            VectorMatch(
                id=r.id,
                content=r.content,
                metadata=self.stored(r),
                similarity=float(len(query_tokens & _tokens(r.content))),
            )
            for _, r in ranked[:k]
        ]

    async def query_ids(self, filter, top_k):
        self.query_calls.append((filter, top_k))
        return [rid for rid, r in self.records.items() if self._matches(r, filter)][:top_k]

    async def list_ids(self, prefix: str) -> AsyncIterator[list[str]]:
        matching = [rid for rid in self.records if rid.startswith(prefix)]
        for start in range(0, len(matching), self.page_size):
            self.pages_served += 1
            yield matching[start:start + self.page_size]

    async def delete(self, ids: list[str]) -> None:
        self.delete_calls.append(list(ids))
        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            if self.delete_delay:
                await asyncio.sleep(self.delete_delay)
            if self.fail_ids & set(ids):
                raise VectorStoreError("injected delete failure", operation="delete")
            for rid in ids:
                self.records.pop(rid, None)
        finally:
            self._in_flight -= 1

    async def describe(self) -> StoreStats:
        return StoreStats(dimension=self.dimension, total_records=len(self.records))


@pytest.fixture(autouse=True)
def _reset_session():
    """Keep the context session from leaking between synchronous tests."""
    clear_session()
    yield
    clear_session()


@pytest.fixture
def store() -> InMemoryVectorStore:
    """Provide empty in-memory store with key listing."""
    return InMemoryVectorStore()


@pytest.fixture
def settings() -> Settings:
    """Provide settings with default chunking, retrieval and deletion values."""
    return Settings()


@pytest.fixture
def feedback_service(settings: Settings, store: InMemoryVectorStore) -> FeedbackService:
    """Provide FeedbackService wired to the in-memory store."""
    return FeedbackService(settings=settings, vector_store=store)


@pytest.fixture
def retrieval_service(store: InMemoryVectorStore) -> RetrievalService:
    """Provide RetrievalService with the default cap of 30."""
    return RetrievalService(store, top_k=30)


@pytest.fixture
def deletion_service(store: InMemoryVectorStore) -> DeletionService:
    """Provide DeletionService using the store's listing."""
    return DeletionService(store)


def make_record(user_id: str, doc: int, chunk: int, content: str = "feedback") -> Record:
    """Build a record the way the enricher does, without the clock."""
    return Record(
        id=record_id(user_id, doc, chunk),
        content=content,
        metadata=RecordMetadata(
            user_id=user_id,
            document_id=f"doc-{doc}",
            chunk_index=chunk,
            timestamp=doc,
        ),
    )


@pytest.fixture
def seed(store: InMemoryVectorStore):
    """Return a helper that inserts records for a user."""

    def _seed(user_id: str, count: int, doc: int = 1, content: str = "feedback") -> list[str]:
        ids = []
        for chunk in range(count):
            record = make_record(user_id, doc, chunk, f"{content} {chunk}")
            store.records[record.id] = record
            ids.append(record.id)
        return ids

    return _seed
