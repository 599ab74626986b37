"""
Feedback document service.

Public entry point for coaching-feedback documents: initialize a user
context, ingest text, search a user's chunks and delete everything a user
owns. Callers (HTTP handlers, workers) talk to this class only.

Dependencies: feedback_rag.core, feedback_rag.boundary.vdb, feedback_rag.configs
System role: Document lifecycle orchestration
"""

import asyncio
import logging
from collections import Counter
from functools import lru_cache
from typing import Any

from feedback_rag.application.services.deletion_service import DeletionService
from feedback_rag.application.services.retrieval_service import RetrievalService
from feedback_rag.boundary.vdb import VectorStoreAdapter, get_vector_store
from feedback_rag.configs import Settings, get_settings
from feedback_rag.core.chunker import TextChunker
from feedback_rag.core.enricher import MetadataEnricher, validate_user_id
from feedback_rag.core.exceptions import (
    ConfigurationError,
    DataIntegrityError,
    ServiceNotInitializedError,
)
from feedback_rag.core.session import get_session, resolve_user_id, set_session
from feedback_rag.models import DeletionReport, Record, RetrievalResult
from feedback_rag.observability.log_utils import log_exception_with_context
from feedback_rag.observability.logger import configure_logging

logger = logging.getLogger(__name__)


class FeedbackService:
    """
    User-scoped ingestion, retrieval and deletion.

    The store handle is created once by initialize(); the active user is
    bound per asyncio context, so one instance can serve concurrent users.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        vector_store: VectorStoreAdapter | None = None,
        chunker: TextChunker | None = None,
        enricher: MetadataEnricher | None = None,
    ) -> None:
        """
        Initialize service. No provider is contacted until initialize().

        Args:
            settings: Service settings (loaded from environment if None)
            vector_store: Optional store adapter (built from settings if None)
            chunker: Optional chunker (built from ingestion settings if None)
            enricher: Optional metadata enricher
        """
        self.settings = settings or get_settings()
        self._vector_store = vector_store
        self.chunker = chunker or TextChunker(
            chunk_size=self.settings.ingestion.chunk_size,
            chunk_overlap=self.settings.ingestion.chunk_overlap,
        )
        self.enricher = enricher or MetadataEnricher()
        self._retrieval: RetrievalService | None = None
        self._deletion: DeletionService | None = None
        self._connect_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._retrieval is not None

    def _require_initialized(self, operation: str) -> VectorStoreAdapter:
        if not self.initialized:
            raise ServiceNotInitializedError(operation)
        return self._vector_store

    async def initialize(self, user_id: str) -> None:
        """
        Bind the user to the current context and open the store once.

        Repeated calls only rebind the user; the store handle is reused.

        Raises:
            ValidationError: If user_id is missing or malformed
            ConfigurationError: If credentials are missing or the index
                dimension does not match the embedding dimension
            ProviderError: If the store cannot be opened
        """
        validate_user_id(user_id)
        if not self.initialized:
            async with self._connect_lock:
                if not self.initialized:
                    await self._connect()
        set_session(user_id)

    async def _connect(self) -> None:
        store = self._vector_store or get_vector_store(self.settings)
        await store.connect()

        stats = await store.describe()
        expected = self.settings.embeddings.dimension
        if stats.dimension is not None and stats.dimension != expected:
            raise ConfigurationError(
                f"Index dimension {stats.dimension} does not match embedding dimension {expected}",
                setting="EMBEDDING_DIMENSION",
                details={"index": self.settings.vector_store.index_name},
            )

        deletion = self.settings.deletion
        self._vector_store = store
        self._deletion = DeletionService(
            store,
            strategy=deletion.strategy,
            enumeration_top_k=deletion.enumeration_top_k,
            max_enumeration_rounds=deletion.max_enumeration_rounds,
            delete_batch_size=deletion.delete_batch_size,
            delete_concurrency=deletion.delete_concurrency,
            index_name=self.settings.vector_store.index_name,
        )
        self._retrieval = RetrievalService(store, top_k=self.settings.retrieval.top_k)
        logger.info(
            f"{__name__}:initialize - Vector store ready ({stats.total_records} records indexed)"
        )

    async def ingest_document(self, text: str, metadata: dict[str, Any] | None = None) -> int:
        """
        Chunk, enrich and store a document.

        Args:
            text: Raw document text
            metadata: userId (defaults to the session user), question,
                documentId, title, source

        Returns:
            int: Number of chunks stored

        Raises:
            ValidationError: If no userId is available
            ProviderError: If embedding or upsert fails
            DataIntegrityError: If the store acknowledged a different record count
        """
        store = self._require_initialized("ingest_document")
        logger.info(f"{__name__}:ingest_document - Starting document ingestion")

        metadata = dict(metadata or {})
        session = get_session()
        if not metadata.get("userId") and session is not None:
            metadata["userId"] = session.user_id

        try:
            chunks = self.chunker.split(text)
            records = self.enricher.enrich(chunks, metadata)
            if not records:
                logger.info(f"{__name__}:ingest_document - No content to ingest")
                return 0

            self._check_unique_ids(records)
            acknowledged = await store.add_records(records)
            if acknowledged != len(records):
                raise DataIntegrityError(
                    f"Store acknowledged {acknowledged} of {len(records)} records",
                    user_id=metadata.get("userId"),
                    details={"document_id": records[0].metadata.document_id},
                )
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:ingest_document - Error in document ingestion",
                e,
                user_id=metadata.get("userId"),
                document_id=metadata.get("documentId"),
            )
            raise

        logger.info(
            f"{__name__}:ingest_document - Document successfully ingested ({len(records)} chunks)"
        )
        return len(records)

    @staticmethod
    def _check_unique_ids(records: list[Record]) -> None:
        duplicates = [rid for rid, count in Counter(r.id for r in records).items() if count > 1]
        if duplicates:
            raise DataIntegrityError(
                "Duplicate record IDs in one document",
                user_id=records[0].metadata.user_id,
                details={"duplicate_ids": duplicates[:10]},
            )

    async def similarity_search(
        self,
        query: str,
        user_id: str | None = None,
    ) -> list[RetrievalResult]:
        """
        Search the user's chunks.

        Args:
            query: Search query text
            user_id: User to search for (defaults to the session user)

        Returns:
            list[RetrievalResult]: Up to top_k results, most relevant first
        """
        self._require_initialized("similarity_search")
        return await self._retrieval.search(query, resolve_user_id(user_id))

    async def delete_user_documents_report(self, user_id: str) -> DeletionReport:
        """
        Delete every record of a user and report counts.

        Returns:
            DeletionReport: Discovered, deleted and failed IDs
        """
        self._require_initialized("delete_user_documents")
        return await self._deletion.delete_all(user_id)

    async def delete_user_documents(self, user_id: str) -> bool:
        """
        Delete every record of a user.

        Returns:
            bool: True once enumeration completed; individual delete
            failures are logged, not raised
        """
        report = await self.delete_user_documents_report(user_id)
        return report.success


@lru_cache
def get_feedback_service() -> FeedbackService:
    """Shared service instance configured from the environment."""
    settings = get_settings()
    configure_logging(settings.effective_log_level)
    return FeedbackService(settings=settings)
