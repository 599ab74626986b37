"""
Pinecone vector store for production.

Embeds records explicitly, upserts them under their user-prefixed IDs and
serves filtered similarity search through LangChain's PineconeVectorStore.
Enumeration uses Pinecone's cursor-paginated ID listing (serverless
indexes) or a neutral-vector filtered query.

Index metadata keys: userId, documentId, chunkIndex, timestamp, question,
title, source, plus the chunk text under text_key.

Dependencies: pinecone, langchain_pinecone, langchain_core
System role: Production vector store
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any

from langchain_core.embeddings import Embeddings
from langchain_pinecone import PineconeVectorStore
from pinecone import Pinecone

from feedback_rag.boundary.vdb.base import StoreStats, VectorStoreAdapter
from feedback_rag.core.exceptions import ConfigurationError, EmbeddingError, VectorStoreError
from feedback_rag.models import Record, VectorMatch

logger = logging.getLogger(__name__)

UPSERT_BATCH_SIZE = 100


class PineconeStore(VectorStoreAdapter):
    """Pinecone index adapter with user-prefixed record IDs."""

    supports_listing = True
    supports_bulk_delete = True

    def __init__(
        self,
        index_name: str,
        embeddings: Embeddings,
        dimension: int,
        api_key: str | None = None,
        namespace: str | None = None,
        text_key: str = "text",
        list_page_size: int = 100,
        index: Any | None = None,
        vector_store: PineconeVectorStore | None = None,
    ) -> None:
        """
        Initialize Pinecone store. The index handle is obtained lazily.

        Args:
            index_name: Pinecone index name
            embeddings: Embedding model (must produce `dimension` floats)
            dimension: Expected embedding dimension
            api_key: Pinecone API key
            namespace: Pinecone namespace (default namespace when None)
            text_key: Metadata key holding chunk text
            list_page_size: Page size for ID listing
            index: Pre-built index handle
            vector_store: Pre-built LangChain store

        Raises:
            ConfigurationError: When index_name is empty
        """
        if not index_name:
            raise ConfigurationError("index_name cannot be empty", setting="PINECONE_INDEX_NAME")

        self.index_name = index_name
        self.namespace = namespace
        self.dimension = dimension
        self._api_key = api_key
        self._embeddings = embeddings
        self._text_key = text_key
        self._list_page_size = list_page_size
        self._index = index
        self._vector_store = vector_store

    def _get_index(self) -> Any:
        """Get or create the Pinecone index handle."""
        if self._index is None:
            client = Pinecone(api_key=self._api_key) if self._api_key else Pinecone()
            self._index = client.Index(self.index_name)
        return self._index

    def _get_vector_store(self) -> PineconeVectorStore:
        """Get or create the LangChain Pinecone store over the index handle."""
        if self._vector_store is None:
            self._vector_store = PineconeVectorStore(
                index=self._get_index(),
                embedding=self._embeddings,
                text_key=self._text_key,
                namespace=self.namespace,
            )
        return self._vector_store

    async def connect(self) -> None:
        try:
            await asyncio.to_thread(self._get_index)
        except Exception as e:
            raise VectorStoreError(
                message=f"Failed to open Pinecone index: {e}",
                operation="connect",
                details={"index": self.index_name},
            ) from e

    async def _embed_documents(self, texts: list[str]) -> list[list[float]]:
        try:
            return await asyncio.to_thread(self._embeddings.embed_documents, texts)
        except Exception as e:
            raise EmbeddingError(
                message=f"Failed to embed documents: {e}",
                operation="embed",
                details={"text_count": len(texts)},
            ) from e

    async def _embed_query(self, text: str) -> list[float]:
        try:
            return await asyncio.to_thread(self._embeddings.embed_query, text)
        except Exception as e:
            raise EmbeddingError(
                message=f"Failed to embed query: {e}",
                operation="embed",
            ) from e

    def _neutral_vector(self) -> list[float]:
        # Pinecone rejects all-zero query vectors; ranking is irrelevant for enumeration.
        return [1.0] * self.dimension

    async def add_records(self, records: list[Record]) -> int:
        """
        Embed and upsert records in batches.

        Returns:
            int: Sum of upserted_count reported by Pinecone

        Raises:
            EmbeddingError: When embedding fails
            VectorStoreError: When an upsert call fails
        """
        if not records:
            return 0

        embeddings = await self._embed_documents([r.content for r in records])
        for record, embedding in zip(records, embeddings):
            record.embedding = embedding

        upserted = 0
        for start in range(0, len(records), UPSERT_BATCH_SIZE):
            batch = records[start:start + UPSERT_BATCH_SIZE]
            vectors = [
                {
                    "id": r.id,
                    "values": r.embedding,
                    "metadata": {**r.metadata.to_store(), self._text_key: r.content},
                }
                for r in batch
            ]
            try:
                response = await asyncio.to_thread(
                    self._get_index().upsert, vectors=vectors, namespace=self.namespace
                )
            except Exception as e:
                raise VectorStoreError(
                    message=f"Failed to upsert vectors to Pinecone: {e}",
                    operation="upsert",
                    details={"index": self.index_name, "vector_count": len(batch)},
                ) from e
            count = getattr(response, "upserted_count", None)
            upserted += len(batch) if count is None else int(count)

        logger.info(
            f"{__name__}:add_records - Upserted {upserted}/{len(records)} vectors",
            extra={"index": self.index_name},
        )
        return upserted

    async def similarity_search(
        self,
        query: str,
        k: int,
        filter: dict[str, Any],
    ) -> list[VectorMatch]:
        embedding = await self._embed_query(query)
        try:
            results = await asyncio.to_thread(
                self._get_vector_store().similarity_search_by_vector_with_score,
                embedding,
                k=k,
                filter=filter,
                namespace=self.namespace,
            )
        except Exception as e:
            raise VectorStoreError(
                message=f"Failed to query Pinecone: {e}",
                operation="query",
                details={"index": self.index_name, "k": k},
            ) from e

        return [
            VectorMatch(
                id=getattr(doc, "id", None),
                content=doc.page_content,
                metadata=dict(doc.metadata),
                similarity=float(score),
            )
            for doc, score in results
        ]

    async def query_ids(self, filter: dict[str, Any], top_k: int) -> list[str]:
        try:
            response = await asyncio.to_thread(
                self._get_index().query,
                vector=self._neutral_vector(),
                top_k=top_k,
                filter=filter,
                include_values=False,
                include_metadata=False,
                namespace=self.namespace,
            )
        except Exception as e:
            raise VectorStoreError(
                message=f"Failed to enumerate Pinecone vectors: {e}",
                operation="query",
                details={"index": self.index_name, "top_k": top_k},
            ) from e
        return [match.id for match in response.matches or []]

    async def list_ids(self, prefix: str) -> AsyncIterator[list[str]]:
        token: str | None = None
        while True:
            try:
                page = await asyncio.to_thread(
                    self._get_index().list_paginated,
                    prefix=prefix,
                    limit=self._list_page_size,
                    pagination_token=token,
                    namespace=self.namespace,
                )
            except Exception as e:
                raise VectorStoreError(
                    message=f"Failed to list Pinecone vectors: {e}",
                    operation="list",
                    details={"index": self.index_name, "prefix": prefix},
                ) from e

            ids = [vector.id for vector in page.vectors or []]
            if ids:
                yield ids

            token = page.pagination.next if page.pagination else None
            if not token:
                return

    async def delete(self, ids: list[str]) -> None:
        if not ids:
            return
        try:
            await asyncio.to_thread(self._get_index().delete, ids=ids, namespace=self.namespace)
        except Exception as e:
            raise VectorStoreError(
                message=f"Failed to delete vectors from Pinecone: {e}",
                operation="delete",
                details={"index": self.index_name, "id_count": len(ids)},
            ) from e

    async def describe(self) -> StoreStats:
        try:
            stats = await asyncio.to_thread(self._get_index().describe_index_stats)
        except Exception as e:
            raise VectorStoreError(
                message=f"Failed to describe Pinecone index: {e}",
                operation="describe",
                details={"index": self.index_name},
            ) from e
        return StoreStats(
            dimension=getattr(stats, "dimension", None),
            total_records=getattr(stats, "total_vector_count", 0) or 0,
        )
