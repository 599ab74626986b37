"""
Local FAISS vector store for development.

Provides a disk-persisted vector store using FAISS-CPU so the ingestion,
retrieval and deletion workflow can run without a Pinecone index.

Dependencies: langchain_community.vectorstores, faiss-cpu
System role: Development vector store (local testing only)
"""

import asyncio
import logging
import threading
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

from langchain_community.vectorstores import FAISS
from langchain_core.embeddings import Embeddings

from feedback_rag.boundary.vdb.base import StoreStats, VectorStoreAdapter
from feedback_rag.core.exceptions import EmbeddingError, VectorStoreError
from feedback_rag.models import Record, VectorMatch

logger = logging.getLogger(__name__)


class FAISSStore(VectorStoreAdapter):
    """
    Local FAISS store keyed by record ID.

    The full key set is held in memory, so listing is always complete.
    """

    supports_listing = True
    supports_bulk_delete = True

    def __init__(
        self,
        embeddings: Embeddings,
        persist_directory: str = ".faiss_index",
        list_page_size: int = 100,
    ) -> None:
        """
        Initialize FAISS store, loading a persisted index when present.

        Args:
            embeddings: Embedding model
            persist_directory: Directory for FAISS index persistence
            list_page_size: Page size for ID listing
        """
        self._persist_dir = Path(persist_directory)
        self._embeddings = embeddings
        self._list_page_size = list_page_size
        self._index: FAISS | None = None
        self._loaded = False
        self._lock = threading.RLock()

    def _load(self) -> None:
        """Load existing index once."""
        with self._lock:
            if self._loaded:
                return
            self._persist_dir.mkdir(parents=True, exist_ok=True)
            if (self._persist_dir / "index.faiss").exists():
                self._index = FAISS.load_local(
                    str(self._persist_dir),
                    self._embeddings,
                    allow_dangerous_deserialization=True,
                )
            self._loaded = True

    def _save(self) -> None:
        if self._index is not None:
            self._index.save_local(str(self._persist_dir))

    def _known_ids(self) -> list[str]:
        if self._index is None:
            return []
        return list(self._index.index_to_docstore_id.values())


    async def connect(self) -> None:
        try:
            await asyncio.to_thread(self._load)
        except Exception as e:
            raise VectorStoreError(
                message=f"Failed to load FAISS index: {e}",
                operation="connect",
                details={"path": str(self._persist_dir)},
            ) from e

    def _upsert(
        self,
        pairs: list[tuple[str, list[float]]],
        metadatas: list[dict[str, Any]],
        ids: list[str],
    ) -> int:
        with self._lock:
            self._load()
            # FAISS refuses duplicate IDs; drop existing ones to keep upsert semantics.
            existing = set(self._known_ids()) & set(ids)
            if existing:
                self._index.delete(list(existing))

            if self._index is None:
                self._index = FAISS.from_embeddings(
                    pairs, self._embeddings, metadatas=metadatas, ids=ids
                )
                added = ids
            else:
                added = self._index.add_embeddings(pairs, metadatas=metadatas, ids=ids)
            self._save()
            return len(added)

    async def add_records(self, records: list[Record]) -> int:
        if not records:
            return 0

        texts = [r.content for r in records]
        try:
            vectors = await asyncio.to_thread(self._embeddings.embed_documents, texts)
        except Exception as e:
            raise EmbeddingError(
                message=f"Failed to embed documents: {e}",
                operation="embed",
                details={"text_count": len(texts)},
            ) from e

        for record, vector in zip(records, vectors):
            record.embedding = vector

        try:
            return await asyncio.to_thread(
                self._upsert,
                list(zip(texts, vectors)),
                [r.metadata.to_store() for r in records],
                [r.id for r in records],
            )
        except Exception as e:
            raise VectorStoreError(
                message=f"Failed to add vectors to FAISS: {e}",
                operation="upsert",
                details={"vector_count": len(records)},
            ) from e

    def _search(self, embedding: list[float], k: int, filter: dict[str, Any]) -> list:
        with self._lock:
            self._load()
            if self._index is None:
                return []
            # fetch_k covers the whole index so the filter is applied before the cut to k.
            return self._index.similarity_search_with_score_by_vector(
                embedding,
                k=k,
                filter=filter,
                fetch_k=max(self._index.index.ntotal, k),
            )

    async def similarity_search(
        self,
        query: str,
        k: int,
        filter: dict[str, Any],
    ) -> list[VectorMatch]:
        try:
            embedding = await asyncio.to_thread(self._embeddings.embed_query, query)
        except Exception as e:
            raise EmbeddingError(message=f"Failed to embed query: {e}", operation="embed") from e

        try:
            results = await asyncio.to_thread(self._search, embedding, k, filter)
        except Exception as e:
            raise VectorStoreError(
                message=f"Failed to query FAISS: {e}",
                operation="query",
                details={"k": k},
            ) from e
        return [
            VectorMatch(
                id=getattr(doc, "id", None),
                content=doc.page_content,
                metadata=dict(doc.metadata),
                similarity=float(1 / (1 + distance)),
            )
            for doc, distance in results
        ]

    async def query_ids(self, filter: dict[str, Any], top_k: int) -> list[str]:
        await asyncio.to_thread(self._load)
        if self._index is None:
            return []

        matched = []
        for doc_id, doc in list(self._index.docstore._dict.items()):
            if all(doc.metadata.get(key) == value for key, value in filter.items()):
                matched.append(doc_id)
                if len(matched) >= top_k:
                    break
        return matched

    async def list_ids(self, prefix: str) -> AsyncIterator[list[str]]:
        await asyncio.to_thread(self._load)
        matching = [doc_id for doc_id in self._known_ids() if doc_id.startswith(prefix)]
        for start in range(0, len(matching), self._list_page_size):
            yield matching[start:start + self._list_page_size]

    def _delete(self, ids: list[str]) -> int:
        with self._lock:
            self._load()
            known = set(self._known_ids())
            present = [doc_id for doc_id in ids if doc_id in known]
            if present:
                self._index.delete(present)
                self._save()
            return len(present)

    async def delete(self, ids: list[str]) -> None:
        try:
            deleted = await asyncio.to_thread(self._delete, ids)
        except Exception as e:
            raise VectorStoreError(
                message=f"Failed to delete vectors from FAISS: {e}",
                operation="delete",
                details={"id_count": len(ids)},
            ) from e
        logger.debug(f"{__name__}:delete - Deleted {deleted} vectors")

    async def describe(self) -> StoreStats:
        await asyncio.to_thread(self._load)
        if self._index is None:
            return StoreStats(dimension=None, total_records=0)
        return StoreStats(dimension=self._index.index.d, total_records=self._index.index.ntotal)
