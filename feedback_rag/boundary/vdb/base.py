"""
Vector store adapter contract.

Every backend embeds and persists Records, runs filtered similarity search,
enumerates record IDs and deletes by ID behind this interface. Services only
ever talk to a VectorStoreAdapter.

Dependencies: pydantic, feedback_rag.models
System role: Boundary between the service and vector index providers
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from pydantic import BaseModel, Field

from feedback_rag.models import Record, VectorMatch


class StoreStats(BaseModel):
    """Index statistics used for startup checks."""

    dimension: int | None = Field(default=None, description="Vector dimension, if known")
    total_records: int = Field(default=0, ge=0, description="Records across the index")


class VectorStoreAdapter(ABC):
    """
    Abstract vector store.

    Capability flags tell services which enumeration and deletion paths
    are available.
    """

    supports_listing: bool = False
    supports_bulk_delete: bool = False

    async def connect(self) -> None:
        """Obtain the underlying index handle. Idempotent."""
        return None

    @abstractmethod
    async def add_records(self, records: list[Record]) -> int:
        """
        Embed and upsert records (idempotent by record ID).

        Returns:
            int: Number of records the store acknowledged
        """

    @abstractmethod
    async def similarity_search(
        self,
        query: str,
        k: int,
        filter: dict[str, Any],
    ) -> list[VectorMatch]:
        """Return up to k matches for the filter, most similar first."""

    @abstractmethod
    async def query_ids(self, filter: dict[str, Any], top_k: int) -> list[str]:
        """Return up to top_k record IDs matching the filter, ignoring similarity."""

    def list_ids(self, prefix: str) -> AsyncIterator[list[str]]:
        """
        Iterate every record ID starting with prefix, one page per item.

        Only available when supports_listing is true. Iteration ends when the
        provider reports no further pages.
        """
        raise NotImplementedError(f"{type(self).__name__} does not support key listing")

    @abstractmethod
    async def delete(self, ids: list[str]) -> None:
        """Delete records by ID. Unknown IDs are ignored."""

    @abstractmethod
    async def describe(self) -> StoreStats:
        """Return index statistics."""
