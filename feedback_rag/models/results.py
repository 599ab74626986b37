"""
Result models for retrieval and deletion.

Dependencies: pydantic
System role: Return types of the service's public operations
"""

from typing import Any

from pydantic import BaseModel, Field, computed_field


class VectorMatch(BaseModel):
    """Single match returned by a vector store, ordered by the store."""

    id: str | None = Field(default=None, description="Record ID, when the store returns it")
    content: str = Field(description="Chunk text content")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Stored metadata")
    similarity: float | None = Field(default=None, description="Provider-defined similarity")


class RetrievalResult(BaseModel):
    """
    Chunk returned to the caller with a rank-derived score.

    The score is 1 - index/length over the returned sequence. It is a
    presentation normalization and is not comparable across queries.
    """

    content: str = Field(description="Chunk text content")
    metadata: dict[str, Any] = Field(description="Stored metadata plus 'text'")
    score: float = Field(gt=0.0, le=1.0, description="Rank-derived relevance score")


class DeletionReport(BaseModel):
    """Outcome of a delete-by-user run."""

    user_id: str
    strategy: str = Field(description="Enumeration strategy used: 'list' or 'query'")
    total: int = Field(default=0, ge=0, description="Record IDs discovered")
    failed_ids: list[str] = Field(default_factory=list, description="IDs whose delete failed")
    truncated: bool = Field(
        default=False,
        description="Enumeration may have missed records (query cap hit on the last round)",
    )

    @computed_field
    @property
    def deleted(self) -> int:
        """Records deleted successfully."""
        return self.total - len(self.failed_ids)

    @computed_field
    @property
    def success(self) -> bool:
        """Best-effort delete completed; individual failures are in failed_ids."""
        return True
