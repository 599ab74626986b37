"""
Record domain model.

Represents one stored, embedded chunk of a user's document. Metadata is
stored in the index under camelCase keys (userId, documentId, chunkIndex)
which are also the filter keys; Python code uses the snake_case names.

Dependencies: pydantic
System role: Record data structure shared by ingestion, retrieval and deletion
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

USER_ID_KEY = "userId"


def user_prefix(user_id: str) -> str:
    """Record ID prefix owned by a user."""
    return f"user_{user_id}#"


def record_id(user_id: str, doc_token: int | str, chunk_index: int) -> str:
    """Build the globally unique record ID for a chunk."""
    return f"{user_prefix(user_id)}doc_{doc_token}#chunk_{chunk_index}"


class RecordMetadata(BaseModel):
    """User, document and chunk identity attached to each record."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", description="Owning user, used as the retrieval filter")
    document_id: str = Field(alias="documentId", description="Logical document grouping key")
    chunk_index: int = Field(alias="chunkIndex", ge=0, description="Position within the document")
    timestamp: int = Field(description="Epoch milliseconds when the record was built")
    question: str | None = Field(default=None, description="Coaching question the text answers")
    title: str | None = Field(default=None, description="Document title")
    source: str | None = Field(default=None, description="Document provenance")

    def to_store(self) -> dict[str, Any]:
        """Serialize to the index metadata format (camelCase, no nulls)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Record(BaseModel):
    """Embedded chunk with globally unique ID."""

    id: str = Field(description="user_<userId>#doc_<token>#chunk_<index>")
    content: str = Field(description="Chunk text content")
    metadata: RecordMetadata = Field(description="Record metadata")
    embedding: list[float] | None = Field(default=None, description="Embedding vector")
