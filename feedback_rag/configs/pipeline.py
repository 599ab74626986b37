"""
Ingestion, retrieval and deletion tuning settings.

Chunking geometry, retrieval cap and the enumeration/deletion knobs that
bound how the service walks a user's records.

Dependencies: pydantic, pydantic_settings
System role: Workflow configuration for the user-scoped document lifecycle
"""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from feedback_rag.configs.base import BaseSettings


class IngestionSettings(BaseSettings):
    """Chunking configuration."""

    model_config = SettingsConfigDict(
        env_prefix="INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(default=500, description="Maximum chunk size in characters", gt=0)
    chunk_overlap: int = Field(
        default=100,
        description="Overlap between consecutive chunks",
        ge=0,
    )

    @model_validator(mode="after")
    def _overlap_below_size(self) -> "IngestionSettings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self


class RetrievalSettings(BaseSettings):
    """Similarity search configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    top_k: int = Field(default=30, description="Number of results to return", ge=1, le=1000)


class DeletionSettings(BaseSettings):
    """Delete-by-user enumeration and deletion configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DELETION_",
        case_sensitive=False,
        extra="ignore",
    )

    strategy: Literal["auto", "list", "query"] = Field(
        default="auto",
        description="Enumeration strategy; 'auto' prefers key listing when the store supports it",
    )
    enumeration_top_k: int = Field(
        default=10000,
        description="topK for the neutral-vector enumeration query (Pinecone max is 10000)",
        ge=1,
        le=10000,
    )
    max_enumeration_rounds: int = Field(
        default=20,
        description="Query rounds before enumeration is reported as truncated",
        ge=1,
    )
    list_page_size: int = Field(
        default=100,
        description="Page size for cursor-based key listing",
        ge=1,
        le=100,
    )
    delete_batch_size: int = Field(
        default=1000,
        description="IDs per bulk delete call",
        ge=1,
        le=1000,
    )
    delete_concurrency: int = Field(
        default=4,
        description="Concurrent single-ID deletes when bulk delete is unavailable",
        ge=1,
    )
