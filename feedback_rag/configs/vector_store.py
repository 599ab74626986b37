"""
Vector store configuration settings.

Manages Pinecone credentials and index selection for vector storage and
retrieval, plus the local FAISS fallback used during development.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for user-scoped retrieval
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from feedback_rag.configs.base import BaseSettings


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (Pinecone for prod, FAISS for local dev)."""

    model_config = SettingsConfigDict(
        env_prefix="PINECONE_",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: str = Field(
        default="pinecone",
        description="Vector store type: 'pinecone' for production, 'faiss' for local dev",
    )
    api_key: str = Field(default="", description="Pinecone API key")
    index_name: str = Field(default="", description="Pinecone index name")
    namespace: str | None = Field(
        default=None,
        description="Pinecone namespace (default namespace when unset)",
    )
    text_key: str = Field(
        default="text",
        description="Metadata key holding the chunk text in the index",
    )

    faiss_directory: str = Field(
        default=".faiss_index",
        description="Directory for FAISS index persistence (store_type='faiss')",
    )
