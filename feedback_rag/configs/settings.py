"""
Unified service settings.

Aggregates all configuration modules into a single Settings class and
checks that the selected backends have what they need to start.

Dependencies: All config modules
System role: Central configuration aggregator for the service
"""

from functools import lru_cache

from pydantic import Field

from feedback_rag.configs.base import BaseSettings
from feedback_rag.configs.embeddings import EmbeddingSettings
from feedback_rag.configs.pipeline import DeletionSettings, IngestionSettings, RetrievalSettings
from feedback_rag.configs.vector_store import VectorStoreSettings
from feedback_rag.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Unified service settings aggregating all config modules."""

    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    embeddings: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    deletion: DeletionSettings = Field(default_factory=DeletionSettings)

    def require_credentials(self) -> None:
        """
        Fail fast when the selected backends are missing credentials.

        Raises:
            ConfigurationError: If a required credential or index name is empty
        """
        store_type = self.vector_store.store_type.lower()
        if store_type == "pinecone":
            if not self.vector_store.api_key:
                raise ConfigurationError("Pinecone API key is not set", setting="PINECONE_API_KEY")
            if not self.vector_store.index_name:
                raise ConfigurationError(
                    "Pinecone index name is not set", setting="PINECONE_INDEX_NAME"
                )

        provider = self.embeddings.provider.lower()
        if provider == "openai" and not self.embeddings.openai_api_key:
            raise ConfigurationError("OpenAI API key is not set", setting="OPENAI_API_KEY")
        if provider == "google" and not self.embeddings.google_api_key:
            raise ConfigurationError("Google API key is not set", setting="GOOGLE_API_KEY")


@lru_cache
def get_settings() -> Settings:
    """
    Get service settings singleton.

    Environment variables are loaded once, on first call.

    Returns:
        Settings: Service settings instance

    Usage:
        from feedback_rag.configs import get_settings
        settings = get_settings()
    """
    return Settings()
