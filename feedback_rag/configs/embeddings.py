"""
Embedding provider configuration settings.

Selects the embedding provider and model, and carries provider credentials.
Credentials are also read from the provider's conventional variable names.

Dependencies: pydantic, pydantic_settings
System role: Embedding configuration for ingestion and retrieval
"""

from pydantic import AliasChoices, Field
from pydantic_settings import SettingsConfigDict

from feedback_rag.configs.base import BaseSettings


class EmbeddingSettings(BaseSettings):
    """Embedding provider configuration (OpenAI by default, Google Gemini optional)."""

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    provider: str = Field(
        default="openai",
        description="Embedding provider: 'openai' or 'google'",
    )
    model: str = Field(
        default="text-embedding-3-large",
        description="Embedding model ID for the selected provider",
    )
    dimension: int = Field(
        default=3072,
        description="Embedding vector dimension (must match the index dimension)",
        gt=0,
    )

    openai_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("EMBEDDING_OPENAI_API_KEY", "OPENAI_API_KEY"),
        description="OpenAI API key",
    )
    google_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("EMBEDDING_GOOGLE_API_KEY", "GOOGLE_API_KEY"),
        description="Google Generative AI API key",
    )
