"""
Embedding provider selection.

OpenAI text-embedding-3-large (3072 dimensions) is the default provider.
Google Generative AI embeddings are supported through a wrapper that pins
the output dimensionality, since the base class ignores it in the
constructor.

Dependencies: langchain_openai, langchain_google_genai
System role: Embedding adapter (text -> fixed-dimension vector)
"""

import logging
from typing import Any

from langchain_core.embeddings import Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings
from langchain_openai import OpenAIEmbeddings

from feedback_rag.configs.embeddings import EmbeddingSettings
from feedback_rag.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """GoogleGenerativeAIEmbeddings that always requests the configured dimension."""

    _output_dimensionality: int = 3072

    def __init__(self, output_dimensionality: int = 3072, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._output_dimensionality = output_dimensionality

    def embed_documents(self, texts: list[str], **kwargs: Any) -> list[list[float]]:
        kwargs["output_dimensionality"] = (
            kwargs.get("output_dimensionality") or self._output_dimensionality
        )
        return super().embed_documents(texts, **kwargs)

    def embed_query(self, text: str, **kwargs: Any) -> list[float]:
        kwargs["output_dimensionality"] = (
            kwargs.get("output_dimensionality") or self._output_dimensionality
        )
        return super().embed_query(text, **kwargs)


def get_embeddings(settings: EmbeddingSettings) -> Embeddings:
    """
    Build the configured embedding model.

    Args:
        settings: Embedding settings

    Returns:
        Embeddings: LangChain embeddings instance

    Raises:
        ConfigurationError: If the provider is unknown
    """
    provider = settings.provider.lower()

    if provider == "openai":
        kwargs: dict[str, Any] = {"model": settings.model, "dimensions": settings.dimension}
        if settings.openai_api_key:
            kwargs["api_key"] = settings.openai_api_key
        logger.info(
            f"{__name__}:get_embeddings - OpenAI embeddings model={settings.model}, "
            f"dimension={settings.dimension}"
        )
        return OpenAIEmbeddings(**kwargs)

    if provider == "google":
        kwargs = {"model": settings.model, "output_dimensionality": settings.dimension}
        if settings.google_api_key:
            kwargs["google_api_key"] = settings.google_api_key
        logger.info(
            f"{__name__}:get_embeddings - Google embeddings model={settings.model}, "
            f"dimension={settings.dimension}"
        )
        return FixedDimensionEmbeddings(**kwargs)

    raise ConfigurationError(
        f"Invalid embedding provider: {settings.provider}. Must be 'openai' or 'google'.",
        setting="EMBEDDING_PROVIDER",
    )
