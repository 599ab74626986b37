"""
Vector store factory for selecting between Pinecone (prod) and FAISS (dev).

Depends on PINECONE_STORE_TYPE environment variable.
Provides a consistent adapter regardless of underlying implementation.

Dependencies: feedback_rag.boundary.vdb, feedback_rag.configs
System role: Vector store instantiation and selection
"""

import logging

from langchain_core.embeddings import Embeddings

from feedback_rag.boundary.vdb.base import VectorStoreAdapter
from feedback_rag.boundary.vdb.embeddings import get_embeddings
from feedback_rag.configs import Settings
from feedback_rag.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def get_vector_store(
    settings: Settings,
    embeddings: Embeddings | None = None,
) -> VectorStoreAdapter:
    """
    Build the vector store adapter selected by configuration.

    Args:
        settings: Service settings
        embeddings: Optional embedding model (built from settings if None)

    Returns:
        VectorStoreAdapter: PineconeStore or FAISSStore

    Raises:
        ConfigurationError: If the store type is invalid or credentials are missing
    """
    store_type = settings.vector_store.store_type.lower()
    if store_type not in ("pinecone", "faiss"):
        raise ConfigurationError(
            f"Invalid store type: {store_type}. Must be 'pinecone' (production) or 'faiss' (dev).",
            setting="PINECONE_STORE_TYPE",
        )

    settings.require_credentials()
    embeddings = embeddings or get_embeddings(settings.embeddings)

    if store_type == "faiss":
        from feedback_rag.boundary.vdb.faiss_store import FAISSStore

        logger.info(f"{__name__}:get_vector_store - Creating FAISS vector store (local dev mode)")
        return FAISSStore(
            embeddings=embeddings,
            persist_directory=settings.vector_store.faiss_directory,
            list_page_size=settings.deletion.list_page_size,
        )

    from feedback_rag.boundary.vdb.pinecone_store import PineconeStore

    logger.info(
        f"{__name__}:get_vector_store - Creating Pinecone store (index={settings.vector_store.index_name})"
    )
    return PineconeStore(
        index_name=settings.vector_store.index_name,
        embeddings=embeddings,
        dimension=settings.embeddings.dimension,
        api_key=settings.vector_store.api_key,
        namespace=settings.vector_store.namespace,
        text_key=settings.vector_store.text_key,
        list_page_size=settings.deletion.list_page_size,
    )
