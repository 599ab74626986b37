"""
Vector database boundary layer.

Provides vector store adapters for storage, retrieval and enumeration.
- PineconeStore: Production Pinecone client (LangChain integration)
- FAISSStore: Local development store

Dependencies: pinecone, langchain_pinecone, langchain_community
System role: Vector store adapter for user-scoped retrieval
"""

from feedback_rag.boundary.vdb.base import StoreStats, VectorStoreAdapter
from feedback_rag.boundary.vdb.vector_store_factory import get_vector_store

__all__ = [
    "StoreStats",
    "VectorStoreAdapter",
    "get_vector_store",
]
