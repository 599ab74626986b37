"""
Retrieval service.

Runs user-filtered similarity search and converts rank position into a
relevance score. The store orders matches by similarity; this service
never recomputes it.

Dependencies: feedback_rag.boundary.vdb, feedback_rag.models
System role: Per-user retrieval orchestration
"""

import logging

from feedback_rag.boundary.vdb import VectorStoreAdapter
from feedback_rag.core.enricher import validate_user_id
from feedback_rag.models import RetrievalResult
from feedback_rag.models.record import USER_ID_KEY
from feedback_rag.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)


def rank_scores(length: int) -> list[float]:
    """
    Map positions 0..length-1 to scores 1 - index/length.

    Strictly decreasing, first score is 1.0, last is 1/length.
    """
    return [1 - index / length for index in range(length)]


class RetrievalService:
    """User-scoped similarity search."""

    def __init__(self, vector_store: VectorStoreAdapter, top_k: int = 30) -> None:
        """
        Args:
            vector_store: Store adapter to query
            top_k: Maximum results per search
        """
        self.vector_store = vector_store
        self.top_k = top_k

    async def search(self, query: str, user_id: str) -> list[RetrievalResult]:
        """
        Retrieve the user's chunks most similar to the query.

        Args:
            query: Search query text
            user_id: User whose records are searched

        Returns:
            list[RetrievalResult]: Most relevant first; empty when nothing matches

        Raises:
            ValidationError: If user_id is missing or malformed
            ProviderError: If embedding or the store query fails
        """
        user_id = validate_user_id(user_id)
        search_filter = {USER_ID_KEY: user_id}
        logger.info(f"{__name__}:search - Searching with filter {search_filter}")

        try:
            matches = await self.vector_store.similarity_search(
                query=query,
                k=self.top_k,
                filter=search_filter,
            )
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:search - Similarity search failed",
                e,
                user_id=user_id,
                query_preview=query[:50],
            )
            raise

        owned = []
        for match in matches:
            if match.metadata.get(USER_ID_KEY) != user_id:
                log_with_context(
                    logger,
                    logging.ERROR,
                    f"{__name__}:search - Dropping match outside user filter",
                    user_id=user_id,
                    record_id=match.id,
                    record_user=match.metadata.get(USER_ID_KEY),
                )
                continue
            owned.append(match)

        results = [
            RetrievalResult(
                content=match.content,
                metadata={**match.metadata, "text": match.content},
                score=score,
            )
            for match, score in zip(owned, rank_scores(len(owned)))
        ]

        if results:
            logger.info(
                f"{__name__}:search - Retrieved {len(results)} results, "
                "ranked from most to least relevant"
            )
        return results
