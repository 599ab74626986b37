"""
Deletion service.

Removes every record belonging to a user: ENUMERATE -> DELETE -> REPORT.

Enumeration either walks the store's cursor-paginated key listing for the
prefix user_<userId># until the store reports no further pages, or issues
neutral-vector queries filtered by userId. A query round that returns a
full topK page may be truncated, so the service deletes what it found and
queries again until a round comes back short. Under the "auto" strategy a
failed listing falls back to query rounds.

Deletion is best-effort: each failure is logged and reported, never raised,
and nothing is rolled back or retried.

Dependencies: asyncio, feedback_rag.boundary.vdb, feedback_rag.models
System role: Delete-by-user reconciliation
"""

import asyncio
import logging

from feedback_rag.boundary.vdb import VectorStoreAdapter
from feedback_rag.core.enricher import validate_user_id
from feedback_rag.core.exceptions import VectorStoreError
from feedback_rag.models import DeletionReport, user_prefix
from feedback_rag.models.record import USER_ID_KEY
from feedback_rag.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)


class DeletionService:
    """Delete all of a user's records from the vector store."""

    def __init__(
        self,
        vector_store: VectorStoreAdapter,
        strategy: str = "auto",
        enumeration_top_k: int = 10000,
        max_enumeration_rounds: int = 20,
        delete_batch_size: int = 1000,
        delete_concurrency: int = 4,
        index_name: str | None = None,
    ) -> None:
        """
        Args:
            vector_store: Store adapter
            strategy: 'list', 'query', or 'auto' (list when the store supports it)
            enumeration_top_k: topK per enumeration query
            max_enumeration_rounds: Query rounds before reporting truncation
            delete_batch_size: IDs per bulk delete call
            delete_concurrency: Concurrent single-ID deletes
            index_name: Index name for log context
        """
        if strategy not in ("auto", "list", "query"):
            raise ValueError(f"Unknown enumeration strategy: {strategy}")

        self.vector_store = vector_store
        self.strategy = strategy
        self.enumeration_top_k = enumeration_top_k
        self.max_enumeration_rounds = max_enumeration_rounds
        self.delete_batch_size = delete_batch_size
        self.delete_concurrency = delete_concurrency
        self.index_name = index_name

    def _resolve_strategy(self) -> str:
        if self.strategy == "auto":
            return "list" if self.vector_store.supports_listing else "query"
        if self.strategy == "list" and not self.vector_store.supports_listing:
            raise ValueError(f"{type(self.vector_store).__name__} does not support key listing")
        return self.strategy

    async def delete_all(self, user_id: str) -> DeletionReport:
        """
        Delete every record owned by the user.

        Args:
            user_id: User whose records are removed

        Returns:
            DeletionReport: Discovered/deleted counts and failed IDs

        Raises:
            ValidationError: If user_id is missing or malformed
            ProviderError: If enumeration fails
        """
        user_id = validate_user_id(user_id)
        strategy = self._resolve_strategy()
        logger.info(
            f"{__name__}:delete_all - Attempting to delete documents for user: {user_id} "
            f"(strategy={strategy})"
        )

        try:
            if strategy == "list":
                report = await self._delete_listed_or_queried(user_id)
            else:
                report = await self._delete_queried(user_id)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:delete_all - Error deleting user documents",
                e,
                user_id=user_id,
                index_name=self.index_name,
            )
            raise

        if report.total == 0:
            logger.info(f"{__name__}:delete_all - No documents found for user: {user_id}")
        else:
            logger.info(
                f"{__name__}:delete_all - Deleted {report.deleted}/{report.total} "
                f"documents for user: {user_id}"
            )
        if report.failed_ids:
            log_with_context(
                logger,
                logging.WARNING,
                f"{__name__}:delete_all - {len(report.failed_ids)} deletions failed",
                user_id=user_id,
                failed_ids=report.failed_ids,
            )
        return report

    async def _delete_listed_or_queried(self, user_id: str) -> DeletionReport:
        """
        Delete by key listing; under 'auto', fall back to query rounds when
        the index cannot list (e.g. Pinecone pod indexes).

        Listing finishes before any delete, so nothing is deleted twice.
        """
        try:
            return await self._delete_listed(user_id)
        except (NotImplementedError, VectorStoreError) as e:
            if self.strategy != "auto" or getattr(e, "operation", "list") != "list":
                raise
            log_with_context(
                logger,
                logging.WARNING,
                f"{__name__}:delete_all - Key listing unavailable, falling back to query enumeration",
                user_id=user_id,
                index_name=self.index_name,
                error=str(e),
            )
            return await self._delete_queried(user_id)

    async def _delete_listed(self, user_id: str) -> DeletionReport:
        """Collect every ID under the user's prefix, then delete them."""
        prefix = user_prefix(user_id)
        logger.info(f"{__name__}:_delete_listed - Listing vectors with prefix: {prefix}")

        ids: dict[str, None] = {}
        pages = 0
        async for page in self.vector_store.list_ids(prefix):
            pages += 1
            for record_id in page:
                if record_id.startswith(prefix):
                    ids[record_id] = None
            logger.debug(f"{__name__}:_delete_listed - Page {pages}: {len(page)} vectors")

        logger.info(f"{__name__}:_delete_listed - Found {len(ids)} vectors across {pages} pages")
        failed = await self._delete_ids(list(ids))
        return DeletionReport(user_id=user_id, strategy="list", total=len(ids), failed_ids=failed)

    async def _delete_queried(self, user_id: str) -> DeletionReport:
        """Query-delete rounds until a round returns fewer than topK IDs."""
        search_filter = {USER_ID_KEY: user_id}
        attempted: set[str] = set()
        failed: list[str] = []
        truncated = True

        for round_number in range(1, self.max_enumeration_rounds + 1):
            found = list(dict.fromkeys(
                await self.vector_store.query_ids(search_filter, self.enumeration_top_k)
            ))
            new_ids = [record_id for record_id in found if record_id not in attempted]
            capped = len(found) >= self.enumeration_top_k
            logger.info(
                f"{__name__}:_delete_queried - Round {round_number}: found {len(found)} "
                f"vectors ({len(new_ids)} new)"
            )

            if new_ids:
                attempted.update(new_ids)
                failed.extend(await self._delete_ids(new_ids))

            if not capped:
                truncated = False
                break
            if not new_ids:
                # Cap is filled by IDs whose deletes failed; anything beyond it is unreachable.
                break
            logger.warning(
                f"{__name__}:_delete_queried - Enumeration hit topK={self.enumeration_top_k}; "
                "re-enumerating"
            )

        if truncated:
            logger.warning(
                f"{__name__}:_delete_queried - Enumeration may be incomplete for user: {user_id}"
            )
        return DeletionReport(
            user_id=user_id,
            strategy="query",
            total=len(attempted),
            failed_ids=failed,
            truncated=truncated,
        )

    async def _delete_ids(self, ids: list[str]) -> list[str]:
        """
        Delete IDs, returning those that failed.

        Bulk batches are used when the store supports them; a failed batch
        falls back to single-ID deletes so failures map to individual IDs.
        """
        if not ids:
            return []
        if not self.vector_store.supports_bulk_delete:
            return await self._delete_each(ids)

        failed: list[str] = []
        done = 0
        for start in range(0, len(ids), self.delete_batch_size):
            batch = ids[start:start + self.delete_batch_size]
            try:
                await self.vector_store.delete(batch)
            except Exception as e:
                log_with_context(
                    logger,
                    logging.WARNING,
                    f"{__name__}:_delete_ids - Bulk delete failed, retrying IDs individually",
                    batch_size=len(batch),
                    error=str(e),
                )
                failed.extend(await self._delete_each(batch))
            done += len(batch)
            logger.info(f"{__name__}:_delete_ids - Processed {done}/{len(ids)} vectors")
        return failed

    async def _delete_each(self, ids: list[str]) -> list[str]:
        """Delete IDs one at a time with bounded concurrency."""
        semaphore = asyncio.Semaphore(self.delete_concurrency)

        async def _delete_one(record_id: str) -> bool:
            async with semaphore:
                try:
                    await self.vector_store.delete([record_id])
                except Exception as e:
                    log_exception_with_context(
                        logger,
                        f"{__name__}:_delete_each - Error deleting vector",
                        e,
                        record_id=record_id,
                    )
                    return False
                logger.debug(f"{__name__}:_delete_each - Deleted vector {record_id}")
                return True

        outcomes = await asyncio.gather(*(_delete_one(record_id) for record_id in ids))
        return [record_id for record_id, ok in zip(ids, outcomes) if not ok]
