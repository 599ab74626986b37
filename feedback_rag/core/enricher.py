"""
Metadata enrichment for ingested chunks.

Turns the chunks of one document into Records carrying user, document and
chunk identity. All chunks of one ingestion share a single document token,
drawn from a process-wide monotonic millisecond clock so that two documents
ingested within the same millisecond still get distinct record IDs.

Dependencies: feedback_rag.models, feedback_rag.core.exceptions
System role: Second stage of document ingestion
"""

import threading
import time
from collections.abc import Callable, Mapping
from typing import Any

from feedback_rag.core.exceptions import ValidationError
from feedback_rag.models.record import Record, RecordMetadata, record_id


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class DocumentClock:
    """Millisecond clock that never returns the same value twice within a process."""

    def __init__(self, now: Callable[[], int] = _now_ms) -> None:
        self._now = now
        self._last = 0
        self._lock = threading.Lock()

    def next_token(self) -> int:
        """Return max(now, last + 1) and remember it."""
        with self._lock:
            token = max(self._now(), self._last + 1)
            self._last = token
            return token


_default_clock = DocumentClock()


def validate_user_id(user_id: Any) -> str:
    """
    Check a user ID is usable as a filter value and record ID prefix.

    Args:
        user_id: Candidate user ID

    Returns:
        str: The user ID

    Raises:
        ValidationError: If the ID is missing, blank or contains '#'
    """
    if not isinstance(user_id, str) or not user_id.strip():
        raise ValidationError("userId is required", field="userId")
    # '#' delimits the ID segments; allowing it would let user "a" own prefix of "a#b".
    if "#" in user_id:
        raise ValidationError("userId must not contain '#'", field="userId")
    return user_id


class MetadataEnricher:
    """Attach identity and provenance metadata to chunks."""

    def __init__(
        self,
        clock: DocumentClock | None = None,
        now: Callable[[], int] = _now_ms,
    ) -> None:
        """
        Args:
            clock: Document token source (process-wide clock by default)
            now: Per-record timestamp source in epoch milliseconds
        """
        self._clock = clock or _default_clock
        self._now = now

    def enrich(self, chunks: list[str], metadata: Mapping[str, Any]) -> list[Record]:
        """
        Build Records for the chunks of one document.

        Args:
            chunks: Ordered chunk texts
            metadata: Caller metadata (userId required; question, documentId,
                title, source optional)

        Returns:
            list[Record]: One record per chunk, chunkIndex 0..n-1

        Raises:
            ValidationError: If userId is missing or malformed
        """
        user_id = validate_user_id(metadata.get("userId"))
        doc_token = self._clock.next_token()
        document_id = metadata.get("documentId") or f"doc-{doc_token}"

        records = []
        for index, chunk in enumerate(chunks):
            records.append(
                Record(
                    id=record_id(user_id, doc_token, index),
                    content=chunk,
                    metadata=RecordMetadata(
                        user_id=user_id,
                        document_id=str(document_id),
                        chunk_index=index,
                        timestamp=self._now(),
                        question=metadata.get("question"),
                        title=metadata.get("title"),
                        source=metadata.get("source"),
                    ),
                )
            )
        return records
