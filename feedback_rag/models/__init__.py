"""Domain models for records, retrieval results and deletion reports."""

from feedback_rag.models.record import Record, RecordMetadata, record_id, user_prefix
from feedback_rag.models.results import DeletionReport, RetrievalResult, VectorMatch

__all__ = [
    "Record",
    "RecordMetadata",
    "record_id",
    "user_prefix",
    "RetrievalResult",
    "VectorMatch",
    "DeletionReport",
]
