"""
Application services.

- FeedbackService: public entry point (initialize, ingest, search, delete)
- RetrievalService: user-filtered similarity search with rank scores
- DeletionService: delete-by-user enumeration and best-effort deletion
"""

from feedback_rag.application.services.deletion_service import DeletionService
from feedback_rag.application.services.feedback_service import FeedbackService, get_feedback_service
from feedback_rag.application.services.retrieval_service import RetrievalService

__all__ = [
    "DeletionService",
    "FeedbackService",
    "RetrievalService",
    "get_feedback_service",
]
