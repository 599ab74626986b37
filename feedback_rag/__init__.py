"""
User-scoped document ingestion, retrieval and deletion for coaching feedback.
"""

from feedback_rag.application.services import FeedbackService, get_feedback_service
from feedback_rag.models import DeletionReport, RetrievalResult

__all__ = ["FeedbackService", "get_feedback_service", "DeletionReport", "RetrievalResult"]
