"""
Exception hierarchy for the feedback retrieval service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the service
"""

from typing import Any


class FeedbackRAGException(Exception):
    """Base exception for all feedback retrieval errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(FeedbackRAGException):
    """Raised when caller input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class ConfigurationError(FeedbackRAGException):
    """Raised when credentials, index name or backend selection are unusable."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if setting:
            details["setting"] = setting
        super().__init__(message, details)


class ServiceNotInitializedError(FeedbackRAGException):
    """Raised when an operation runs before initialize() obtained a store handle."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"Service must be initialized before calling {operation}",
            {"operation": operation},
        )


class ProviderError(FeedbackRAGException):
    """Base exception for failures of the embedding or vector store providers."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize provider error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, query, list, delete, embed)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        self.operation = operation
        super().__init__(message, details)


class EmbeddingError(ProviderError):
    """Raised when embedding generation fails."""

    pass


class VectorStoreError(ProviderError):
    """Raised when vector store operations fail."""

    pass


class DataIntegrityError(FeedbackRAGException):
    """Raised when the store acknowledges a different set of records than written."""

    def __init__(
        self,
        message: str,
        user_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if user_id:
            details["user_id"] = user_id
        super().__init__(message, details)
