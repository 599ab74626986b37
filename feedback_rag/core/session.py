"""
Active user session context.

Holds the user a service call acts for. The session lives in a ContextVar,
so each asyncio task (e.g. one request) sees the user it initialized even
when many tasks share one service instance.

Dependencies: contextvars
System role: Session/identity state across calls
"""

from contextvars import ContextVar
from dataclasses import dataclass

from feedback_rag.core.enricher import validate_user_id
from feedback_rag.core.exceptions import ValidationError
from feedback_rag.models.record import USER_ID_KEY


@dataclass(frozen=True)
class Session:
    """User bound to the current context."""

    user_id: str

    @property
    def active_filter(self) -> dict[str, str]:
        """Exact-match metadata filter scoping queries to this user."""
        return {USER_ID_KEY: self.user_id}


session_ctx: ContextVar[Session | None] = ContextVar("feedback_session", default=None)


def set_session(user_id: str) -> Session:
    """
    Bind a user to the current context.

    Args:
        user_id: User to act for

    Returns:
        Session: The session that was set
    """
    session = Session(user_id=validate_user_id(user_id))
    session_ctx.set(session)
    return session


def get_session() -> Session | None:
    """Get the session bound to the current context, if any."""
    return session_ctx.get()


def clear_session() -> None:
    """Unbind the current context's session."""
    session_ctx.set(None)


def resolve_user_id(user_id: str | None = None) -> str:
    """
    Pick the user an operation acts for.

    An explicit user_id wins over the context session.

    Raises:
        ValidationError: If neither is available or the ID is malformed
    """
    if user_id is not None:
        return validate_user_id(user_id)
    session = get_session()
    if session is None:
        raise ValidationError("No userId given and no active session", field="userId")
    return session.user_id
