"""Database layer - session management, base models, and mixins."""

from partlog.core.database.base import Base, DBElement, TimestampMixin
from partlog.core.database.session import (
    LoggedSession,
    create_session_factory,
    get_session,
)


__all__ = [
    "Base",
    "DBElement",
    "LoggedSession",
    "TimestampMixin",
    "create_session_factory",
    "get_session",
]
