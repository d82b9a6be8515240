"""Core services and cross-cutting concerns."""

from partlog.core.database import Base, DBElement, LoggedSession
from partlog.core.errors import (
    AppException,
    AssociationMappingError,
    LogEntryTypeError,
)


__all__ = [
    "AppException",
    "AssociationMappingError",
    "Base",
    "DBElement",
    "LogEntryTypeError",
    "LoggedSession",
]
