"""Error types raised by the change-capture layer."""

from partlog.core.errors.exceptions import (
    AppException,
    AssociationMappingError,
    LogEntryTypeError,
)


__all__ = [
    "AppException",
    "AssociationMappingError",
    "LogEntryTypeError",
]
