"""Domain exceptions for the application.

These exceptions signal programming and configuration errors in the
change-capture layer. They are raised and never caught inside the
library; storage errors from SQLAlchemy propagate unchanged next to them.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class LogEntryTypeError(AppException):
    """Raised when a change set is saved onto an incompatible log entry.

    Only edited and deleted entries carry old data.

    Example:
        raise LogEntryTypeError(details={"entry_type": "element_created"})
    """

    message = "Log entry must be an edited or deleted entry"
    error_code = "invalid_log_entry"

    def __init__(
        self,
        message: str | None = None,
        entry_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if entry_type:
            details["entry_type"] = entry_type
        super().__init__(message=message, details=details, **kwargs)


class AssociationMappingError(AppException):
    """Raised when a whitelisted association is not mapped on the entity class.

    Example:
        raise AssociationMappingError(
            "Association 'part' is not mapped on PartLot",
            details={"entity": "PartLot", "association": "part"},
        )
    """

    message = "Whitelisted association is not mapped"
    error_code = "association_mapping"

    def __init__(
        self,
        message: str | None = None,
        entity: str | None = None,
        association: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if entity:
            details["entity"] = entity
        if association:
            details["association"] = association
        super().__init__(message=message, details=details, **kwargs)
