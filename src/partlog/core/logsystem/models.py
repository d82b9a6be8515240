"""Log entry database models.

All entries live in a single ``log`` table. The ``type`` column selects
the entry class, and kind-specific data is kept in the compact ``extra``
JSON payload to keep rows small:

    m: comment ("reason for change")
    i: in-stock value on creation, or the deleted element id
    f: list of changed field names
    d: mapping of field name to old value
    n: collection name (collection element deleted)
    c: deleted element type (collection element deleted)
"""

from datetime import UTC, datetime
from enum import Enum, IntEnum
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, SmallInteger, String
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import Mapped, mapped_column

from partlog.core.constants import MAX_LOG_TYPE_LENGTH, MAX_TARGET_TYPE_LENGTH
from partlog.core.database.base import DBElement


class LogLevel(IntEnum):
    """Severity of a log entry, lower is more severe."""

    EMERGENCY = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Look up a level by its case-insensitive name."""
        return cls[name.upper()]


class LogEntryType(str, Enum):
    """Discriminator values of the log entry classes."""

    UNKNOWN = "unknown"
    ELEMENT_CREATED = "element_created"
    ELEMENT_EDITED = "element_edited"
    ELEMENT_DELETED = "element_deleted"
    COLLECTION_ELEMENT_DELETED = "collection_element_deleted"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AbstractLogEntry(DBElement):
    """Common envelope of every log entry.

    Attributes:
        type: Entry kind, used as the polymorphic discriminator
        level: Severity (see LogLevel)
        timestamp: When the entry was written, set on INSERT
        user_id: The acting user, set by the EventLogger
        target_type: Table name of the affected element
        target_id: Identifier of the affected element
        extra: Compact kind-specific payload
    """

    __tablename__ = "log"

    type: Mapped[str] = mapped_column(
        String(MAX_LOG_TYPE_LENGTH),
        nullable=False,
        index=True,
    )
    level: Mapped[int] = mapped_column(
        SmallInteger,
        nullable=False,
        default=LogLevel.INFO,
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
        index=True,
    )
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        index=True,
    )
    target_type: Mapped[str | None] = mapped_column(
        String(MAX_TARGET_TYPE_LENGTH),
        nullable=True,
        index=True,
    )
    target_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        index=True,
    )
    extra: Mapped[dict[str, Any]] = mapped_column(
        MutableDict.as_mutable(JSON),
        nullable=False,
        default=dict,
    )

    __mapper_args__ = {
        "polymorphic_on": "type",
        "polymorphic_identity": LogEntryType.UNKNOWN.value,
    }

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if self.extra is None:
            self.extra = {}
        if self.level is None:
            self.level = LogLevel.INFO

    @property
    def entry_type(self) -> LogEntryType:
        """The kind of this entry."""
        return LogEntryType(self.type)

    @property
    def log_level(self) -> LogLevel:
        """The severity of this entry as a LogLevel."""
        return LogLevel(self.level)

    def set_target_element(self, element: DBElement | None) -> "AbstractLogEntry":
        """Point this entry at the given element (or at nothing)."""
        if element is None:
            self.target_type = None
            self.target_id = None
        else:
            self.target_type = element.__tablename__
            self.target_id = element.id
        return self

    def has_comment(self) -> bool:
        """Check whether a comment is attached."""
        return self.extra.get("m") is not None

    @property
    def comment(self) -> str | None:
        """The attached comment, if any."""
        return self.extra.get("m")

    def set_comment(self, comment: str | None) -> "AbstractLogEntry":
        """Attach a comment ("reason for change") to this entry."""
        self.extra["m"] = comment
        return self

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__}(id={self.id}, "
            f"target_type={self.target_type}, target_id={self.target_id})>"
        )


class OldDataMixin:
    """Old field values (``d``) for entries that can carry a change set."""

    def set_old_data(self, old_data: dict[str, Any]) -> Any:
        self.extra["d"] = dict(old_data)
        return self

    @property
    def old_data(self) -> dict[str, Any]:
        return dict(self.extra.get("d") or {})

    def has_old_data(self) -> bool:
        return "d" in self.extra


class ElementCreatedLogEntry(AbstractLogEntry):
    """An element was created."""

    __mapper_args__ = {"polymorphic_identity": LogEntryType.ELEMENT_CREATED.value}

    def __init__(self, new_element: DBElement) -> None:
        super().__init__(level=LogLevel.INFO)
        self.set_target_element(new_element)

    @property
    def creation_instock_value(self) -> str | None:
        """The in-stock value of the element when it was created."""
        return self.extra.get("i")

    def has_creation_instock_value(self) -> bool:
        return self.creation_instock_value is not None

    def set_creation_instock_value(self, value: str | None) -> "ElementCreatedLogEntry":
        self.extra["i"] = value
        return self


class ElementEditedLogEntry(OldDataMixin, AbstractLogEntry):
    """An element was edited.

    Depending on configuration either the changed field names (``f``) or
    the full old data (``d``) are stored.
    """

    __mapper_args__ = {"polymorphic_identity": LogEntryType.ELEMENT_EDITED.value}

    def __init__(self, changed_element: DBElement) -> None:
        super().__init__(level=LogLevel.INFO)
        self.set_target_element(changed_element)

    def set_changed_fields(self, changed_fields: list[str]) -> "ElementEditedLogEntry":
        self.extra["f"] = list(changed_fields)
        return self

    def has_changed_fields_info(self) -> bool:
        return "f" in self.extra or "d" in self.extra

    @property
    def changed_field_names(self) -> list[str]:
        """Names of the changed fields, taken from the old data when only that is stored."""
        if "f" in self.extra:
            return list(self.extra["f"])
        return list(self.old_data.keys())


class ElementDeletedLogEntry(OldDataMixin, AbstractLogEntry):
    """An element was deleted."""

    __mapper_args__ = {"polymorphic_identity": LogEntryType.ELEMENT_DELETED.value}

    def __init__(self, deleted_element: DBElement) -> None:
        super().__init__(level=LogLevel.INFO)
        self.set_target_element(deleted_element)


class CollectionElementDeleted(AbstractLogEntry):
    """An element was removed from a collection of another element.

    The target is the element owning the collection. Needed because the
    foreign key lives on the removed element, so editing the owner never
    shows the removal.
    """

    __mapper_args__ = {
        "polymorphic_identity": LogEntryType.COLLECTION_ELEMENT_DELETED.value
    }

    def __init__(
        self,
        changed_element: DBElement,
        collection_name: str,
        deleted_element: DBElement,
    ) -> None:
        super().__init__(level=LogLevel.INFO)
        self.set_target_element(changed_element)
        self.extra["n"] = collection_name
        self.extra["c"] = deleted_element.__tablename__
        self.extra["i"] = deleted_element.id

    @property
    def collection_name(self) -> str | None:
        return self.extra.get("n")

    @property
    def deleted_element_type(self) -> str | None:
        return self.extra.get("c")

    @property
    def deleted_element_id(self) -> int | None:
        return self.extra.get("i")
