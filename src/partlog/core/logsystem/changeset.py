"""Old-data change sets for edited and deleted elements."""

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from partlog.core.constants import MAX_STRING_LENGTH, TRUNCATION_MARKER
from partlog.core.database.base import DBElement
from partlog.core.logsystem.redaction import RedactionPolicy


# {field: (old, new)} as reported by the unit of work for an edit
FieldChangeSet = Mapping[str, tuple[Any, Any]]
# {field: value} as loaded from the database, for a deletion
OriginalSnapshot = Mapping[str, Any]


def serialize_value(value: Any) -> Any:
    """Serialize a value to JSON-compatible primitives.

    Recursively converts non-JSON-serializable types to their
    string or primitive representations. Related elements are
    stored as their identifier.

    Args:
        value: Any value to serialize

    Returns:
        JSON-serializable representation of the value
    """
    # Pass through JSON primitives
    if value is None or isinstance(value, str | int | float | bool):
        return value

    result: Any
    if isinstance(value, DBElement):
        result = value.id
    elif isinstance(value, UUID):
        result = str(value)
    elif isinstance(value, datetime | date):
        result = value.isoformat()
    elif isinstance(value, Decimal):
        result = str(value)
    elif isinstance(value, Enum):
        result = value.value
    elif isinstance(value, dict):
        result = {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list | tuple | set | frozenset):
        result = [serialize_value(item) for item in value]
    else:
        # Fallback: convert to string
        result = str(value)

    return result


def truncate_string(
    value: str,
    max_length: int = MAX_STRING_LENGTH,
    marker: str = TRUNCATION_MARKER,
) -> str:
    """Cut a string to max_length characters, the marker included."""
    if len(value) <= max_length:
        return value
    return value[: max_length - len(marker)] + marker


class ChangeSetBuilder:
    """Builds the redacted, size-bounded old data of an element.

    For an edit only the old half of each changed field is used and
    fields whose old value was null are dropped. For a deletion the
    complete original snapshot is used. Both are then redacted,
    serialized and string values are truncated.
    """

    def __init__(
        self,
        policy: RedactionPolicy,
        max_string_length: int = MAX_STRING_LENGTH,
    ) -> None:
        self.policy = policy
        self.max_string_length = max_string_length

    def build(
        self,
        entity: DBElement,
        diff_source: FieldChangeSet | OriginalSnapshot,
        was_deleted: bool = False,
    ) -> dict[str, Any]:
        """Build the change set of an element.

        Args:
            entity: The edited or deleted element
            diff_source: Original snapshot when was_deleted, field changeset otherwise
            was_deleted: Whether the element is being deleted

        Returns:
            Mapping of field name to old value, possibly empty
        """
        if was_deleted:
            old_data = dict(diff_source)
        else:
            old_data = {
                field: change[0]
                for field, change in diff_source.items()
                if change[0] is not None
            }

        old_data = self.policy.filter(type(entity), old_data)

        return {field: self._bound(value) for field, value in old_data.items()}

    def _bound(self, value: Any) -> Any:
        value = serialize_value(value)
        if isinstance(value, str):
            return truncate_string(value, self.max_string_length)
        return value
