"""Read-side view of a SQLAlchemy session's unit of work.

The event logger never talks to the session directly; everything it
needs about pending changes goes through this adapter. Values are read
through SQLAlchemy's attribute history, never by getattr on arbitrary
names.
"""

from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import inspect
from sqlalchemy.orm import RelationshipDirection, Session

from partlog.core.errors import AssociationMappingError


log = structlog.get_logger()


@dataclass(frozen=True)
class AssociationMapping:
    """A relationship of a mapped class.

    Attributes:
        field: Attribute name of the relationship
        inversed_by: Name of the relationship on the other side, if any
        direction: "manytoone", "onetomany" or "manytomany"
    """

    field: str
    inversed_by: str | None
    direction: str


def _backref_name(backref: Any) -> str | None:
    if isinstance(backref, str):
        return backref
    if isinstance(backref, tuple) and backref:
        return backref[0]
    return None


class UnitOfWork:
    """Adapter exposing the pending changes of a session.

    The pending update and delete lists are taken once and cached, call
    recompute_changesets() to take them again.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self._updates: list[Any] | None = None
        self._deletes: list[Any] | None = None

    def pending_updates(self) -> list[Any]:
        """Objects with changed column or many-to-one values, excluding deletions."""
        if self._updates is None:
            deleted = self.session.deleted
            self._updates = [
                obj
                for obj in self.session.dirty
                if obj not in deleted
                and self.session.is_modified(obj, include_collections=False)
            ]
        return list(self._updates)

    def pending_deletes(self) -> list[Any]:
        if self._deletes is None:
            self._deletes = list(self.session.deleted)
        return list(self._deletes)

    def field_changeset(self, entity: Any) -> dict[str, tuple[Any, Any]]:
        """Get the changed fields of an object.

        Args:
            entity: A persistent mapped object

        Returns:
            Dictionary of changes {field: (old, new)}, old is None when unknown
        """
        state = inspect(entity)
        mapper = state.mapper
        many_to_one = {
            rel.key: rel
            for rel in mapper.relationships
            if rel.direction is RelationshipDirection.MANYTOONE
        }
        keys = [attr.key for attr in mapper.column_attrs] + list(many_to_one)

        changes: dict[str, tuple[Any, Any]] = {}
        for key in keys:
            if key.startswith("_"):
                continue

            history = state.attrs[key].history
            if history.has_changes():
                if history.deleted:
                    old_value = history.deleted[0]
                elif key in many_to_one:
                    # Replaced before it was loaded, the foreign key still holds it
                    old_value = self._committed_reference(state, many_to_one[key])
                else:
                    old_value = None
                new_value = history.added[0] if history.added else None
                changes[key] = (old_value, new_value)

        return changes

    @staticmethod
    def _committed_reference(state: Any, relationship: Any) -> Any:
        """Get the identifier a many-to-one relationship pointed to when loaded.

        Only single-column foreign keys are resolved, None otherwise.
        """
        columns = list(relationship.local_columns)
        if len(columns) != 1:
            return None

        prop = state.mapper.get_property_by_column(columns[0])
        history = state.attrs[prop.key].load_history()
        if history.deleted:
            return history.deleted[0]
        if history.unchanged:
            return history.unchanged[0]
        return None

    def original_snapshot(self, entity: Any) -> dict[str, Any]:
        """Get the column values of an object as they were loaded from the database.

        Unloaded columns are loaded.
        """
        state = inspect(entity)

        snapshot: dict[str, Any] = {}
        for attr in state.mapper.column_attrs:
            if attr.key.startswith("_"):
                continue

            history = state.attrs[attr.key].load_history()
            if history.deleted:
                snapshot[attr.key] = history.deleted[0]
            elif history.unchanged:
                snapshot[attr.key] = history.unchanged[0]
            else:
                snapshot[attr.key] = None

        return snapshot

    def association_mappings(self, kind: type) -> dict[str, AssociationMapping]:
        """Get every relationship of a mapped class, keyed by attribute name."""
        mapper = inspect(kind)
        return {
            rel.key: AssociationMapping(
                field=rel.key,
                inversed_by=rel.back_populates or _backref_name(rel.backref),
                direction=rel.direction.name.lower(),
            )
            for rel in mapper.relationships
        }

    def association_value(self, entity: Any, field: str) -> Any:
        """Read the current value of a relationship, loading it if needed.

        Raises:
            AssociationMappingError: If field is not a relationship of the object
        """
        state = inspect(entity)
        if field not in state.mapper.relationships:
            raise AssociationMappingError(
                f"Association '{field}' is not mapped on {type(entity).__name__}",
                entity=type(entity).__name__,
                association=field,
            )
        return state.attrs[field].value

    def recompute_changesets(self) -> None:
        """Forget the cached pending lists so they are taken again on next access.

        Only the lists of this adapter are dropped. SQLAlchemy itself picks
        up objects added during ``before_flush`` without any recompute.
        """
        self._updates = None
        self._deletes = None
        log.debug("unit_of_work_recomputed")

    def has_pending_writes(self) -> bool:
        """Check whether flushing now would write anything."""
        if self.session.new or self.session.deleted:
            return True
        return any(self.session.is_modified(obj) for obj in self.session.dirty)

    def flush(self) -> None:
        self.session.flush()
