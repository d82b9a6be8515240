"""Automatic change capture via SQLAlchemy session events.

The subscriber observes every flush of a LoggedSession in three steps:

1. ``before_flush``: pending updates and deletions are scanned and
   edited / deleted log entries are handed to the event logger, so they
   are written by the same flush.
2. ``pending_to_persistent``: once a new element has its identifier, a
   created log entry is built and queued on the flush cycle.
3. After the primary flush returned, the queued entries are handed to
   the event logger and written by an additional flush, repeated while
   that flush queues more. The comment of the session is cleared
   afterwards, whatever happened before.
"""

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

import structlog
from sqlalchemy import event
from sqlalchemy.orm import Session

from partlog.config import Settings
from partlog.core.constants import FLUSH_CYCLE_INFO_KEY, SUBSCRIBER_INFO_KEY
from partlog.core.database.base import DBElement
from partlog.core.database.session import LoggedSession
from partlog.core.errors import AssociationMappingError, LogEntryTypeError
from partlog.core.logsystem.changeset import ChangeSetBuilder
from partlog.core.logsystem.context import EventCommentHelper, get_event_context
from partlog.core.logsystem.logger import EventLogger
from partlog.core.logsystem.models import (
    AbstractLogEntry,
    CollectionElementDeleted,
    ElementCreatedLogEntry,
    ElementDeletedLogEntry,
    ElementEditedLogEntry,
)
from partlog.core.logsystem.redaction import RedactionPolicy
from partlog.core.logsystem.uow import UnitOfWork


log = structlog.get_logger()


class FlushPhase(str, Enum):
    """Where a flush cycle currently is."""

    SCANNING = "scanning"
    AWAITING_IDENTIFIERS = "awaiting_identifiers"
    DRAINING_DEFERRED = "draining_deferred"
    DONE = "done"


@dataclass
class FlushCycle:
    """State of one logged flush, kept in Session.info while it runs."""

    uow: UnitOfWork
    logger: EventLogger
    comment: EventCommentHelper
    phase: FlushPhase = FlushPhase.SCANNING
    awaiting: list[ElementCreatedLogEntry] = field(default_factory=list)


class EventLoggerSubscriber:
    """Creates log entries for created, edited and deleted elements.

    Attributes:
        policy: Redaction policy applied to every change set
        save_changed_fields: Store the changed field names of edits
        save_changed_data: Store the old data of edits, wins over
            save_changed_fields; also enables collection element logging
        save_removed_data: Store the old data of deletions
        association_whitelist: Element class to association names whose
            deletion is also logged on the other side of the association
    """

    def __init__(
        self,
        policy: RedactionPolicy,
        save_changed_fields: bool = True,
        save_changed_data: bool = False,
        save_removed_data: bool = True,
        association_whitelist: Mapping[type, Iterable[str]] | None = None,
        logger_factory: Callable[[Session], EventLogger] | None = None,
    ) -> None:
        self.policy = policy
        self.builder = ChangeSetBuilder(policy)
        self.save_changed_fields = save_changed_fields
        self.save_changed_data = save_changed_data
        self.save_removed_data = save_removed_data
        self.association_whitelist: dict[type, tuple[str, ...]] = {
            kind: tuple(names) for kind, names in (association_whitelist or {}).items()
        }
        self.logger_factory = logger_factory or EventLogger

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        policy: RedactionPolicy,
        association_whitelist: Mapping[type, Iterable[str]] | None = None,
    ) -> "EventLoggerSubscriber":
        """Create a subscriber configured by the history and event log settings."""
        return cls(
            policy,
            save_changed_fields=settings.history_save_changed_fields,
            save_changed_data=settings.history_save_changed_data,
            save_removed_data=settings.history_save_removed_data,
            association_whitelist=association_whitelist,
            logger_factory=lambda session: EventLogger.from_settings(session, settings),
        )

    def install(self, session: Session) -> None:
        """Attach this subscriber to a session.

        Raises:
            TypeError: If the session is not a LoggedSession
        """
        if not isinstance(session, LoggedSession):
            raise TypeError("EventLoggerSubscriber requires a LoggedSession")

        session.info[SUBSCRIBER_INFO_KEY] = self
        event.listen(session, "before_flush", self.on_flush)
        event.listen(session, "pending_to_persistent", self.post_persist)

    @staticmethod
    def is_loggable(entity: Any) -> bool:
        """Check whether changes of the object are logged.

        Log entries themselves are never logged.
        """
        return isinstance(entity, DBElement) and not isinstance(entity, AbstractLogEntry)

    @contextmanager
    def flush_cycle(self, session: Session) -> Iterator[FlushCycle]:
        """Run the body (the primary flush) as one logged flush cycle."""
        cycle = FlushCycle(
            uow=UnitOfWork(session),
            logger=self.logger_factory(session),
            comment=EventCommentHelper(session),
        )
        session.info[FLUSH_CYCLE_INFO_KEY] = cycle
        try:
            yield cycle
            self.post_flush(cycle)
        finally:
            session.info.pop(FLUSH_CYCLE_INFO_KEY, None)
            if cycle.phase is not FlushPhase.DONE:
                # The primary flush failed, post_flush never ran
                cycle.comment.clear_message()
                cycle.phase = FlushPhase.DONE

    def on_flush(self, session: Session, _flush_context: Any, _instances: Any) -> None:
        """Log edits and deletions before they are flushed.

        Creations are not handled here, the new elements have no
        identifier yet.
        """
        cycle = self._current_cycle(session)
        if cycle.phase is not FlushPhase.SCANNING:
            return

        uow = cycle.uow
        updates = [e for e in uow.pending_updates() if self.is_loggable(e)]
        deletes = [e for e in uow.pending_deletes() if self.is_loggable(e)]

        for entity in updates:
            self.log_element_edited(entity, cycle)

        for entity in deletes:
            self.log_element_deleted(entity, cycle)

        uow.recompute_changesets()
        cycle.phase = FlushPhase.AWAITING_IDENTIFIERS

        log.debug(
            "flush_scanned",
            updated=len(updates),
            deleted=len(deletes),
            **get_event_context(session),
        )

    def post_persist(self, session: Session, instance: Any) -> None:
        """Queue a created log entry for an element that just got its identifier."""
        if not self.is_loggable(instance):
            return

        cycle = self._current_cycle(session)
        entry = ElementCreatedLogEntry(instance)
        self._attach_comment(entry, cycle)
        cycle.awaiting.append(entry)

    def post_flush(self, cycle: FlushCycle) -> None:
        """Write the queued created log entries, then clear the comment."""
        cycle.phase = FlushPhase.DRAINING_DEFERRED
        try:
            drained = 0
            while True:
                # Elements inserted by a drain flush queue their entries again
                awaiting, cycle.awaiting = cycle.awaiting, []
                for entry in awaiting:
                    cycle.logger.log(entry)
                drained += len(awaiting)

                if not cycle.uow.has_pending_writes():
                    break
                cycle.uow.flush()
                if not cycle.awaiting:
                    break

            log.debug("flush_cycle_drained", created=drained)
        finally:
            cycle.comment.clear_message()
            cycle.phase = FlushPhase.DONE

    def log_element_edited(self, entity: DBElement, cycle: FlushCycle) -> None:
        entry = ElementEditedLogEntry(entity)
        if self.save_changed_data:
            self.save_change_set(entity, entry, cycle.uow)
        elif self.save_changed_fields:
            changed_fields = cycle.uow.field_changeset(entity).keys()
            entry.set_changed_fields(self.policy.filter_fields(type(entity), changed_fields))

        self._attach_comment(entry, cycle)
        cycle.logger.log(entry)

    def log_element_deleted(self, entity: DBElement, cycle: FlushCycle) -> None:
        entry = ElementDeletedLogEntry(entity)
        self._attach_comment(entry, cycle)
        if self.save_removed_data:
            self.save_change_set(entity, entry, cycle.uow, element_deleted=True)
        cycle.logger.log(entry)

        if self.save_changed_data:
            self.log_collection_elements_deleted(entity, cycle)

    def log_collection_elements_deleted(self, entity: DBElement, cycle: FlushCycle) -> None:
        """Log the removal of a deleted element from the collections it belonged to.

        Raises:
            AssociationMappingError: If a whitelisted association is not a
                relationship with an inverse side on the element class
        """
        names = self.association_fields(type(entity))
        if not names:
            return

        mappings = cycle.uow.association_mappings(type(entity))
        for name in names:
            mapping = mappings.get(name)
            if mapping is None or mapping.inversed_by is None:
                raise AssociationMappingError(
                    f"Association '{name}' of {type(entity).__name__} is not mapped "
                    "with an inverse side",
                    entity=type(entity).__name__,
                    association=name,
                )

            changed = cycle.uow.association_value(entity, name)
            if changed is None:
                continue

            entry = CollectionElementDeleted(changed, mapping.inversed_by, entity)
            self._attach_comment(entry, cycle)
            cycle.logger.log(entry)

    def association_fields(self, kind: type) -> list[str]:
        """Get the whitelisted association names of a class and its base classes."""
        names: list[str] = []
        for whitelisted, fields in self.association_whitelist.items():
            if issubclass(kind, whitelisted):
                names.extend(name for name in fields if name not in names)
        return names

    def save_change_set(
        self,
        entity: DBElement,
        entry: AbstractLogEntry,
        uow: UnitOfWork,
        element_deleted: bool = False,
    ) -> None:
        """Store the redacted old data of an element on its log entry.

        Raises:
            LogEntryTypeError: If entry is not an edited or deleted entry
        """
        if not isinstance(entry, ElementEditedLogEntry | ElementDeletedLogEntry):
            raise LogEntryTypeError(entry_type=entry.type)

        if element_deleted:
            diff_source = uow.original_snapshot(entity)
        else:
            diff_source = uow.field_changeset(entity)

        entry.set_old_data(self.builder.build(entity, diff_source, was_deleted=element_deleted))

    @staticmethod
    def _attach_comment(entry: AbstractLogEntry, cycle: FlushCycle) -> None:
        if cycle.comment.is_message_set():
            entry.set_comment(cycle.comment.get_message())

    @staticmethod
    def _current_cycle(session: Session) -> FlushCycle:
        try:
            return session.info[FLUSH_CYCLE_INFO_KEY]
        except KeyError:
            raise RuntimeError(
                "Flush is not running inside a logged flush cycle"
            ) from None
