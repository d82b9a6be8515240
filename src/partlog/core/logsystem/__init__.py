"""Event log: automatic logging of created, edited and deleted elements.

Provides:
- Log entry models stored in the ``log`` table
- EventLogger for storing entries
- EventLoggerSubscriber for automatic capture via SQLAlchemy events
- EventCommentHelper for attaching a reason for change
"""

from partlog.core.logsystem.changeset import ChangeSetBuilder
from partlog.core.logsystem.context import (
    EventCommentHelper,
    get_current_user_id,
    set_current_user,
)
from partlog.core.logsystem.logger import EventLogger
from partlog.core.logsystem.models import (
    AbstractLogEntry,
    CollectionElementDeleted,
    ElementCreatedLogEntry,
    ElementDeletedLogEntry,
    ElementEditedLogEntry,
    LogEntryType,
    LogLevel,
)
from partlog.core.logsystem.redaction import RedactionPolicy
from partlog.core.logsystem.subscriber import EventLoggerSubscriber, FlushPhase
from partlog.core.logsystem.uow import UnitOfWork


__all__ = [
    "AbstractLogEntry",
    "ChangeSetBuilder",
    "CollectionElementDeleted",
    "ElementCreatedLogEntry",
    "ElementDeletedLogEntry",
    "ElementEditedLogEntry",
    "EventCommentHelper",
    "EventLogger",
    "EventLoggerSubscriber",
    "FlushPhase",
    "LogEntryType",
    "LogLevel",
    "RedactionPolicy",
    "UnitOfWork",
    "get_current_user_id",
    "set_current_user",
]
