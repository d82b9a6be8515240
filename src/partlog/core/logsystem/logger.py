"""Event logger: hands log entries to the session for storage."""

from collections.abc import Iterable

import structlog
from sqlalchemy.orm import Session

from partlog.config import Settings
from partlog.core.logsystem.context import get_current_user_id
from partlog.core.logsystem.models import AbstractLogEntry, LogEntryType, LogLevel


log = structlog.get_logger()


class EventLogger:
    """Stores log entries through a session.

    Entries are added to the session and written by its next flush.
    Entries less severe than min_level, of a blacklisted type, or not of
    a whitelisted type (when a whitelist is given) are dropped.
    """

    def __init__(
        self,
        session: Session,
        min_level: LogLevel = LogLevel.INFO,
        blacklist: Iterable[LogEntryType | str] = (),
        whitelist: Iterable[LogEntryType | str] = (),
    ) -> None:
        """Initialize the event logger.

        Args:
            session: Database session the entries are added to
            min_level: Least severe level that is still stored
            blacklist: Entry types that are never stored
            whitelist: If not empty, the only entry types that are stored
        """
        self.session = session
        self.min_level = min_level
        self.blacklist = frozenset(LogEntryType(t) for t in blacklist)
        self.whitelist = frozenset(LogEntryType(t) for t in whitelist)

    @classmethod
    def from_settings(cls, session: Session, settings: Settings) -> "EventLogger":
        return cls(
            session,
            min_level=LogLevel.from_name(settings.event_log_min_level),
            blacklist=settings.event_log_blacklist,
            whitelist=settings.event_log_whitelist,
        )

    def should_be_added(self, entry: AbstractLogEntry) -> bool:
        """Check whether the entry passes the level and type filters."""
        if entry.log_level > self.min_level:
            return False
        if entry.entry_type in self.blacklist:
            return False
        if self.whitelist and entry.entry_type not in self.whitelist:
            return False
        return True

    def log(self, entry: AbstractLogEntry) -> bool:
        """Add a log entry to the session.

        The acting user is taken from the session context unless the
        entry already names one.

        Args:
            entry: The entry to store

        Returns:
            True if the entry was added, False if it was filtered out
        """
        if not self.should_be_added(entry):
            log.debug(
                "log_entry_skipped",
                entry_type=entry.type,
                level=entry.level,
            )
            return False

        if entry.user_id is None:
            entry.user_id = get_current_user_id(self.session)

        self.session.add(entry)

        log.debug(
            "log_entry_added",
            entry_type=entry.type,
            target_type=entry.target_type,
            target_id=entry.target_id,
            user_id=entry.user_id,
        )
        return True

    def log_and_flush(self, entry: AbstractLogEntry) -> bool:
        """Add a log entry and flush the session right away."""
        added = self.log(entry)
        self.session.flush()
        return added
