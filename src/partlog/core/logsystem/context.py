"""Per-session context for log entries: comment and acting user.

Both values live in ``Session.info`` so they belong to exactly one unit
of work. The comment is read by every entry built during a flush and
cleared by the event logger subscriber once that flush has finished.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy.orm import Session

from partlog.core.constants import (
    ACTOR_INFO_KEY,
    COMMENT_INFO_KEY,
    MAX_COMMENT_LENGTH,
)


class EventCommentHelper:
    """Holds the "reason for change" comment of a session.

    Set it before changing elements, and every log entry produced by the
    next flush will carry it. It is cleared when that flush completes.

    Usage:
        comment = EventCommentHelper(session)
        comment.set_message("Fixed typo in description")
        part.description = "..."
        session.commit()
    """

    def __init__(self, session: Session) -> None:
        self._info = session.info

    def set_message(self, message: str | None) -> None:
        """Set the comment, truncated to MAX_COMMENT_LENGTH."""
        if message is not None:
            message = message[:MAX_COMMENT_LENGTH]
        self._info[COMMENT_INFO_KEY] = message

    def get_message(self) -> str | None:
        return self._info.get(COMMENT_INFO_KEY)

    def is_message_set(self) -> bool:
        """Check whether a non-empty comment is set."""
        return bool(self.get_message())

    def clear_message(self) -> None:
        self._info.pop(COMMENT_INFO_KEY, None)

    @contextmanager
    def message(self, message: str | None) -> Iterator[None]:
        """Set the comment for the duration of the block.

        The comment is cleared on exit, also when the block raises.
        """
        self.set_message(message)
        try:
            yield
        finally:
            self.clear_message()


def set_current_user(session: Session, user_id: int | None) -> None:
    """Set the user that log entries of this session are attributed to."""
    session.info[ACTOR_INFO_KEY] = user_id


def get_current_user_id(session: Session) -> int | None:
    """Get the user that log entries of this session are attributed to."""
    return session.info.get(ACTOR_INFO_KEY)


def clear_current_user(session: Session) -> None:
    session.info.pop(ACTOR_INFO_KEY, None)


def get_event_context(session: Session) -> dict[str, Any]:
    """Get a copy of the comment and actor of the session.

    Returns:
        Dict with "comment" and "user_id", values may be None
    """
    return {
        "comment": session.info.get(COMMENT_INFO_KEY),
        "user_id": session.info.get(ACTOR_INFO_KEY),
    }
