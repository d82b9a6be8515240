"""Tests for the per-session comment and actor context."""

import pytest
from sqlalchemy.orm import Session

from partlog.core.constants import MAX_COMMENT_LENGTH
from partlog.core.logsystem.context import (
    EventCommentHelper,
    clear_current_user,
    get_current_user_id,
    get_event_context,
    set_current_user,
)


@pytest.fixture
def session() -> Session:
    """Unbound session, only its info dict is used."""
    return Session()


class TestEventCommentHelper:
    """Tests for EventCommentHelper."""

    def test_no_message_by_default(self, session):
        helper = EventCommentHelper(session)
        assert helper.get_message() is None
        assert not helper.is_message_set()

    def test_set_and_clear(self, session):
        helper = EventCommentHelper(session)
        helper.set_message("Restocked")
        assert helper.get_message() == "Restocked"
        assert helper.is_message_set()

        helper.clear_message()
        assert helper.get_message() is None

    def test_empty_message_is_not_set(self, session):
        helper = EventCommentHelper(session)
        helper.set_message("")
        assert not helper.is_message_set()

    def test_message_is_truncated(self, session):
        """Verify the comment is cut to the maximum comment length."""
        helper = EventCommentHelper(session)
        helper.set_message("a" * (MAX_COMMENT_LENGTH + 10))
        assert len(helper.get_message()) == MAX_COMMENT_LENGTH

    def test_helpers_share_session_state(self, session):
        """Verify every helper of a session sees the same comment."""
        EventCommentHelper(session).set_message("Shared")
        assert EventCommentHelper(session).get_message() == "Shared"

    def test_sessions_are_isolated(self, session):
        EventCommentHelper(session).set_message("Mine")
        assert EventCommentHelper(Session()).get_message() is None

    def test_message_scope_clears_on_error(self, session):
        """Verify the scoped comment is cleared when the block raises."""
        helper = EventCommentHelper(session)

        with pytest.raises(ValueError):
            with helper.message("Scoped"):
                assert helper.get_message() == "Scoped"
                raise ValueError("boom")

        assert helper.get_message() is None


class TestCurrentUser:
    """Tests for the acting user of a session."""

    def test_set_get_clear(self, session):
        assert get_current_user_id(session) is None

        set_current_user(session, 12)
        assert get_current_user_id(session) == 12

        clear_current_user(session)
        assert get_current_user_id(session) is None

    def test_event_context(self, session):
        """Verify the context contains comment and user."""
        assert get_event_context(session) == {"comment": None, "user_id": None}

        set_current_user(session, 3)
        EventCommentHelper(session).set_message("Audit")
        assert get_event_context(session) == {"comment": "Audit", "user_id": 3}
