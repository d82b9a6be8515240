"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Generator
from typing import Any

import pytest
from sqlalchemy import Engine, create_engine, select

from partlog.config import Settings
from partlog.core.database import Base, LoggedSession
from partlog.core.logsystem import AbstractLogEntry, EventLoggerSubscriber
from partlog.policy import TRIGGER_ASSOCIATION_LOG_WHITELIST, default_redaction_policy


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        environment="testing",
        database_url="sqlite://",
    )


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Create an in-memory SQLite engine with every table.

    Yields:
        Engine bound to a fresh database
    """
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def make_session(
    engine: Engine,
) -> Generator[Callable[..., LoggedSession], None, None]:
    """Build logged sessions with a subscriber configured per test.

    Keyword arguments are passed to EventLoggerSubscriber; by default the
    application redaction policy and association whitelist are used.

    Yields:
        Function creating a LoggedSession
    """
    sessions: list[LoggedSession] = []

    def factory(**options: Any) -> LoggedSession:
        options.setdefault("association_whitelist", TRIGGER_ASSOCIATION_LOG_WHITELIST)
        subscriber = EventLoggerSubscriber(default_redaction_policy(), **options)
        session = LoggedSession(
            bind=engine,
            subscriber=subscriber,
            expire_on_commit=False,
            autoflush=False,
        )
        sessions.append(session)
        return session

    yield factory

    for session in sessions:
        session.close()


@pytest.fixture
def session(make_session: Callable[..., LoggedSession]) -> LoggedSession:
    """Logged session storing changed data, removed data and collection removals."""
    return make_session(save_changed_data=True)


@pytest.fixture
def read_log() -> Callable[..., list[Any]]:
    """Read the stored log entries of a kind in insertion order."""

    def reader(session: LoggedSession, kind: type = AbstractLogEntry) -> list[Any]:
        return list(session.scalars(select(kind).order_by(kind.id)))

    return reader
