"""Database session management."""

from collections.abc import Generator, Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from partlog.config import Settings, settings as default_settings
from partlog.core.constants import FLUSH_CYCLE_INFO_KEY, SUBSCRIBER_INFO_KEY


if TYPE_CHECKING:
    from partlog.core.logsystem.subscriber import EventLoggerSubscriber


class LoggedSession(Session):
    """Session whose flushes are observed by an EventLoggerSubscriber.

    A flush with pending changes runs as a two-phase flush cycle:

    1. The primary flush writes the pending elements, together with the
       edited and deleted log entries added while they were scanned, and
       assigns identifiers to new elements.
    2. The subscriber hands the created log entries queued during phase 1
       to the event logger and flushes them.

    Usage:
        session = LoggedSession(bind=engine, subscriber=subscriber)
        session.add(part)
        session.commit()  # part and its created log entry are written
    """

    def __init__(
        self,
        *args: Any,
        subscriber: "EventLoggerSubscriber | None" = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        if subscriber is not None:
            subscriber.install(self)

    def flush(self, objects: Sequence[Any] | None = None) -> None:
        subscriber = self.info.get(SUBSCRIBER_INFO_KEY)
        if (
            subscriber is None
            or FLUSH_CYCLE_INFO_KEY in self.info
            or not (self.new or self.dirty or self.deleted)
        ):
            super().flush(objects)
            return

        with subscriber.flush_cycle(self):
            super().flush(objects)


def create_session_factory(
    settings: Settings | None = None,
    subscriber: "EventLoggerSubscriber | None" = None,
    engine: Engine | None = None,
) -> sessionmaker[LoggedSession]:
    """Create a session factory producing logged sessions.

    Args:
        settings: Settings to build the engine from
        subscriber: Subscriber installed on every session
        engine: Engine to bind to instead of building one from settings

    Returns:
        Configured sessionmaker
    """
    settings = settings or default_settings
    if engine is None:
        engine = create_engine(
            settings.database_url,
            echo=settings.database_echo,
        )

    return sessionmaker(
        bind=engine,
        class_=LoggedSession,
        expire_on_commit=False,
        autoflush=False,
        subscriber=subscriber,
    )


def get_session(
    session_factory: sessionmaker[LoggedSession],
) -> Generator[LoggedSession, None, None]:
    """Provide a session that is closed afterwards.

    Usage:
        for session in get_session(factory):
            ...
    """
    with session_factory() as session:
        yield session
