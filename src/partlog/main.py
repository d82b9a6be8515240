"""Application bootstrap: logging, event log subscriber and sessions."""

import structlog
from sqlalchemy import Engine
from sqlalchemy.orm import sessionmaker

from partlog.config import Settings, settings as default_settings
from partlog.core.database import Base, LoggedSession, create_session_factory
from partlog.core.logging import configure_logging
from partlog.core.logsystem import EventLoggerSubscriber
from partlog.policy import TRIGGER_ASSOCIATION_LOG_WHITELIST, default_redaction_policy


logger = structlog.get_logger()


def create_subscriber(settings: Settings | None = None) -> EventLoggerSubscriber:
    """Create the event logger subscriber with the default policy tables."""
    settings = settings or default_settings
    return EventLoggerSubscriber.from_settings(
        settings,
        default_redaction_policy(),
        association_whitelist=TRIGGER_ASSOCIATION_LOG_WHITELIST,
    )


def init_event_logging(
    settings: Settings | None = None,
    engine: Engine | None = None,
) -> sessionmaker[LoggedSession]:
    """Set up logging and return a factory for logged sessions.

    Args:
        settings: Application settings, the global settings by default
        engine: Engine to bind sessions to instead of one built from settings

    Returns:
        Session factory whose sessions log element changes
    """
    settings = settings or default_settings
    configure_logging(settings)

    subscriber = create_subscriber(settings)
    session_factory = create_session_factory(settings, subscriber, engine=engine)

    logger.info(
        "event_logging_initialized",
        app_name=settings.app_name,
        environment=settings.environment,
        save_changed_fields=subscriber.save_changed_fields,
        save_changed_data=subscriber.save_changed_data,
        save_removed_data=subscriber.save_removed_data,
    )

    return session_factory


def init_db(engine: Engine) -> None:
    """Create every table of the application."""
    Base.metadata.create_all(engine)
    logger.info("database_initialized", tables=sorted(Base.metadata.tables))
