"""Tests for session factories and application bootstrap."""

from sqlalchemy import inspect

from partlog.core.constants import SUBSCRIBER_INFO_KEY
from partlog.core.database import LoggedSession, create_session_factory, get_session
from partlog.core.logsystem import ElementCreatedLogEntry, EventLoggerSubscriber
from partlog.main import create_subscriber, init_db, init_event_logging
from partlog.modules.parts.models import Part, PartLot
from partlog.modules.users.models import User
from tests.factories.part import PartFactory


class TestCreateSessionFactory:
    """Tests for create_session_factory."""

    def test_sessions_without_subscriber(self, engine, test_settings):
        factory = create_session_factory(test_settings, engine=engine)
        with factory() as session:
            assert isinstance(session, LoggedSession)
            assert SUBSCRIBER_INFO_KEY not in session.info

            session.add(PartFactory.build())
            session.commit()

            assert session.query(ElementCreatedLogEntry).count() == 0

    def test_sessions_get_subscriber(self, engine, test_settings):
        subscriber = create_subscriber(test_settings)
        factory = create_session_factory(test_settings, subscriber, engine=engine)
        with factory() as session:
            assert session.info[SUBSCRIBER_INFO_KEY] is subscriber

    def test_builds_engine_from_settings(self, test_settings):
        factory = create_session_factory(test_settings)
        assert str(factory.kw["bind"].url) == "sqlite://"

    def test_get_session_closes(self, engine, test_settings):
        factory = create_session_factory(test_settings, engine=engine)
        sessions = list(get_session(factory))
        assert len(sessions) == 1
        assert isinstance(sessions[0], LoggedSession)


class TestCreateSubscriber:
    """Tests for the application subscriber."""

    def test_uses_history_settings(self, test_settings):
        test_settings.history_save_changed_data = True
        test_settings.history_save_removed_data = False
        subscriber = create_subscriber(test_settings)

        assert isinstance(subscriber, EventLoggerSubscriber)
        assert subscriber.save_changed_data is True
        assert subscriber.save_removed_data is False
        assert subscriber.association_fields(PartLot) == ["part"]
        assert not subscriber.policy.should_field_be_saved(User, "password")


class TestInitEventLogging:
    """Tests for init_event_logging and init_db."""

    def test_init_db_creates_tables(self, test_settings):
        factory = create_session_factory(test_settings)
        engine = factory.kw["bind"]
        init_db(engine)

        tables = set(inspect(engine).get_table_names())
        assert {"log", "parts", "part_lots", "users"} <= tables

    def test_sessions_log_changes(self, engine, test_settings):
        """Verify sessions of the factory capture changes."""
        factory = init_event_logging(test_settings, engine=engine)

        with factory() as session:
            part = Part(name="Capacitor")
            session.add(part)
            session.commit()

            entry = session.query(ElementCreatedLogEntry).one()
            assert entry.target_id == part.id
