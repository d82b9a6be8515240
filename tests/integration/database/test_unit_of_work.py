"""Tests for the unit of work adapter over a SQLAlchemy session."""

import pytest
from sqlalchemy.orm import Session

from partlog.core.errors import AssociationMappingError
from partlog.core.logsystem.uow import AssociationMapping, UnitOfWork
from partlog.modules.parts.models import Part, PartLot
from tests.factories.part import PartFactory, PartLotFactory


@pytest.fixture
def plain_session(engine):
    """Session without change capture."""
    with Session(bind=engine, expire_on_commit=False, autoflush=False) as session:
        yield session


@pytest.fixture
def stored_lot(plain_session) -> PartLot:
    part = PartFactory.build(name="Old name")
    lot = PartLotFactory.build(part=part, amount=5.0)
    plain_session.add_all([part, lot])
    plain_session.commit()
    return lot


class TestPendingChanges:
    """Tests for pending update and delete lists."""

    def test_pending_updates(self, plain_session, stored_lot):
        stored_lot.amount = 7.0
        uow = UnitOfWork(plain_session)
        assert uow.pending_updates() == [stored_lot]
        assert uow.pending_deletes() == []

    def test_collection_change_is_no_update(self, plain_session, stored_lot):
        """Verify an object with only collection changes is not pending."""
        plain_session.add(PartLotFactory.build(part=stored_lot.part))
        assert UnitOfWork(plain_session).pending_updates() == []

    def test_deleted_object_is_no_update(self, plain_session, stored_lot):
        stored_lot.amount = 7.0
        plain_session.delete(stored_lot)
        uow = UnitOfWork(plain_session)
        assert uow.pending_updates() == []
        assert uow.pending_deletes() == [stored_lot]

    def test_lists_are_cached_until_recomputed(self, plain_session, stored_lot):
        uow = UnitOfWork(plain_session)
        assert uow.pending_deletes() == []

        plain_session.delete(stored_lot)
        assert uow.pending_deletes() == []

        uow.recompute_changesets()
        assert uow.pending_deletes() == [stored_lot]

    def test_has_pending_writes(self, plain_session, stored_lot):
        uow = UnitOfWork(plain_session)
        assert not uow.has_pending_writes()

        stored_lot.description = "Shelf"
        assert uow.has_pending_writes()

        uow.flush()
        assert not uow.has_pending_writes()


class TestFieldChangeset:
    """Tests for UnitOfWork.field_changeset."""

    def test_changed_columns(self, plain_session, stored_lot):
        stored_lot.amount = 7.0
        stored_lot.description = "Shelf"
        changes = UnitOfWork(plain_session).field_changeset(stored_lot)
        assert changes == {"description": ("Drawer A1", "Shelf"), "amount": (5.0, 7.0)}

    def test_changed_many_to_one(self, plain_session, stored_lot):
        """Verify a reassigned relation is reported with the old element."""
        old_part = stored_lot.part
        new_part = PartFactory.build()
        plain_session.add(new_part)
        stored_lot.part = new_part

        changes = UnitOfWork(plain_session).field_changeset(stored_lot)
        assert changes == {"part": (old_part, new_part)}

    def test_changed_unloaded_many_to_one(self, engine, plain_session, stored_lot):
        """Verify the old foreign key is reported when the relation was not loaded."""
        old_part_id = stored_lot.part.id
        new_part = PartFactory.build()
        plain_session.add(new_part)
        plain_session.commit()

        with Session(bind=engine, autoflush=False) as other:
            lot = other.get(PartLot, stored_lot.id)
            replacement = other.get(Part, new_part.id)
            lot.part = replacement

            changes = UnitOfWork(other).field_changeset(lot)
            assert changes == {"part": (old_part_id, replacement)}

    def test_unchanged_object(self, plain_session, stored_lot):
        assert UnitOfWork(plain_session).field_changeset(stored_lot) == {}


class TestOriginalSnapshot:
    """Tests for UnitOfWork.original_snapshot."""

    def test_snapshot_has_loaded_values(self, plain_session, stored_lot):
        snapshot = UnitOfWork(plain_session).original_snapshot(stored_lot)
        assert snapshot == {
            "id": stored_lot.id,
            "part_id": stored_lot.part.id,
            "description": "Drawer A1",
            "amount": 5.0,
        }

    def test_snapshot_uses_values_before_change(self, plain_session, stored_lot):
        stored_lot.amount = 9.0
        snapshot = UnitOfWork(plain_session).original_snapshot(stored_lot)
        assert snapshot["amount"] == 5.0

    def test_snapshot_loads_expired_values(self, plain_session, stored_lot):
        """Verify expired columns are loaded from the database."""
        plain_session.expire(stored_lot)
        snapshot = UnitOfWork(plain_session).original_snapshot(stored_lot)
        assert snapshot["description"] == "Drawer A1"


class TestAssociations:
    """Tests for association metadata and values."""

    def test_association_mappings(self, plain_session):
        mappings = UnitOfWork(plain_session).association_mappings(PartLot)
        assert mappings == {
            "part": AssociationMapping("part", "part_lots", "manytoone"),
        }

    def test_collection_mappings(self, plain_session):
        mappings = UnitOfWork(plain_session).association_mappings(Part)
        assert mappings["part_lots"] == AssociationMapping("part_lots", "part", "onetomany")
        assert mappings["attachments"].inversed_by == "element"

    def test_association_value(self, plain_session, stored_lot):
        uow = UnitOfWork(plain_session)
        assert uow.association_value(stored_lot, "part") is stored_lot.part

    def test_association_value_is_loaded(self, plain_session, stored_lot):
        """Verify an unloaded relation is loaded on access."""
        part_id = stored_lot.part.id
        plain_session.expire(stored_lot)
        value = UnitOfWork(plain_session).association_value(stored_lot, "part")
        assert value.id == part_id

    def test_unknown_association(self, plain_session, stored_lot):
        """Verify a name that is not a relationship is an error."""
        with pytest.raises(AssociationMappingError) as exc_info:
            UnitOfWork(plain_session).association_value(stored_lot, "amount")

        assert exc_info.value.details["association"] == "amount"
