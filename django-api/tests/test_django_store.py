"""Integration tests for DjangoRegistrationStore.

Run with: pytest tests/test_django_store.py -v
"""

from dataclasses import replace
from datetime import timedelta

import pytest
from django.db import IntegrityError

from conftest import NOW
from registrations import models as orm
from registrations.domain import (
    Attendee,
    ChildId,
    EventId,
    GuardianId,
    GuardianRole,
    Waiver,
    WaiverId,
    WaiverType,
)
from registrations.domain.errors import DatastoreError
from registrations.domain.registration import link_waiver, register, resolve_attendees
from registrations.stores.django_store import DjangoRegistrationStore


@pytest.fixture
def db_store():
    return DjangoRegistrationStore()


@pytest.fixture
def event_row(db):
    return orm.Event.objects.create(
        title="Spring Cleanup",
        start_date=NOW + timedelta(days=10),
        end_date=NOW + timedelta(days=10, hours=4),
        registration_deadline=NOW + timedelta(days=7),
        capacity=10,
    )


@pytest.fixture
def guardian_row(db):
    row = orm.Guardian.objects.create(
        auth_id="auth|parent", first_name="Dana", last_name="Reyes", email="dana@example.com"
    )
    orm.Child.objects.create(guardian=row, first_name="Mia", last_name="Reyes")
    orm.Child.objects.create(guardian=row, first_name="Leo", last_name="Reyes")
    return row


def completed(event_id, guardian_id, child_id=None, at=NOW) -> Waiver:
    """Save a template for the event and return an unsaved completed waiver of it."""
    template_id = WaiverId.new()
    DjangoRegistrationStore().save_waiver(
        Waiver(
            id=template_id,
            file_key=f"waivers/template/{event_id}/{guardian_id}/waiver.pdf",
            file_name="waiver.pdf",
            type=WaiverType.TEMPLATE,
            uploaded_by=guardian_id,
            belongs_to=guardian_id,
            uploaded_at=at,
            event_id=event_id,
        )
    )
    return Waiver(
        id=WaiverId.new(),
        file_key=f"waivers/completed/{event_id}/{child_id or guardian_id}/{template_id}-signed.pdf",
        file_name=f"{template_id}-signed.pdf",
        type=WaiverType.COMPLETED,
        uploaded_by=guardian_id,
        belongs_to=guardian_id,
        uploaded_at=at,
        child_id=child_id,
        template_id=template_id,
        event_id=event_id,
    )


@pytest.mark.django_db
class TestReads:
    """Tests for row to domain conversion."""

    def test_get_guardian_includes_children(self, db_store, guardian_row):
        guardian = db_store.get_guardian(GuardianId(guardian_row.id))

        assert guardian.full_name == "Dana Reyes"
        assert guardian.role is GuardianRole.USER
        assert sorted(c.first_name for c in guardian.children) == ["Leo", "Mia"]

    def test_lookup_by_auth_id_and_child(self, db_store, guardian_row):
        child = guardian_row.children.first()
        assert db_store.get_guardian_by_auth_id("auth|parent").id == GuardianId(guardian_row.id)
        assert db_store.get_guardian_for_child(ChildId(child.id)).id == GuardianId(guardian_row.id)

    def test_missing_rows_return_none(self, db_store):
        assert db_store.get_event(EventId.new()) is None
        assert db_store.get_guardian(GuardianId.new()) is None
        assert db_store.get_waiver(WaiverId.new()) is None


@pytest.mark.django_db
class TestSaveRoster:
    def test_register_round_trips(self, db_store, event_row, guardian_row):
        event = db_store.get_event(EventId(event_row.id))
        guardian = db_store.get_guardian(GuardianId(guardian_row.id))
        attendees = resolve_attendees(guardian, [guardian.id.value] + [c.id.value for c in guardian.children])
        change = register(event, guardian, attendees, NOW)

        with db_store.atomic():
            db_store.save_roster(change.event, change.guardian)

        assert db_store.get_event(event.id) == change.event
        assert db_store.get_guardian(guardian.id) == change.guardian

    def test_removed_entries_are_deleted(self, db_store, event_row, guardian_row):
        event = db_store.get_event(EventId(event_row.id))
        guardian = db_store.get_guardian(GuardianId(guardian_row.id))
        change = register(event, guardian, resolve_attendees(guardian, [guardian.id.value]), NOW)
        db_store.save_roster(change.event, change.guardian)

        db_store.save_roster(replace(change.event, registered_users=()), replace(change.guardian, registered_events=frozenset()))

        assert orm.RegisteredUser.objects.filter(event=event_row).count() == 0
        assert guardian_row.registered_events.count() == 0

    def test_roster_waiver_references_persist(self, db_store, event_row, guardian_row):
        event = db_store.get_event(EventId(event_row.id))
        guardian = db_store.get_guardian(GuardianId(guardian_row.id))
        child = guardian.children[0]
        change = register(event, guardian, resolve_attendees(guardian, [child.id.value]), NOW)
        waiver = completed(event.id, guardian.id, child.id)
        db_store.save_waiver(waiver)

        linked = link_waiver(change.event, change.guardian, Attendee(guardian_id=guardian.id, child_id=child.id), waiver.id)
        db_store.save_roster(*linked)

        stored = db_store.get_event(event.id)
        assert stored.registered_children[0].waivers_signed == frozenset({waiver.id})
        assert db_store.get_guardian(guardian.id).find_child(child.id).waivers_signed == frozenset({waiver.id})


@pytest.mark.django_db
class TestAtomic:
    def test_database_error_becomes_datastore_error(self, db_store, guardian_row):
        with pytest.raises(DatastoreError) as exc_info:
            with db_store.atomic():
                orm.Guardian.objects.create(
                    auth_id="auth|parent", first_name="Dup", last_name="Dup", email="dup@example.com"
                )
        assert isinstance(exc_info.value.__cause__, IntegrityError)

    def test_rollback_discards_earlier_writes(self, db_store, event_row, guardian_row):
        event = db_store.get_event(EventId(event_row.id))
        guardian = db_store.get_guardian(GuardianId(guardian_row.id))
        change = register(event, guardian, resolve_attendees(guardian, [guardian.id.value]), NOW)

        with pytest.raises(DatastoreError):
            with db_store.atomic():
                db_store.save_roster(change.event, change.guardian)
                orm.Guardian.objects.create(
                    auth_id="auth|parent", first_name="Dup", last_name="Dup", email="dup@example.com"
                )

        assert db_store.get_event(event.id).roster_size == 0
        assert db_store.get_guardian(guardian.id).registered_events == frozenset()


@pytest.mark.django_db
class TestWaivers:
    def test_completed_waivers_are_scoped_by_participant(self, db_store, event_row, guardian_row):
        gid = GuardianId(guardian_row.id)
        eid = EventId(event_row.id)
        child_id = ChildId(guardian_row.children.first().id)
        own = completed(eid, gid)
        for_child = completed(eid, gid, child_id)
        db_store.save_waiver(own)
        db_store.save_waiver(for_child)

        assert [w.id for w in db_store.list_completed_waivers(gid, None, eid)] == [own.id]
        assert [w.id for w in db_store.list_completed_waivers(gid, child_id)] == [for_child.id]
        assert db_store.find_completed_waiver(eid, for_child.template_id, gid, child_id) == for_child

    def test_newest_first(self, db_store, event_row, guardian_row):
        gid = GuardianId(guardian_row.id)
        eid = EventId(event_row.id)
        older = completed(eid, gid, at=NOW - timedelta(days=1))
        newer = completed(eid, gid)
        db_store.save_waiver(older)
        db_store.save_waiver(newer)

        assert [w.id for w in db_store.list_completed_waivers(gid, None)] == [newer.id, older.id]

    def test_save_waiver_updates_in_place(self, db_store, event_row, guardian_row):
        waiver = completed(EventId(event_row.id), GuardianId(guardian_row.id))
        db_store.save_waiver(waiver)

        db_store.save_waiver(replace(waiver, uploaded_at=NOW + timedelta(hours=1)))

        assert orm.Waiver.objects.filter(type="completed").count() == 1
        assert db_store.get_waiver(waiver.id).uploaded_at == NOW + timedelta(hours=1)

    def test_one_completed_waiver_per_template_and_participant(self, db_store, event_row, guardian_row):
        waiver = completed(EventId(event_row.id), GuardianId(guardian_row.id))
        db_store.save_waiver(waiver)

        with pytest.raises(IntegrityError):
            db_store.save_waiver(replace(waiver, id=WaiverId.new()))

    def test_delete_child_removes_its_waivers(self, db_store, event_row, guardian_row):
        gid = GuardianId(guardian_row.id)
        child_id = ChildId(guardian_row.children.first().id)
        db_store.save_waiver(completed(EventId(event_row.id), gid, child_id))

        db_store.delete_child(gid, child_id)

        assert db_store.get_guardian(gid).find_child(child_id) is None
        assert orm.Waiver.objects.filter(type="completed").count() == 0
