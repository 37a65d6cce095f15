"""Unit tests for the registration state machine.

Run with: pytest tests/test_registration.py -v
"""

from dataclasses import replace
from datetime import timedelta
from uuid import uuid4

import pytest

from conftest import NOW
from registrations.domain import Attendee, RegisteredChild, WaiverId
from registrations.domain.errors import (
    AlreadyRegisteredError,
    AttendeeNotAllowedError,
    CapacityExceededError,
    DeadlinePassedError,
    EventEndedError,
    InvalidAttendeesError,
    NotRegisteredError,
)
from registrations.domain.registration import (
    link_waiver,
    register,
    remove_participant,
    resolve_attendees,
    unregister,
)


def everyone(guardian):
    return resolve_attendees(guardian, [guardian.id.value] + [c.id.value for c in guardian.children])


class TestResolveAttendees:
    def test_empty_list_is_invalid(self, guardian):
        with pytest.raises(InvalidAttendeesError):
            resolve_attendees(guardian, [])

    def test_foreign_id_is_rejected(self, guardian):
        """An id that is neither the guardian nor their child is refused."""
        with pytest.raises(AttendeeNotAllowedError):
            resolve_attendees(guardian, [guardian.id.value, uuid4()])

    def test_duplicates_collapse(self, guardian):
        child = guardian.children[0]
        attendees = resolve_attendees(guardian, [child.id.value, child.id.value])
        assert attendees == (Attendee(guardian_id=guardian.id, child_id=child.id, display_name="Mia Reyes"),)


class TestRegister:
    """Tests for NotRegistered -> Registered."""

    def test_register_adds_entries_and_back_references(self, guardian, event):
        change = register(event, guardian, everyone(guardian), NOW)

        assert [ru.guardian_id for ru in change.event.registered_users] == [guardian.id]
        assert {rc.child_id for rc in change.event.registered_children} == {c.id for c in guardian.children}
        assert event.id in change.guardian.registered_events
        assert all(event.id in c.registered_events for c in change.guardian.children)
        assert change.user_ids == (guardian.id,)
        assert len(change.child_ids) == 2

    def test_capacity_exceeded_leaves_roster_empty(self, guardian, make_event):
        """Three attendees against a capacity of two registers nobody."""
        event = make_event(capacity=2)
        with pytest.raises(CapacityExceededError) as exc_info:
            register(event, guardian, everyone(guardian), NOW)
        assert exc_info.value.capacity == 2
        assert event.roster_size == 0

    def test_capacity_counts_only_new_attendees(self, guardian, make_event):
        """Attendees already on the roster do not count twice."""
        event = make_event(capacity=3)
        first = register(event, guardian, resolve_attendees(guardian, [guardian.id.value]), NOW)
        change = register(first.event, first.guardian, everyone(first.guardian), NOW)
        assert change.event.roster_size == 3
        assert change.user_ids == ()

    def test_deadline_passed(self, guardian, make_event):
        event = make_event(deadline=NOW - timedelta(days=1))
        with pytest.raises(DeadlinePassedError):
            register(event, guardian, everyone(guardian), NOW)

    def test_no_deadline_means_always_open(self, guardian, make_event):
        event = make_event(deadline=None)
        assert register(event, guardian, everyone(guardian), NOW).event.roster_size == 3

    def test_all_already_registered_is_rejected(self, guardian, event):
        """Re-registering the same attendees is an error, not a silent success."""
        change = register(event, guardian, everyone(guardian), NOW)
        with pytest.raises(AlreadyRegisteredError):
            register(change.event, change.guardian, everyone(change.guardian), NOW)
        assert change.event.roster_size == 3

    def test_already_registered_wins_over_capacity(self, guardian, make_event):
        """A full event reports the no-op, not the capacity error."""
        event = make_event(capacity=1)
        change = register(event, guardian, resolve_attendees(guardian, [guardian.id.value]), NOW)
        with pytest.raises(AlreadyRegisteredError):
            register(change.event, change.guardian, resolve_attendees(guardian, [guardian.id.value]), NOW)


class TestUnregister:
    """Tests for Registered -> NotRegistered."""

    def test_unregister_removes_entries_and_back_references(self, guardian, event):
        registered = register(event, guardian, everyone(guardian), NOW)
        child = guardian.children[0]
        attendee = resolve_attendees(registered.guardian, [child.id.value])

        change = unregister(registered.event, registered.guardian, attendee, NOW)

        assert child.id not in {rc.child_id for rc in change.event.registered_children}
        assert event.id not in change.guardian.find_child(child.id).registered_events
        assert event.id in change.guardian.registered_events
        assert change.child_ids == (child.id,)

    def test_unregister_after_event_end(self, guardian, event):
        registered = register(event, guardian, everyone(guardian), NOW)
        with pytest.raises(EventEndedError):
            unregister(registered.event, registered.guardian, everyone(guardian), event.end_date + timedelta(minutes=1))

    def test_unregister_nobody_registered(self, guardian, event):
        with pytest.raises(NotRegisteredError):
            unregister(event, guardian, everyone(guardian), NOW)

    def test_unregister_is_allowed_after_deadline(self, guardian, make_event):
        """Only the event end closes unregistration."""
        event = make_event(deadline=NOW + timedelta(hours=1))
        registered = register(event, guardian, everyone(guardian), NOW)
        change = unregister(registered.event, registered.guardian, everyone(guardian), NOW + timedelta(hours=2))
        assert change.event.roster_size == 0


class TestRemoveParticipant:
    def test_strips_roster_and_waiver_references(self, guardian, event):
        registered = register(event, guardian, everyone(guardian), NOW)
        child = guardian.children[1]
        attendee = Attendee(guardian_id=guardian.id, child_id=child.id)
        waiver_id = WaiverId.new()
        linked_event, linked_guardian = link_waiver(registered.event, registered.guardian, attendee, waiver_id)

        change = remove_participant(linked_event, linked_guardian, attendee, frozenset({waiver_id}))

        stripped = change.guardian.find_child(child.id)
        assert waiver_id not in stripped.waivers_signed
        assert event.id not in stripped.registered_events
        assert change.event.roster_size == 2
        assert change.child_ids == (child.id,)

    def test_absent_participant_is_a_no_op(self, guardian, event):
        change = remove_participant(event, guardian, Attendee(guardian_id=guardian.id), frozenset())
        assert change.event == event
        assert change.user_ids == ()


class TestLinkWaiver:
    def test_linking_twice_keeps_one_reference(self, guardian, event):
        registered = register(event, guardian, everyone(guardian), NOW)
        attendee = Attendee(guardian_id=guardian.id)
        waiver_id = WaiverId.new()

        once = link_waiver(registered.event, registered.guardian, attendee, waiver_id)
        twice = link_waiver(*once, attendee, waiver_id)

        assert twice == once
        assert twice[1].waivers_signed == frozenset({waiver_id})
        assert twice[0].registered_users[0].waivers_signed == frozenset({waiver_id})

    def test_unregistered_signer_gets_only_the_guardian_reference(self, guardian, event):
        child = guardian.children[0]
        attendee = Attendee(guardian_id=guardian.id, child_id=child.id)
        waiver_id = WaiverId.new()
        other = replace(event, registered_children=(RegisteredChild(guardian_id=guardian.id, child_id=guardian.children[1].id),))

        linked_event, linked_guardian = link_waiver(other, guardian, attendee, waiver_id)

        assert linked_guardian.find_child(child.id).waivers_signed == frozenset({waiver_id})
        assert linked_event.registered_children[0].waivers_signed == frozenset()
