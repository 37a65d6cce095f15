"""Registration service - all registration business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Every operation that touches an Event and a Guardian does so inside one
store transaction, locking the Event before the Guardian. Stored waiver
artifacts are deleted only after the transaction commits.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import TypeVar
from uuid import UUID

from django.utils import timezone

from registrations.domain import Attendee, ChildId, Event, EventId, Guardian, GuardianId, Waiver
from registrations.domain.errors import (
    ChildNotFoundError,
    EventNotFoundError,
    GuardianNotFoundError,
    InvalidAttendeesError,
    InvalidIdError,
    StorageError,
)
from registrations.domain.registration import (
    RosterChange,
    register,
    remove_participant,
    resolve_attendees,
    unregister,
)
from registrations.stores.interfaces import ObjectStorage, RegistrationStore

logger = logging.getLogger(__name__)


IdT = TypeVar("IdT")


def parse_id(id_type: type[IdT], value: str, kind: str) -> IdT:
    """Parse a raw id into its value object.

    Raises:
        InvalidIdError: If the value is not a UUID.
    """
    try:
        return id_type.from_string(value)
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidIdError(kind) from exc


def parse_attendee_ids(values: Sequence[str]) -> list[UUID]:
    if not isinstance(values, (list, tuple)) or not values:
        raise InvalidAttendeesError()
    try:
        return [UUID(str(value)) for value in values]
    except ValueError as exc:
        raise InvalidAttendeesError() from exc


class RegistrationService:
    """Service for attendee registration and cascading unregistration."""

    def __init__(
        self,
        store: RegistrationStore,
        storage: ObjectStorage,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._store = store
        self._storage = storage
        self._clock = clock

    def register_attendees(self, event_id: str, guardian_id: str, attendee_ids: Sequence[str]) -> RosterChange:
        """Register the guardian and/or their children for an event.

        Raises:
            InvalidIdError, InvalidAttendeesError: On malformed input.
            EventNotFoundError, GuardianNotFoundError: If either is missing.
            AttendeeNotAllowedError: If an attendee is not the guardian's own.
            DeadlinePassedError: If registration has closed.
            AlreadyRegisteredError: If nothing would change.
            CapacityExceededError: If the event would overfill.
            DatastoreError: If the transaction aborts; nothing was written.
        """
        eid = parse_id(EventId, event_id, "event")
        gid = parse_id(GuardianId, guardian_id, "user")
        ids = parse_attendee_ids(attendee_ids)

        with self._store.atomic():
            event, guardian = self._lock_pair(eid, gid)
            attendees = resolve_attendees(guardian, ids)
            change = register(event, guardian, attendees, now=self._clock())
            self._store.save_roster(change.event, change.guardian)

        logger.info(
            "Registered for event %s: users=%s children=%s",
            eid,
            [str(i) for i in change.user_ids],
            [str(i) for i in change.child_ids],
        )
        return change

    def unregister_attendees(self, event_id: str, guardian_id: str, attendee_ids: Sequence[str]) -> RosterChange:
        """Cancel registrations for the guardian and/or their children.

        Raises:
            EventEndedError: If the event is already over.
            NotRegisteredError: If nothing would change.
            Plus the validation and lookup errors of ``register_attendees``.
        """
        eid = parse_id(EventId, event_id, "event")
        gid = parse_id(GuardianId, guardian_id, "user")
        ids = parse_attendee_ids(attendee_ids)

        with self._store.atomic():
            event, guardian = self._lock_pair(eid, gid)
            attendees = resolve_attendees(guardian, ids)
            change = unregister(event, guardian, attendees, now=self._clock())
            self._store.save_roster(change.event, change.guardian)

        logger.info(
            "Unregistered from event %s: users=%s children=%s",
            eid,
            [str(i) for i in change.user_ids],
            [str(i) for i in change.child_ids],
        )
        return change

    def remove_participant(self, event_id: str, participant_id: str, is_child: bool) -> RosterChange:
        """Administrative removal: roster entry, back-references and completed waivers."""
        eid = parse_id(EventId, event_id, "event")

        with self._store.atomic():
            event = self._store.get_event(eid, for_update=True)
            if event is None:
                raise EventNotFoundError(event_id)
            if is_child:
                cid = parse_id(ChildId, participant_id, "participant")
                guardian = self._store.get_guardian_for_child(cid, for_update=True)
                if guardian is None:
                    raise ChildNotFoundError(participant_id)
                attendee = Attendee(guardian_id=guardian.id, child_id=cid)
            else:
                gid = parse_id(GuardianId, participant_id, "participant")
                guardian = self._store.get_guardian(gid, for_update=True)
                if guardian is None:
                    raise GuardianNotFoundError(participant_id)
                attendee = Attendee(guardian_id=gid)

            change, waivers = self._cascade(event, guardian, attendee)

        logger.info("Removed %s %s from event %s", "child" if is_child else "user", participant_id, eid)
        self._discard_artifacts(waivers)
        return change

    def delete_child(self, guardian_id: str, child_id: str) -> None:
        """Delete a child, unregistering them from every event first."""
        gid = parse_id(GuardianId, guardian_id, "user")
        cid = parse_id(ChildId, child_id, "child")

        with self._store.atomic():
            guardian = self._peek_guardian(gid)
            child = guardian.find_child(cid)
            if child is None:
                raise ChildNotFoundError(child_id)
            events = self._lock_events(child.registered_events)
            guardian = self._lock_guardian(gid)
            if guardian.find_child(cid) is None:
                raise ChildNotFoundError(child_id)

            attendee = Attendee(guardian_id=gid, child_id=cid)
            discarded: list[Waiver] = []
            for event in events:
                change, waivers = self._cascade(event, guardian, attendee)
                guardian = change.guardian
                discarded.extend(waivers)

            leftovers = self._store.list_completed_waivers(gid, cid)
            self._store.delete_waivers(w.id for w in leftovers)
            self._store.delete_child(gid, cid)

        logger.info("Deleted child %s of user %s (%d events)", cid, gid, len(events))
        self._discard_artifacts(discarded + leftovers)

    def delete_guardian(self, guardian_id: str) -> None:
        """Delete a guardian and their children, unregistering everyone first."""
        gid = parse_id(GuardianId, guardian_id, "user")

        with self._store.atomic():
            guardian = self._peek_guardian(gid)
            attendees = [Attendee(guardian_id=gid)] + [
                Attendee(guardian_id=gid, child_id=c.id) for c in guardian.children
            ]
            event_ids = set(guardian.registered_events)
            for child in guardian.children:
                event_ids |= child.registered_events
            events = self._lock_events(event_ids)
            guardian = self._lock_guardian(gid)

            discarded: list[Waiver] = []
            for event in events:
                for attendee in attendees:
                    change, waivers = self._cascade(event, guardian, attendee)
                    event, guardian = change.event, change.guardian
                    discarded.extend(waivers)

            leftovers = [
                waiver
                for attendee in attendees
                for waiver in self._store.list_completed_waivers(gid, attendee.child_id)
            ]
            self._store.delete_waivers(w.id for w in leftovers)
            self._store.delete_guardian(gid)

        logger.info("Deleted user %s (%d events)", gid, len(events))
        self._discard_artifacts(discarded + leftovers)

    def _lock_pair(self, event_id: EventId, guardian_id: GuardianId) -> tuple[Event, Guardian]:
        event = self._store.get_event(event_id, for_update=True)
        if event is None:
            raise EventNotFoundError(str(event_id))
        return event, self._lock_guardian(guardian_id)

    def _lock_guardian(self, guardian_id: GuardianId) -> Guardian:
        guardian = self._store.get_guardian(guardian_id, for_update=True)
        if guardian is None:
            raise GuardianNotFoundError(str(guardian_id))
        return guardian

    def _peek_guardian(self, guardian_id: GuardianId) -> Guardian:
        guardian = self._store.get_guardian(guardian_id)
        if guardian is None:
            raise GuardianNotFoundError(str(guardian_id))
        return guardian

    def _lock_events(self, event_ids: Iterable[EventId]) -> list[Event]:
        events = [self._store.get_event(eid, for_update=True) for eid in sorted(event_ids, key=str)]
        return [e for e in events if e is not None]

    def _cascade(self, event: Event, guardian: Guardian, attendee: Attendee) -> tuple[RosterChange, list[Waiver]]:
        waivers = self._store.list_completed_waivers(guardian.id, attendee.child_id, event.id)
        change = remove_participant(event, guardian, attendee, frozenset(w.id for w in waivers))
        self._store.save_roster(change.event, change.guardian)
        self._store.delete_waivers(w.id for w in waivers)
        return change, waivers

    def _discard_artifacts(self, waivers: Iterable[Waiver]) -> None:
        for waiver in waivers:
            try:
                self._storage.delete(waiver.file_key)
            except StorageError:
                logger.warning("Orphaned waiver file %s left in storage", waiver.file_key, exc_info=True)
