"""Registration state machine.

Registration is a boolean per (event, attendee): NotRegistered -> Registered
on register, Registered -> NotRegistered on unregister. Every transition is
a pure function from the current (Event, Guardian) pair to a new pair; the
caller persists both as one unit.
"""

from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID

from registrations.domain.errors import (
    AlreadyRegisteredError,
    AttendeeNotAllowedError,
    CapacityExceededError,
    DeadlinePassedError,
    EventEndedError,
    InvalidAttendeesError,
    NotRegisteredError,
)
from registrations.domain.models import Attendee, Event, Guardian, RegisteredChild, RegisteredUser
from registrations.domain.value_objects import ChildId, GuardianId, WaiverId


@dataclass(frozen=True)
class RosterChange:
    """Outcome of a transition: both updated aggregates and who was affected."""

    event: Event
    guardian: Guardian
    user_ids: tuple[GuardianId, ...] = ()
    child_ids: tuple[ChildId, ...] = ()


def resolve_attendees(guardian: Guardian, attendee_ids: Sequence[UUID]) -> tuple[Attendee, ...]:
    """Resolve raw ids to the guardian themself or one of their own children.

    Raises:
        InvalidAttendeesError: If no ids were given.
        AttendeeNotAllowedError: If any id belongs to neither.
    """
    if not attendee_ids:
        raise InvalidAttendeesError()

    attendees: list[Attendee] = []
    seen: set[UUID] = set()
    for attendee_id in attendee_ids:
        if attendee_id in seen:
            continue
        seen.add(attendee_id)
        if attendee_id == guardian.id.value:
            attendees.append(Attendee(guardian_id=guardian.id, display_name=guardian.full_name))
            continue
        child = guardian.find_child(ChildId(attendee_id))
        if child is None:
            raise AttendeeNotAllowedError(str(attendee_id))
        attendees.append(Attendee(guardian_id=guardian.id, child_id=child.id, display_name=child.full_name))
    return tuple(attendees)


def register(event: Event, guardian: Guardian, attendees: Sequence[Attendee], now: datetime) -> RosterChange:
    """Add attendees to the event roster.

    Attendees already on the roster are skipped. If that leaves nothing to
    add the request is rejected rather than reported as a success.

    Raises:
        DeadlinePassedError: If ``now`` is past the registration deadline.
        AlreadyRegisteredError: If every attendee is already registered.
        CapacityExceededError: If the new attendees would overfill the event.
    """
    if event.registration_deadline is not None and now > event.registration_deadline:
        raise DeadlinePassedError()

    pending = [a for a in attendees if not event.has_attendee(a)]
    if not pending:
        raise AlreadyRegisteredError()

    if not event.capacity.admits(event.roster_size, len(pending)):
        raise CapacityExceededError(event.capacity.value)

    users = list(event.registered_users)
    children = list(event.registered_children)
    user_ids: list[GuardianId] = []
    child_ids: list[ChildId] = []
    for attendee in pending:
        if attendee.is_child:
            children.append(RegisteredChild(guardian_id=guardian.id, child_id=attendee.child_id))
            child = guardian.find_child(attendee.child_id)
            guardian = guardian.with_child(
                replace(child, registered_events=child.registered_events | {event.id})
            )
            child_ids.append(attendee.child_id)
        else:
            users.append(RegisteredUser(guardian_id=guardian.id))
            guardian = replace(guardian, registered_events=guardian.registered_events | {event.id})
            user_ids.append(guardian.id)

    event = replace(event, registered_users=tuple(users), registered_children=tuple(children))
    return RosterChange(event=event, guardian=guardian, user_ids=tuple(user_ids), child_ids=tuple(child_ids))


def unregister(event: Event, guardian: Guardian, attendees: Sequence[Attendee], now: datetime) -> RosterChange:
    """Remove attendees from the event roster.

    Raises:
        EventEndedError: If the event is already over.
        NotRegisteredError: If none of the attendees is registered.
    """
    if now > event.end_date:
        raise EventEndedError()

    present = [a for a in attendees if event.has_attendee(a)]
    if not present:
        raise NotRegisteredError()

    user_ids: list[GuardianId] = []
    child_ids: list[ChildId] = []
    for attendee in present:
        event, guardian = _strip(event, guardian, attendee, frozenset())
        if attendee.is_child:
            child_ids.append(attendee.child_id)
        else:
            user_ids.append(attendee.guardian_id)
    return RosterChange(event=event, guardian=guardian, user_ids=tuple(user_ids), child_ids=tuple(child_ids))


def remove_participant(
    event: Event,
    guardian: Guardian,
    attendee: Attendee,
    waiver_ids: frozenset[WaiverId],
) -> RosterChange:
    """Drop an attendee and every reference to their completed waivers for the event.

    Unlike ``unregister`` this never rejects: cascades run against whatever
    state is left, and an attendee that is already gone is a no-op.
    """
    was_registered = event.has_attendee(attendee)
    event, guardian = _strip(event, guardian, attendee, waiver_ids)
    if not was_registered:
        return RosterChange(event=event, guardian=guardian)
    if attendee.is_child:
        return RosterChange(event=event, guardian=guardian, child_ids=(attendee.child_id,))
    return RosterChange(event=event, guardian=guardian, user_ids=(attendee.guardian_id,))


def link_waiver(event: Event, guardian: Guardian, attendee: Attendee, waiver_id: WaiverId) -> tuple[Event, Guardian]:
    """Reference a completed waiver from its signer and, if registered, their roster entry.

    References are sets, so linking the same waiver twice changes nothing.
    """
    if attendee.is_child:
        child = guardian.find_child(attendee.child_id)
        guardian = guardian.with_child(replace(child, waivers_signed=child.waivers_signed | {waiver_id}))
        children = tuple(
            replace(rc, waivers_signed=rc.waivers_signed | {waiver_id}) if rc.child_id == attendee.child_id else rc
            for rc in event.registered_children
        )
        return replace(event, registered_children=children), guardian

    guardian = replace(guardian, waivers_signed=guardian.waivers_signed | {waiver_id})
    users = tuple(
        replace(ru, waivers_signed=ru.waivers_signed | {waiver_id}) if ru.guardian_id == attendee.guardian_id else ru
        for ru in event.registered_users
    )
    return replace(event, registered_users=users), guardian


def _strip(
    event: Event,
    guardian: Guardian,
    attendee: Attendee,
    waiver_ids: frozenset[WaiverId],
) -> tuple[Event, Guardian]:
    if attendee.is_child:
        event = replace(
            event,
            registered_children=tuple(rc for rc in event.registered_children if rc.child_id != attendee.child_id),
        )
        child = guardian.find_child(attendee.child_id)
        if child is not None:
            guardian = guardian.with_child(
                replace(
                    child,
                    registered_events=child.registered_events - {event.id},
                    waivers_signed=child.waivers_signed - waiver_ids,
                )
            )
        return event, guardian

    event = replace(
        event,
        registered_users=tuple(ru for ru in event.registered_users if ru.guardian_id != attendee.guardian_id),
    )
    guardian = replace(
        guardian,
        registered_events=guardian.registered_events - {event.id},
        waivers_signed=guardian.waivers_signed - waiver_ids,
    )
    return event, guardian
