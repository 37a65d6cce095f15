"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in registrations/models.py (persistence layer).

Event and Guardian are the two aggregates a registration mutates. A Guardian
owns its Children outright, including their registered-event and
signed-waiver reference sets.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from uuid import UUID

from registrations.domain.value_objects import Capacity, ChildId, EventId, GuardianId, WaiverId


class WaiverType(Enum):
    TEMPLATE = "template"
    COMPLETED = "completed"


class GuardianRole(Enum):
    USER = "user"
    ADMIN = "admin"
    DONATOR = "donator"


@dataclass(frozen=True)
class RegisteredUser:
    """Roster entry for a guardian attending as themself."""

    guardian_id: GuardianId
    waivers_signed: frozenset[WaiverId] = frozenset()


@dataclass(frozen=True)
class RegisteredChild:
    """Roster entry for a child, keyed by the child subdocument id."""

    guardian_id: GuardianId
    child_id: ChildId
    waivers_signed: frozenset[WaiverId] = frozenset()


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event and its two attendee rosters."""

    id: EventId
    title: str
    capacity: Capacity
    registration_deadline: datetime | None
    start_date: datetime
    end_date: datetime
    registered_users: tuple[RegisteredUser, ...] = ()
    registered_children: tuple[RegisteredChild, ...] = ()

    @property
    def roster_size(self) -> int:
        return len(self.registered_users) + len(self.registered_children)

    def has_attendee(self, attendee: "Attendee") -> bool:
        if attendee.is_child:
            return any(rc.child_id == attendee.child_id for rc in self.registered_children)
        return any(ru.guardian_id == attendee.guardian_id for ru in self.registered_users)


@dataclass(frozen=True)
class Child:
    """Domain representation of a Child subdocument."""

    id: ChildId
    first_name: str
    last_name: str
    registered_events: frozenset[EventId] = frozenset()
    waivers_signed: frozenset[WaiverId] = frozenset()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Guardian:
    """Domain representation of a Guardian account and its children."""

    id: GuardianId
    auth_id: str
    first_name: str
    last_name: str
    email: str
    role: GuardianRole = GuardianRole.USER
    children: tuple[Child, ...] = ()
    registered_events: frozenset[EventId] = frozenset()
    waivers_signed: frozenset[WaiverId] = frozenset()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role is GuardianRole.ADMIN

    def find_child(self, child_id: ChildId) -> Child | None:
        return next((c for c in self.children if c.id == child_id), None)

    def with_child(self, child: Child) -> "Guardian":
        """Return a copy with the child of the same id replaced."""
        children = tuple(child if c.id == child.id else c for c in self.children)
        return replace(self, children=children)

    def without_child(self, child_id: ChildId) -> "Guardian":
        return replace(self, children=tuple(c for c in self.children if c.id != child_id))


@dataclass(frozen=True)
class Attendee:
    """A resolved registration target: the guardian as self, or one of their children."""

    guardian_id: GuardianId
    child_id: ChildId | None = None
    display_name: str = ""

    @property
    def is_child(self) -> bool:
        return self.child_id is not None

    @property
    def id(self) -> UUID:
        return self.child_id.value if self.child_id is not None else self.guardian_id.value


@dataclass(frozen=True)
class Waiver:
    """Domain representation of a template or completed waiver."""

    id: WaiverId
    file_key: str
    file_name: str
    type: WaiverType
    uploaded_by: GuardianId
    belongs_to: GuardianId
    uploaded_at: datetime
    child_id: ChildId | None = None
    template_id: WaiverId | None = None
    event_id: EventId | None = None
    layout: str = "default"

    def __post_init__(self) -> None:
        if self.type is WaiverType.COMPLETED and (self.template_id is None or self.event_id is None):
            raise ValueError("Completed waivers must reference a template and an event")

    @property
    def is_for_child(self) -> bool:
        return self.child_id is not None


def waiver_object_key(kind: WaiverType, event_id: EventId, owner_id: UUID, file_name: str) -> str:
    """Object-storage key: waivers/{template|completed}/{eventId}/{ownerId}/{fileName}."""
    return f"waivers/{kind.value}/{event_id}/{owner_id}/{file_name}"


def completed_waiver_file_name(template_id: WaiverId) -> str:
    return f"{template_id}-signed.pdf"
