from registrations.domain.models import (
    Attendee,
    Child,
    Event,
    Guardian,
    GuardianRole,
    RegisteredChild,
    RegisteredUser,
    Waiver,
    WaiverType,
)
from registrations.domain.value_objects import Capacity, ChildId, EventId, GuardianId, WaiverId

__all__ = [
    "Attendee",
    "Child",
    "Event",
    "Guardian",
    "GuardianRole",
    "RegisteredChild",
    "RegisteredUser",
    "Waiver",
    "WaiverType",
    "Capacity",
    "ChildId",
    "EventId",
    "GuardianId",
    "WaiverId",
]
