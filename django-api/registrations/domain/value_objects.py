"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from typing import Self
from uuid import UUID, uuid4


@dataclass(frozen=True)
class _Identifier:
    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class EventId(_Identifier):
    """Unique identifier for an Event."""


@dataclass(frozen=True)
class GuardianId(_Identifier):
    """Unique identifier for a Guardian account."""


@dataclass(frozen=True)
class ChildId(_Identifier):
    """Unique identifier for a Child profile owned by a Guardian."""


@dataclass(frozen=True)
class WaiverId(_Identifier):
    """Unique identifier for a Waiver record."""


@dataclass(frozen=True)
class Capacity:
    """Non-negative attendee limit. Zero means unlimited."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")

    @property
    def is_limited(self) -> bool:
        return self.value > 0

    def admits(self, current: int, adding: int) -> bool:
        return not self.is_limited or current + adding <= self.value
