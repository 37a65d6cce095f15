"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from contextlib import AbstractContextManager

from registrations.domain import ChildId, Event, EventId, Guardian, GuardianId, Waiver, WaiverId


class RegistrationStore(ABC):
    """Interface for Event, Guardian and Waiver persistence."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Return a transaction scope. Leaving it by exception rolls back every write.

        Raises:
            DatastoreError: When the transaction aborts.
        """
        ...

    @abstractmethod
    def get_event(self, event_id: EventId, *, for_update: bool = False) -> Event | None:
        """Return an event with its rosters, or None if not found.

        With ``for_update`` the event stays locked until the transaction ends.
        """
        ...

    @abstractmethod
    def get_guardian(self, guardian_id: GuardianId, *, for_update: bool = False) -> Guardian | None:
        """Return a guardian with their children, or None if not found."""
        ...

    @abstractmethod
    def get_guardian_by_auth_id(self, auth_id: str) -> Guardian | None:
        """Return the guardian bound to an identity-provider subject."""
        ...

    @abstractmethod
    def get_guardian_for_child(self, child_id: ChildId, *, for_update: bool = False) -> Guardian | None:
        """Return the guardian owning a child, or None if no guardian does."""
        ...

    @abstractmethod
    def save_roster(self, event: Event, guardian: Guardian) -> None:
        """Persist an event's rosters and the guardian's reference sets as given."""
        ...

    @abstractmethod
    def get_waiver(self, waiver_id: WaiverId) -> Waiver | None:
        ...

    @abstractmethod
    def list_template_waivers(self, event_id: EventId) -> list[Waiver]:
        ...

    @abstractmethod
    def find_completed_waiver(
        self,
        event_id: EventId,
        template_id: WaiverId,
        guardian_id: GuardianId,
        child_id: ChildId | None,
    ) -> Waiver | None:
        """Return the completed waiver for an (event, template, participant) triple."""
        ...

    @abstractmethod
    def list_completed_waivers(
        self,
        guardian_id: GuardianId,
        child_id: ChildId | None,
        event_id: EventId | None = None,
    ) -> list[Waiver]:
        """Return a participant's completed waivers, newest first.

        ``child_id=None`` selects the guardian's own waivers. Without an
        ``event_id`` waivers for every event are returned.
        """
        ...

    @abstractmethod
    def save_waiver(self, waiver: Waiver) -> None:
        """Insert the waiver, or update it in place if its id exists."""
        ...

    @abstractmethod
    def delete_waivers(self, waiver_ids: Iterable[WaiverId]) -> None:
        ...

    @abstractmethod
    def delete_child(self, guardian_id: GuardianId, child_id: ChildId) -> None:
        ...

    @abstractmethod
    def delete_guardian(self, guardian_id: GuardianId) -> None:
        ...


class ObjectStorage(ABC):
    """Interface for the object store holding waiver PDFs."""

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> str:
        """Store an object and return its URL.

        Raises:
            StorageError: On any storage failure, timeouts included.
        """
        ...

    @abstractmethod
    def get(self, key: str) -> bytes:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...
