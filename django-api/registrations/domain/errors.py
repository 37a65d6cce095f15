"""Domain error codes for the registrations module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_ID = "INVALID_ID"
    INVALID_ATTENDEES = "INVALID_ATTENDEES"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    GUARDIAN_NOT_FOUND = "GUARDIAN_NOT_FOUND"
    CHILD_NOT_FOUND = "CHILD_NOT_FOUND"
    WAIVER_NOT_FOUND = "WAIVER_NOT_FOUND"
    ATTENDEE_NOT_ALLOWED = "ATTENDEE_NOT_ALLOWED"
    ADMIN_REQUIRED = "ADMIN_REQUIRED"
    DEADLINE_PASSED = "DEADLINE_PASSED"
    EVENT_ENDED = "EVENT_ENDED"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    NOT_REGISTERED = "NOT_REGISTERED"
    ANCHOR_NOT_FOUND = "ANCHOR_NOT_FOUND"
    PDF_SCAN_FAILED = "PDF_SCAN_FAILED"
    COMPOSITION_FAILED = "COMPOSITION_FAILED"
    STORAGE_FAILURE = "STORAGE_FAILURE"
    DATASTORE_FAILURE = "DATASTORE_FAILURE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str
    retryable: bool = False

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} ID format",
        )
        self.kind = kind


class InvalidAttendeesError(DomainError):
    """Raised when the attendee list is empty or malformed."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ATTENDEES,
            message="Invalid attendees format",
        )


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class GuardianNotFoundError(DomainError):
    """Raised when a guardian account is not found."""

    def __init__(self, guardian_id: str) -> None:
        super().__init__(
            code=ErrorCode.GUARDIAN_NOT_FOUND,
            message="User not found",
        )
        self.guardian_id = guardian_id


class ChildNotFoundError(DomainError):
    """Raised when a child is not among the guardian's children."""

    def __init__(self, child_id: str) -> None:
        super().__init__(
            code=ErrorCode.CHILD_NOT_FOUND,
            message="Child not found",
        )
        self.child_id = child_id


class WaiverNotFoundError(DomainError):
    def __init__(self, waiver_id: str) -> None:
        super().__init__(
            code=ErrorCode.WAIVER_NOT_FOUND,
            message="Waiver not found",
        )
        self.waiver_id = waiver_id


class AttendeeNotAllowedError(DomainError):
    """Raised when an attendee is neither the guardian nor one of their children."""

    def __init__(self, attendee_id: str) -> None:
        super().__init__(
            code=ErrorCode.ATTENDEE_NOT_ALLOWED,
            message="You can only register yourself or your children",
        )
        self.attendee_id = attendee_id


class AdminRequiredError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ADMIN_REQUIRED,
            message="Admin access required",
        )


class DeadlinePassedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DEADLINE_PASSED,
            message="Registration deadline has passed",
        )


class EventEndedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EVENT_ENDED,
            message="Event has already ended",
        )


class CapacityExceededError(DomainError):
    def __init__(self, capacity: int) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_EXCEEDED,
            message="Event is at full capacity",
        )
        self.capacity = capacity


class AlreadyRegisteredError(DomainError):
    """Raised when every requested attendee is already on the roster."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_REGISTERED,
            message="Selected attendees are already registered",
        )


class NotRegisteredError(DomainError):
    """Raised when none of the requested attendees is on the roster."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NOT_REGISTERED,
            message="Selected attendees were not registered",
        )


class AnchorNotFoundError(DomainError):
    """Raised when a template has no signature anchor text."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ANCHOR_NOT_FOUND,
            message="No signature position found in waiver template",
        )


class PdfScanError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.PDF_SCAN_FAILED,
            message="Waiver template could not be read",
        )


class WaiverCompositionError(DomainError):
    def __init__(self, reason: str = "Failed to sign waiver") -> None:
        super().__init__(
            code=ErrorCode.COMPOSITION_FAILED,
            message=reason,
        )


class StorageError(DomainError):
    """Raised when object storage is unreachable or rejects a request."""

    def __init__(self, key: str) -> None:
        super().__init__(
            code=ErrorCode.STORAGE_FAILURE,
            message="File storage is unavailable",
            retryable=True,
        )
        self.key = key


class DatastoreError(DomainError):
    """Raised when a transaction aborts. Nothing was written."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DATASTORE_FAILURE,
            message="Database is unavailable",
            retryable=True,
        )
