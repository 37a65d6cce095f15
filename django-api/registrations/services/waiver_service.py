"""Waiver signing and lookup service.

A signing batch resolves the template's anchors once, then signs each
participant independently. One participant failing never undoes another;
the result lists who was signed and who was not.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone

from registrations.domain import ChildId, EventId, GuardianId, Waiver, WaiverId, WaiverType
from registrations.domain.errors import (
    DomainError,
    ErrorCode,
    EventNotFoundError,
    GuardianNotFoundError,
    WaiverNotFoundError,
)
from registrations.domain.registration import resolve_attendees
from registrations.pdf.compositor import Stamp, WaiverCompositor
from registrations.pdf.layout import TemplateLayout
from registrations.services.reconciler import WaiverReconciler
from registrations.services.registration_service import parse_attendee_ids, parse_id
from registrations.stores.interfaces import ObjectStorage, RegistrationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignedWaiver:
    participant_id: str
    waiver_id: WaiverId
    url: str


@dataclass(frozen=True)
class SigningFailure:
    participant_id: str
    code: ErrorCode
    message: str
    retryable: bool


@dataclass(frozen=True)
class SigningResult:
    signed: tuple[SignedWaiver, ...] = ()
    failures: tuple[SigningFailure, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.failures


class WaiverService:
    """Service for waiver templates and per-participant signing."""

    def __init__(
        self,
        store: RegistrationStore,
        storage: ObjectStorage,
        layout_for: Callable[[str], TemplateLayout] = TemplateLayout.from_settings,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._store = store
        self._storage = storage
        self._layout_for = layout_for
        self._clock = clock
        self._reconciler = WaiverReconciler(store, storage, clock)

    def list_templates(self, event_id: str) -> list[Waiver]:
        eid = parse_id(EventId, event_id, "event")
        return self._store.list_template_waivers(eid)

    def list_completed(self, event_id: str, guardian_id: str, child_id: str | None = None) -> list[Waiver]:
        """Return a participant's completed waivers for an event, newest first."""
        eid = parse_id(EventId, event_id, "event")
        gid = parse_id(GuardianId, guardian_id, "user")
        cid = parse_id(ChildId, child_id, "child") if child_id else None
        return self._store.list_completed_waivers(gid, cid, eid)

    def sign_waiver(
        self,
        event_id: str,
        template_id: str,
        guardian_id: str,
        signature_image: bytes,
        participant_ids: Sequence[str],
    ) -> SigningResult:
        """Sign a template for each participant and record the results.

        Raises:
            InvalidIdError, InvalidAttendeesError: On malformed input.
            EventNotFoundError, GuardianNotFoundError, WaiverNotFoundError:
                If a referenced record is missing.
            AttendeeNotAllowedError: If a participant is not the guardian's own.
            StorageError: If the template cannot be fetched.
            PdfScanError, AnchorNotFoundError: If the template cannot be
                stamped. Nothing is uploaded in that case.
        """
        eid = parse_id(EventId, event_id, "event")
        tid = parse_id(WaiverId, template_id, "waiver")
        gid = parse_id(GuardianId, guardian_id, "user")
        ids = parse_attendee_ids(participant_ids)

        event = self._store.get_event(eid)
        if event is None:
            raise EventNotFoundError(event_id)
        template = self._store.get_waiver(tid)
        if template is None or template.type is not WaiverType.TEMPLATE or template.event_id != eid:
            raise WaiverNotFoundError(template_id)
        guardian = self._store.get_guardian(gid)
        if guardian is None:
            raise GuardianNotFoundError(guardian_id)
        attendees = resolve_attendees(guardian, ids)

        template_bytes = self._storage.get(template.file_key)
        compositor = WaiverCompositor(self._layout_for(template.layout))
        anchors = compositor.place_anchors(template_bytes)
        signed_on = timezone.localdate(self._clock())

        signed: list[SignedWaiver] = []
        failures: list[SigningFailure] = []
        for attendee in attendees:
            stamp = Stamp(
                guardian_name=guardian.full_name,
                participant_name=attendee.display_name,
                signed_on=signed_on,
            )
            try:
                pdf_bytes = compositor.composite(template_bytes, signature_image, stamp, anchors)
                outcome = self._reconciler.reconcile(event, template, guardian, attendee, pdf_bytes)
            except DomainError as exc:
                logger.warning("Signing %s for participant %s failed: %s", tid, attendee.id, exc)
                failures.append(
                    SigningFailure(
                        participant_id=str(attendee.id),
                        code=exc.code,
                        message=exc.message,
                        retryable=exc.retryable,
                    )
                )
            else:
                signed.append(SignedWaiver(participant_id=str(attendee.id), waiver_id=outcome.waiver.id, url=outcome.url))

        logger.info(
            "Signed template %s for event %s: %d signed, %d failed",
            tid,
            eid,
            len(signed),
            len(failures),
        )
        return SigningResult(signed=tuple(signed), failures=tuple(failures))
