"""Waiver record reconciliation.

Each signed artifact is uploaded to a key derived from (event, participant,
template), then recorded: an existing completed waiver for the same triple
is updated in place, otherwise a new one is created and linked to its
signer. Upload and record succeed or fail together.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime

from django.utils import timezone

from registrations.domain import Attendee, Event, Guardian, Waiver, WaiverId, WaiverType
from registrations.domain.errors import (
    ChildNotFoundError,
    EventNotFoundError,
    GuardianNotFoundError,
    StorageError,
)
from registrations.domain.models import completed_waiver_file_name, waiver_object_key
from registrations.domain.registration import link_waiver
from registrations.stores.interfaces import ObjectStorage, RegistrationStore

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


@dataclass(frozen=True)
class ReconciledWaiver:
    waiver: Waiver
    url: str
    created: bool


class WaiverReconciler:
    def __init__(
        self,
        store: RegistrationStore,
        storage: ObjectStorage,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._store = store
        self._storage = storage
        self._clock = clock

    def reconcile(
        self,
        event: Event,
        template: Waiver,
        guardian: Guardian,
        attendee: Attendee,
        pdf_bytes: bytes,
    ) -> ReconciledWaiver:
        """Upload one participant's signed PDF and upsert its completed waiver.

        Raises:
            StorageError: If the upload fails; nothing was recorded.
            DatastoreError: If recording fails; a newly uploaded file is removed.
        """
        file_name = completed_waiver_file_name(template.id)
        key = waiver_object_key(WaiverType.COMPLETED, event.id, attendee.id, file_name)
        previously_signed = (
            self._store.find_completed_waiver(event.id, template.id, guardian.id, attendee.child_id) is not None
        )

        url = self._storage.put(key, pdf_bytes, PDF_CONTENT_TYPE)
        try:
            with self._store.atomic():
                waiver, created = self._record(event, template, guardian, attendee, key, file_name)
        except Exception:
            if not previously_signed:
                self._remove_upload(key)
            raise

        logger.info(
            "%s completed waiver %s for participant %s (event %s, template %s)",
            "Created" if created else "Updated",
            waiver.id,
            attendee.id,
            event.id,
            template.id,
        )
        return ReconciledWaiver(waiver=waiver, url=url, created=created)

    def _record(
        self,
        event: Event,
        template: Waiver,
        guardian: Guardian,
        attendee: Attendee,
        key: str,
        file_name: str,
    ) -> tuple[Waiver, bool]:
        locked_event = self._store.get_event(event.id, for_update=True)
        if locked_event is None:
            raise EventNotFoundError(str(event.id))
        owner = self._store.get_guardian(guardian.id, for_update=True)
        if owner is None:
            raise GuardianNotFoundError(str(guardian.id))
        if attendee.is_child and owner.find_child(attendee.child_id) is None:
            raise ChildNotFoundError(str(attendee.child_id))

        existing = self._store.find_completed_waiver(event.id, template.id, owner.id, attendee.child_id)
        if existing is not None:
            # the owner already references this id
            waiver = replace(
                existing,
                file_key=key,
                file_name=file_name,
                uploaded_by=owner.id,
                child_id=attendee.child_id,
                uploaded_at=self._clock(),
            )
            self._store.save_waiver(waiver)
            return waiver, False

        waiver = Waiver(
            id=WaiverId.new(),
            file_key=key,
            file_name=file_name,
            type=WaiverType.COMPLETED,
            uploaded_by=owner.id,
            belongs_to=owner.id,
            uploaded_at=self._clock(),
            child_id=attendee.child_id,
            template_id=template.id,
            event_id=event.id,
        )
        self._store.save_waiver(waiver)
        locked_event, owner = link_waiver(locked_event, owner, attendee, waiver.id)
        self._store.save_roster(locked_event, owner)
        return waiver, True

    def _remove_upload(self, key: str) -> None:
        try:
            self._storage.delete(key)
        except StorageError:
            logger.warning("Could not remove unrecorded upload %s", key, exc_info=True)
