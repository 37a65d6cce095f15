"""Wiring of services to the concrete stores."""

from registrations.services.registration_service import RegistrationService
from registrations.services.waiver_service import WaiverService
from registrations.stores.django_store import DjangoRegistrationStore
from registrations.stores.interfaces import ObjectStorage
from registrations.stores.s3_storage import S3ObjectStorage


def get_object_storage() -> ObjectStorage:
    return S3ObjectStorage.from_settings()


def registration_service() -> RegistrationService:
    return RegistrationService(DjangoRegistrationStore(), get_object_storage())


def waiver_service() -> WaiverService:
    return WaiverService(DjangoRegistrationStore(), get_object_storage())
