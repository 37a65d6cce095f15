from registrations.services.registration_service import RegistrationService
from registrations.services.waiver_service import SigningResult, WaiverService

__all__ = ["RegistrationService", "SigningResult", "WaiverService"]
