from registrations.stores.interfaces import ObjectStorage, RegistrationStore

__all__ = ["ObjectStorage", "RegistrationStore"]
