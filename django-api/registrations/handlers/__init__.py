from registrations.handlers.views import (
    ChildDetailView,
    CompletedWaiverListView,
    GuardianMeView,
    ParticipantRemoveView,
    RegistrationView,
    TemplateWaiverListView,
    WaiverSignView,
)

__all__ = [
    "ChildDetailView",
    "CompletedWaiverListView",
    "GuardianMeView",
    "ParticipantRemoveView",
    "RegistrationView",
    "TemplateWaiverListView",
    "WaiverSignView",
]
