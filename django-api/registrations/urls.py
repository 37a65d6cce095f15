from django.urls import path

from registrations.handlers import (
    ChildDetailView,
    CompletedWaiverListView,
    GuardianMeView,
    ParticipantRemoveView,
    RegistrationView,
    TemplateWaiverListView,
    WaiverSignView,
)

urlpatterns = [
    path(
        "events/<str:event_id>/registrations",
        RegistrationView.as_view(),
        name="event-registrations",
    ),
    path(
        "events/<str:event_id>/participants/remove",
        ParticipantRemoveView.as_view(),
        name="participant-remove",
    ),
    path("events/<str:event_id>/waivers", TemplateWaiverListView.as_view(), name="waiver-templates"),
    path(
        "events/<str:event_id>/waivers/completed",
        CompletedWaiverListView.as_view(),
        name="waiver-completed",
    ),
    path(
        "events/<str:event_id>/waivers/<str:template_id>/sign",
        WaiverSignView.as_view(),
        name="waiver-sign",
    ),
    path("guardians/me", GuardianMeView.as_view(), name="guardian-me"),
    path("guardians/me/children/<str:child_id>", ChildDetailView.as_view(), name="child-detail"),
]
