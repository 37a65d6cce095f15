"""Resolution of the calling guardian from the upstream identity provider.

The gateway in front of this API authenticates the caller and forwards
their stable subject id in a header. This module trusts that id and only
maps it to a Guardian.
"""

from dataclasses import dataclass

from django.conf import settings
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import BasePermission
from rest_framework.request import Request

from registrations.domain import Guardian
from registrations.stores.django_store import DjangoRegistrationStore


@dataclass(frozen=True)
class AuthenticatedGuardian:
    guardian: Guardian
    is_authenticated: bool = True


class GuardianHeaderAuthentication(BaseAuthentication):
    def authenticate(self, request: Request):
        header = "HTTP_" + settings.REGISTRATION_AUTH_HEADER.upper().replace("-", "_")
        subject = request.META.get(header, "").strip()
        if not subject:
            return None
        guardian = DjangoRegistrationStore().get_guardian_by_auth_id(subject)
        if guardian is None:
            raise AuthenticationFailed("User not found")
        return AuthenticatedGuardian(guardian), None

    def authenticate_header(self, request: Request) -> str:
        return settings.REGISTRATION_AUTH_HEADER


class IsAdminGuardian(BasePermission):
    message = "Admin access required"

    def has_permission(self, request: Request, view) -> bool:
        user = request.user
        return isinstance(user, AuthenticatedGuardian) and user.guardian.is_admin
