"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from django.conf import settings
from django.core.cache import cache
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from registrations.domain import EventId
from registrations.domain.errors import DomainError, ErrorCode, InvalidIdError
from registrations.handlers.authentication import IsAdminGuardian
from registrations.handlers.serializers import (
    AttendeesSerializer,
    ParticipantRemovalSerializer,
    RosterChangeSerializer,
    SigningResultSerializer,
    SignWaiverSerializer,
    WaiverSerializer,
)
from registrations.services import factory
from registrations.services.registration_service import parse_id
from registrations.signals import template_cache_key

STATUS_BY_CODE = {
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ATTENDEES: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.GUARDIAN_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CHILD_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.WAIVER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ATTENDEE_NOT_ALLOWED: status.HTTP_403_FORBIDDEN,
    ErrorCode.ADMIN_REQUIRED: status.HTTP_403_FORBIDDEN,
    ErrorCode.DEADLINE_PASSED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_ENDED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CAPACITY_EXCEEDED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.ANCHOR_NOT_FOUND: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.PDF_SCAN_FAILED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.COMPOSITION_FAILED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.STORAGE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.DATASTORE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(error: DomainError) -> Response:
    body = {"error": {"code": error.code.value, "message": error.message, "retryable": error.retryable}}
    return Response(body, status=STATUS_BY_CODE.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR))


class DomainAPIView(APIView):
    """APIView that renders DomainError as a coded error response."""

    permission_classes = [IsAuthenticated]

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            return error_response(exc)
        return super().handle_exception(exc)

    def guardian_id(self, request: Request) -> str:
        return str(request.user.guardian.id)


class RegistrationView(DomainAPIView):
    """Handler for PUT/DELETE /api/events/{event_id}/registrations"""

    def put(self, request: Request, event_id: str) -> Response:
        serializer = AttendeesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        change = factory.registration_service().register_attendees(
            event_id, self.guardian_id(request), serializer.validated_data["attendees"]
        )
        body = RosterChangeSerializer(change, "registeredUsers", "registeredChildren").data
        return Response({"message": "Successfully registered", **body})

    def delete(self, request: Request, event_id: str) -> Response:
        serializer = AttendeesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        change = factory.registration_service().unregister_attendees(
            event_id, self.guardian_id(request), serializer.validated_data["attendees"]
        )
        body = RosterChangeSerializer(change, "removedUsers", "removedChildren").data
        return Response({"message": "Successfully unregistered", **body})


class ParticipantRemoveView(DomainAPIView):
    """Handler for POST /api/events/{event_id}/participants/remove"""

    permission_classes = [IsAuthenticated, IsAdminGuardian]

    def post(self, request: Request, event_id: str) -> Response:
        serializer = ParticipantRemovalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        is_child = serializer.validated_data["isChild"]
        factory.registration_service().remove_participant(
            event_id, serializer.validated_data["participantId"], is_child
        )
        return Response({"message": f"{'Child' if is_child else 'User'} removed successfully"})


class TemplateWaiverListView(DomainAPIView):
    """Handler for GET /api/events/{event_id}/waivers"""

    permission_classes = [AllowAny]

    def get(self, request: Request, event_id: str) -> Response:
        key = template_cache_key(parse_id(EventId, event_id, "event"))
        data = cache.get(key)
        if data is None:
            waivers = factory.waiver_service().list_templates(event_id)
            data = WaiverSerializer(waivers, many=True).data
            cache.set(key, data, timeout=settings.WAIVER_CACHE_TIMEOUT)
        return Response({"waivers": data})


class WaiverSignView(DomainAPIView):
    """Handler for POST /api/events/{event_id}/waivers/{template_id}/sign"""

    def post(self, request: Request, event_id: str, template_id: str) -> Response:
        serializer = SignWaiverSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = factory.waiver_service().sign_waiver(
            event_id,
            template_id,
            self.guardian_id(request),
            serializer.validated_data["signature"],
            serializer.validated_data["participants"],
        )
        code = status.HTTP_200_OK if result.complete else status.HTTP_207_MULTI_STATUS
        return Response(SigningResultSerializer(result).data, status=code)


class CompletedWaiverListView(DomainAPIView):
    """Handler for GET /api/events/{event_id}/waivers/completed"""

    permission_classes = [IsAuthenticated, IsAdminGuardian]

    def get(self, request: Request, event_id: str) -> Response:
        user_id = request.query_params.get("userId")
        if not user_id:
            raise InvalidIdError("user")
        waivers = factory.waiver_service().list_completed(event_id, user_id, request.query_params.get("childId"))
        return Response(WaiverSerializer(waivers, many=True).data)


class ChildDetailView(DomainAPIView):
    """Handler for DELETE /api/guardians/me/children/{child_id}"""

    def delete(self, request: Request, child_id: str) -> Response:
        factory.registration_service().delete_child(self.guardian_id(request), child_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class GuardianMeView(DomainAPIView):
    """Handler for DELETE /api/guardians/me"""

    def delete(self, request: Request) -> Response:
        factory.registration_service().delete_guardian(self.guardian_id(request))
        return Response(status=status.HTTP_204_NO_CONTENT)
