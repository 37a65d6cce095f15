"""Serializers for request bodies and domain-model responses."""

import base64
import binascii

from rest_framework import serializers


class AttendeesSerializer(serializers.Serializer):
    attendees = serializers.ListField(child=serializers.CharField(), allow_empty=False)


class ParticipantRemovalSerializer(serializers.Serializer):
    participantId = serializers.CharField()
    isChild = serializers.BooleanField(default=False)


class SignatureField(serializers.Field):
    """A PNG as raw base64 or as a ``data:image/png;base64,`` URL."""

    default_error_messages = {"invalid": "Signature must be a base64-encoded image."}

    def to_internal_value(self, data) -> bytes:
        if not isinstance(data, str) or not data:
            self.fail("invalid")
        payload = data.partition(",")[2] if data.startswith("data:") else data
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            self.fail("invalid")

    def to_representation(self, value) -> str:
        return base64.b64encode(value).decode("ascii")


class SignWaiverSerializer(serializers.Serializer):
    signature = SignatureField()
    participants = serializers.ListField(child=serializers.CharField(), allow_empty=False)


class RosterChangeSerializer(serializers.Serializer):
    """Serializer for a RosterChange; field names vary by direction."""

    def __init__(self, instance, users_key: str, children_key: str, **kwargs) -> None:
        super().__init__(instance, **kwargs)
        self.users_key = users_key
        self.children_key = children_key

    def to_representation(self, change) -> dict:
        return {
            self.users_key: [str(i) for i in change.user_ids],
            self.children_key: [str(i) for i in change.child_ids],
        }


class WaiverSerializer(serializers.Serializer):
    """Serializer for the Waiver domain model."""

    id = serializers.SerializerMethodField()
    fileKey = serializers.CharField(source="file_key")
    fileName = serializers.CharField(source="file_name")
    type = serializers.SerializerMethodField()
    isForChild = serializers.BooleanField(source="is_for_child")
    childId = serializers.SerializerMethodField()
    templateId = serializers.SerializerMethodField()
    eventId = serializers.SerializerMethodField()
    uploadedAt = serializers.DateTimeField(source="uploaded_at")

    def get_id(self, waiver) -> str:
        return str(waiver.id)

    def get_type(self, waiver) -> str:
        return waiver.type.value

    def get_childId(self, waiver) -> str | None:
        return str(waiver.child_id) if waiver.child_id else None

    def get_templateId(self, waiver) -> str | None:
        return str(waiver.template_id) if waiver.template_id else None

    def get_eventId(self, waiver) -> str | None:
        return str(waiver.event_id) if waiver.event_id else None


class SigningResultSerializer(serializers.Serializer):
    def to_representation(self, result) -> dict:
        return {
            "signed": [
                {"participantId": s.participant_id, "waiverId": str(s.waiver_id), "url": s.url}
                for s in result.signed
            ],
            "failures": [
                {
                    "participantId": f.participant_id,
                    "code": f.code.value,
                    "message": f.message,
                    "retryable": f.retryable,
                }
                for f in result.failures
            ],
        }
