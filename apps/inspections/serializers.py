from datetime import timezone as dt_timezone

from django.utils import timezone
from django.utils.dateparse import parse_datetime
from rest_framework import serializers

from apps.authentication.serializers import UserSummarySerializer
from apps.listings.serializers import ListingSerializer
from .models import Inspection, InspectionClient, Earning


class InspectionClientSerializer(serializers.ModelSerializer):
    clientId = serializers.UUIDField(source="client_id", read_only=True)
    client = UserSummarySerializer(read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = InspectionClient
        fields = ["id", "clientId", "client", "interested", "notes", "createdAt"]
        read_only_fields = fields


class InspectionSerializer(serializers.ModelSerializer):
    """Inspection with its listing (and agent), inspector and registered clients"""

    scheduledAt = serializers.DateTimeField(source="scheduled_at", read_only=True)
    meetingUrl = serializers.URLField(source="meeting_url", read_only=True, allow_null=True)
    recordingUrl = serializers.URLField(source="recording_url", read_only=True, allow_null=True)
    completionNotes = serializers.CharField(source="completion_notes", read_only=True, allow_null=True)
    listingId = serializers.UUIDField(source="listing_id", read_only=True)
    companyId = serializers.UUIDField(source="company_id", read_only=True, allow_null=True)
    inspectorId = serializers.UUIDField(source="inspector_id", read_only=True, allow_null=True)
    listing = ListingSerializer(read_only=True)
    inspector = UserSummarySerializer(read_only=True, allow_null=True)
    clients = InspectionClientSerializer(many=True, read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Inspection
        fields = [
            "id",
            "type",
            "status",
            "scheduledAt",
            "duration",
            "fee",
            "paid",
            "meetingUrl",
            "recordingUrl",
            "completionNotes",
            "listingId",
            "companyId",
            "inspectorId",
            "listing",
            "inspector",
            "clients",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class EarningSerializer(serializers.ModelSerializer):
    userId = serializers.UUIDField(source="user_id", read_only=True)
    companyId = serializers.UUIDField(source="company_id", read_only=True, allow_null=True)
    inspectionId = serializers.UUIDField(source="inspection_id", read_only=True)
    platformCut = serializers.DecimalField(source="platform_cut", max_digits=4, decimal_places=2, read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Earning
        fields = ["id", "type", "amount", "currency", "userId", "companyId", "inspectionId", "paid", "platformCut", "createdAt"]
        read_only_fields = fields


class CreateInspectionSerializer(serializers.Serializer):
    """
    Schedule request from a client

    Checks run in a fixed order (required fields, type, future date) so the
    first failing rule decides the error message.
    """

    propertyId = serializers.CharField(required=False, allow_blank=True)
    type = serializers.CharField(required=False, allow_blank=True)
    scheduledAt = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")

    def validate(self, attrs):
        if not all(attrs.get(field) for field in ["propertyId", "type", "scheduledAt"]):
            raise serializers.ValidationError("Property ID, type, and scheduled time are required")

        if attrs["type"] not in (Inspection.VIRTUAL, Inspection.PHYSICAL):
            raise serializers.ValidationError("Invalid inspection type")

        try:
            scheduled_at = parse_datetime(attrs["scheduledAt"])
        except ValueError:
            scheduled_at = None
        if scheduled_at is None:
            raise serializers.ValidationError("Invalid scheduled time")
        if timezone.is_naive(scheduled_at):
            scheduled_at = timezone.make_aware(scheduled_at, dt_timezone.utc)

        if scheduled_at <= timezone.now():
            raise serializers.ValidationError("Inspection must be scheduled for a future date")

        attrs["scheduledAt"] = scheduled_at
        attrs["notes"] = attrs.get("notes") or ""
        return attrs


class CompleteInspectionSerializer(serializers.Serializer):
    recordingUrl = serializers.URLField(max_length=1000, required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
