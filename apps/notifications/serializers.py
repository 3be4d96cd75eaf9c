from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    userId = serializers.UUIDField(source="user_id", read_only=True)
    inspectionId = serializers.UUIDField(source="inspection_id", read_only=True, allow_null=True)
    listingId = serializers.UUIDField(source="listing_id", read_only=True, allow_null=True)
    paymentId = serializers.CharField(source="payment_id", read_only=True, allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Notification
        fields = [
            "id",
            "userId",
            "type",
            "title",
            "message",
            "inspectionId",
            "listingId",
            "paymentId",
            "metadata",
            "read",
            "createdAt",
        ]
        read_only_fields = fields


class CreateNotificationSerializer(serializers.Serializer):
    """Admin-issued notification"""

    userId = serializers.UUIDField(required=False)
    type = serializers.ChoiceField(choices=Notification.TYPE_CHOICES, required=False)
    title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    message = serializers.CharField(required=False, allow_blank=True)
    inspectionId = serializers.UUIDField(required=False, allow_null=True)
    listingId = serializers.UUIDField(required=False, allow_null=True)
    paymentId = serializers.CharField(max_length=64, required=False, allow_null=True)
    metadata = serializers.JSONField(required=False, allow_null=True)

    def validate(self, attrs):
        if not all(attrs.get(field) for field in ["userId", "type", "title", "message"]):
            raise serializers.ValidationError("Missing required fields")
        return attrs
