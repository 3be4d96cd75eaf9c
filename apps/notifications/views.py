import json
import logging
import queue
import uuid

from django.conf import settings
from django.http import StreamingHttpResponse
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.renderers import BaseRenderer, JSONRenderer
from rest_framework.response import Response

from apps.core.exceptions import AuthorizationDenied, ResourceNotFound
from apps.core.pagination import StandardResultsSetPagination
from apps.core.permissions import IsPlatformAdmin
from .models import Notification
from .serializers import NotificationSerializer, CreateNotificationSerializer
from .services import get_live_registry, get_notification_service
from .services.live import format_event

logger = logging.getLogger(__name__)


class EventStreamRenderer(BaseRenderer):
    """Lets text/event-stream clients pass content negotiation; errors still render as JSON text"""

    media_type = "text/event-stream"
    format = "event-stream"
    charset = "utf-8"

    def render(self, data, accepted_media_type=None, renderer_context=None):
        if isinstance(data, (str, bytes)):
            return data
        return json.dumps(data)


def event_stream(registry, user_id, heartbeat_seconds: int):
    """
    Yield SSE frames for one connected user until the client goes away

    The channel is released when the generator is closed.
    """
    channel = registry.connect(user_id)
    try:
        yield format_event("connected", {"message": "Real-time notifications connected"})
        while True:
            try:
                yield channel.get(timeout=heartbeat_seconds)
            except queue.Empty:
                yield format_event("heartbeat")
    finally:
        registry.disconnect(user_id, channel)


class NotificationViewSet(viewsets.GenericViewSet):
    """
    A user's in-app notifications

    - list with unreadOnly / limit / offset and the unread count
    - mark one read or unread, or all read
    - platform admins may issue a notification to any user
    - /stream delivers new notifications live over Server-Sent Events
    """

    serializer_class = NotificationSerializer
    pagination_class = StandardResultsSetPagination
    lookup_value_regex = "[0-9a-f-]{36}"

    failure_messages = {
        "list": "Failed to fetch notifications",
        "create": "Failed to create notification",
        "read": "Failed to update notification",
        "mark_all_read": "Failed to mark notifications as read",
        "stream": "Failed to open notification stream",
    }

    def get_permissions(self):
        if self.action == "create":
            return [IsPlatformAdmin()]
        return [IsAuthenticated()]

    def get_queryset(self):
        return Notification.objects.filter(user=self.request.user).order_by("-created_at")

    def list(self, request):
        queryset = self.get_queryset()
        if request.query_params.get("unreadOnly") == "true":
            queryset = queryset.filter(read=False)

        page = self.paginate_queryset(queryset)
        unread_count = self.get_queryset().filter(read=False).count()

        return Response(
            {
                "success": True,
                "notifications": NotificationSerializer(page, many=True).data,
                "pagination": self.paginator.get_pagination_meta(),
                "unreadCount": unread_count,
            }
        )

    def create(self, request):
        serializer = CreateNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = get_notification_service().create_notification(
            user_id=data["userId"],
            type=data["type"],
            title=data["title"],
            message=data["message"],
            inspection_id=data.get("inspectionId"),
            listing_id=data.get("listingId"),
            payment_id=data.get("paymentId"),
            metadata=data.get("metadata"),
        )
        if not result.ok:
            raise RuntimeError(f"Notification not persisted: {result.error}")

        logger.info(f"Admin {request.user.email} issued {data['type']} notification to {data['userId']}")
        return Response(
            {"success": True, "notification": NotificationSerializer(result.notification).data},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["put", "delete"])
    def read(self, request, pk=None):
        """PUT marks the notification read, DELETE marks it unread"""
        try:
            notification = Notification.objects.filter(pk=uuid.UUID(pk)).first()
        except ValueError:
            notification = None
        if notification is None:
            raise ResourceNotFound("Notification not found")
        if notification.user_id != request.user.id:
            raise AuthorizationDenied("Unauthorized")

        notification.read = request.method == "PUT"
        notification.save(update_fields=["read"])

        return Response({"success": True, "notification": NotificationSerializer(notification).data})

    @action(detail=False, methods=["put"], url_path="mark-all-read")
    def mark_all_read(self, request):
        updated = self.get_queryset().filter(read=False).update(read=True)

        logger.info(f"Marked {updated} notifications read for {request.user.email}")
        return Response(
            {
                "success": True,
                "message": f"Marked {updated} notifications as read",
                "updatedCount": updated,
            }
        )

    @action(detail=False, methods=["get"], renderer_classes=[EventStreamRenderer, JSONRenderer])
    def stream(self, request):
        response = StreamingHttpResponse(
            event_stream(get_live_registry(), request.user.id, settings.NOTIFICATIONS["HEARTBEAT_SECONDS"]),
            content_type="text/event-stream",
        )
        response["Cache-Control"] = "no-cache"
        response["X-Accel-Buffering"] = "no"
        return response
