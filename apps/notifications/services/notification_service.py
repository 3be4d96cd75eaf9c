import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from django.db import transaction

from apps.notifications.models import Notification
from apps.notifications.serializers import NotificationSerializer
from .email_service import EmailService, get_email_service
from .live import LiveConnectionRegistry, get_live_registry

logger = logging.getLogger(__name__)


@dataclass
class NotifyError:
    stage: str  # "persist"
    message: str

    def __str__(self):
        return f"{self.stage}: {self.message}"


@dataclass
class NotificationResult:
    notification: Optional[Notification] = None
    pushed: bool = False
    emailed: bool = False
    error: Optional[NotifyError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.notification is not None


@dataclass
class BulkNotificationResult:
    notifications: list = field(default_factory=list)
    delivered: int = 0
    error: Optional[NotifyError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def count(self) -> int:
        return len(self.notifications)


class NotificationService:
    """
    Persists in-app notifications and pushes them to connected users

    The database row is the durable record. Pushes and emails are attempted
    once, after the row exists, and their failure never undoes it. Nothing
    here raises: callers get a result object and decide what to log.
    """

    def __init__(self, registry: LiveConnectionRegistry = None, email_service: EmailService = None):
        self.registry = registry if registry is not None else get_live_registry()
        self.email_service = email_service if email_service is not None else get_email_service()

    def create_notification(
        self,
        user_id,
        type: str,
        title: str,
        message: str,
        inspection_id=None,
        listing_id=None,
        payment_id=None,
        metadata=None,
    ) -> NotificationResult:
        try:
            # savepoint: a failed insert must not poison the caller's transaction
            with transaction.atomic():
                notification = Notification.objects.create(
                    user_id=user_id,
                    type=type,
                    title=title,
                    message=message,
                    inspection_id=inspection_id,
                    listing_id=listing_id,
                    payment_id=payment_id,
                    metadata=metadata,
                )
        except Exception as e:
            logger.warning(f"Failed to persist {type} notification for user {user_id}: {str(e)}")
            return NotificationResult(error=NotifyError("persist", str(e)))

        pushed = self._push(user_id, NotificationSerializer(notification).data)
        return NotificationResult(notification=notification, pushed=pushed)

    def create_bulk_notifications(self, user_ids: Iterable, payload: dict) -> BulkNotificationResult:
        """
        Persist one notification per recipient in a single batch, then push

        payload holds the create_notification keyword arguments minus user_id.
        """
        user_ids = list(user_ids)
        if not user_ids:
            return BulkNotificationResult()

        rows = [
            Notification(
                user_id=user_id,
                type=payload["type"],
                title=payload["title"],
                message=payload["message"],
                inspection_id=payload.get("inspection_id"),
                listing_id=payload.get("listing_id"),
                payment_id=payload.get("payment_id"),
                metadata=payload.get("metadata"),
            )
            for user_id in user_ids
        ]

        try:
            with transaction.atomic():
                notifications = Notification.objects.bulk_create(rows)
        except Exception as e:
            logger.warning(f"Failed to persist {len(rows)} {payload['type']} notifications: {str(e)}")
            return BulkNotificationResult(error=NotifyError("persist", str(e)))

        delivered = 0
        for notification in notifications:
            if self._push(notification.user_id, NotificationSerializer(notification).data):
                delivered += 1

        logger.info(f"Created {len(notifications)} {payload['type']} notifications, pushed live to {delivered}")
        return BulkNotificationResult(notifications=notifications, delivered=delivered)

    def _push(self, user_id, data: dict) -> bool:
        try:
            return bool(self.registry.send(user_id, data))
        except Exception as e:
            logger.warning(f"Live push to user {user_id} failed: {str(e)}")
            return False

    def _email(self, send, *args) -> bool:
        try:
            return send(*args)
        except Exception as e:
            logger.warning(f"Email delivery failed: {str(e)}")
            return False

    # --- inspection lifecycle ---

    def notify_inspection_scheduled(self, client, inspection) -> NotificationResult:
        result = self.create_notification(
            user_id=client.id,
            type=Notification.INSPECTION_SCHEDULED,
            title="Inspection Scheduled",
            message=f'Your inspection for "{inspection.listing.title}" has been scheduled successfully.',
            inspection_id=inspection.id,
        )
        result.emailed = self._email(self.email_service.send_inspection_scheduled, client, inspection)
        return result

    def notify_new_inspection_request(self, agent, inspection) -> NotificationResult:
        listing = inspection.listing
        result = self.create_notification(
            user_id=agent.id,
            type=Notification.INSPECTION_SCHEDULED,
            title="New Inspection Request",
            message=f'A client has scheduled an inspection for your property "{listing.title}".',
            inspection_id=inspection.id,
            listing_id=listing.id,
        )
        result.emailed = self._email(self.email_service.send_inspection_request, agent, inspection)
        return result

    def notify_new_job_available(self, inspector_ids: Iterable, inspection) -> BulkNotificationResult:
        listing = inspection.listing
        return self.create_bulk_notifications(
            inspector_ids,
            {
                "type": Notification.NEW_JOB_AVAILABLE,
                "title": "New Inspection Job Available",
                "message": (
                    f'New {inspection.type.lower()} inspection available for "{listing.title}" '
                    f"on {inspection.scheduled_at:%d/%m/%Y}."
                ),
                "inspection_id": inspection.id,
                "listing_id": listing.id,
            },
        )

    def notify_inspection_accepted(self, user, inspection, email: bool = True) -> NotificationResult:
        result = self.create_notification(
            user_id=user.id,
            type=Notification.INSPECTION_ACCEPTED,
            title="Inspector Assigned",
            message=f'{inspection.inspector.name} has accepted your inspection request for "{inspection.listing.title}".',
            inspection_id=inspection.id,
        )
        if email:
            result.emailed = self._email(self.email_service.send_inspector_assigned, user, inspection)
        return result

    def notify_inspection_completed(self, user, inspection, email: bool = True) -> NotificationResult:
        result = self.create_notification(
            user_id=user.id,
            type=Notification.INSPECTION_COMPLETED,
            title="Inspection Completed",
            message=f'The inspection for "{inspection.listing.title}" has been completed.',
            inspection_id=inspection.id,
        )
        if email:
            result.emailed = self._email(self.email_service.send_inspection_completed, user, inspection)
        return result

    # --- listings ---

    def notify_listing_saved(self, agent, listing, client) -> NotificationResult:
        return self.create_notification(
            user_id=agent.id,
            type=Notification.LISTING_SAVED,
            title="Property Saved",
            message=f'{client.name} saved your property "{listing.title}".',
            listing_id=listing.id,
        )

    # --- account verification ---

    def notify_verification_approved(self, user) -> NotificationResult:
        return self.create_notification(
            user_id=user.id,
            type=Notification.VERIFICATION_APPROVED,
            title="Verification Approved",
            message="Your account verification has been approved. You can now access all features.",
        )

    def notify_verification_rejected(self, user, reason: str = "") -> NotificationResult:
        if reason:
            message = f"Your account verification was rejected: {reason}"
        else:
            message = "Your account verification was rejected. Please contact support."
        return self.create_notification(
            user_id=user.id,
            type=Notification.VERIFICATION_REJECTED,
            title="Verification Rejected",
            message=message,
        )


def get_notification_service() -> NotificationService:
    return NotificationService()
