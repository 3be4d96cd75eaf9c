from .live import LiveConnectionRegistry, InProcessConnectionRegistry, get_live_registry
from .email_service import EmailService, get_email_service
from .notification_service import (
    NotificationService,
    NotificationResult,
    BulkNotificationResult,
    NotifyError,
    get_notification_service,
)
