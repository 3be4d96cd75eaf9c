import uuid
from django.db import models
from django.conf import settings


class Notification(models.Model):
    INSPECTION_SCHEDULED = "INSPECTION_SCHEDULED"
    INSPECTION_ACCEPTED = "INSPECTION_ACCEPTED"
    INSPECTION_COMPLETED = "INSPECTION_COMPLETED"
    INQUIRY_RECEIVED = "INQUIRY_RECEIVED"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    LISTING_SAVED = "LISTING_SAVED"
    VERIFICATION_APPROVED = "VERIFICATION_APPROVED"
    VERIFICATION_REJECTED = "VERIFICATION_REJECTED"
    NEW_JOB_AVAILABLE = "NEW_JOB_AVAILABLE"

    TYPE_CHOICES = (
        (INSPECTION_SCHEDULED, "Inspection scheduled"),
        (INSPECTION_ACCEPTED, "Inspection accepted"),
        (INSPECTION_COMPLETED, "Inspection completed"),
        (INQUIRY_RECEIVED, "Inquiry received"),
        (PAYMENT_RECEIVED, "Payment received"),
        (LISTING_SAVED, "Listing saved"),
        (VERIFICATION_APPROVED, "Verification approved"),
        (VERIFICATION_REJECTED, "Verification rejected"),
        (NEW_JOB_AVAILABLE, "New job available"),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="notifications", on_delete=models.CASCADE)
    type = models.CharField(max_length=40, choices=TYPE_CHOICES)
    title = models.CharField(max_length=255)
    message = models.TextField()

    # optional references
    inspection = models.ForeignKey("inspections.Inspection", null=True, blank=True, related_name="notifications", on_delete=models.SET_NULL)
    listing = models.ForeignKey("listings.Listing", null=True, blank=True, related_name="notifications", on_delete=models.SET_NULL)
    payment_id = models.CharField(max_length=64, null=True, blank=True)
    metadata = models.JSONField(null=True, blank=True)

    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "read"], name="notifications_user_read_idx"),
            models.Index(fields=["created_at"], name="notifications_created_idx"),
        ]

    def __str__(self):
        return f"{self.type} for {self.user_id}"
