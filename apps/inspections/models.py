import uuid
from django.db import models
from django.conf import settings

from apps.listings.models import Listing, Company


class Inspection(models.Model):
    VIRTUAL = "VIRTUAL"
    PHYSICAL = "PHYSICAL"
    TYPE_CHOICES = (
        (VIRTUAL, "Virtual"),
        (PHYSICAL, "Physical"),
    )

    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    STATUS_CHOICES = (
        (SCHEDULED, "Scheduled"),
        (IN_PROGRESS, "In progress"),
        (COMPLETED, "Completed"),
        (CANCELLED, "Cancelled"),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=SCHEDULED)
    scheduled_at = models.DateTimeField()
    duration = models.PositiveIntegerField()  # minutes
    fee = models.PositiveIntegerField()  # whole Naira
    paid = models.BooleanField(default=False)

    listing = models.ForeignKey(Listing, related_name="inspections", on_delete=models.CASCADE)
    company = models.ForeignKey(Company, null=True, blank=True, related_name="inspections", on_delete=models.SET_NULL)
    # unassigned until an inspector accepts the job
    inspector = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="assigned_inspections", on_delete=models.SET_NULL
    )

    meeting_url = models.URLField(max_length=500, null=True, blank=True)
    recording_url = models.URLField(max_length=1000, null=True, blank=True)
    completion_notes = models.TextField(null=True, blank=True)

    # timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "inspections"
        ordering = ["-scheduled_at"]
        indexes = [
            models.Index(fields=["inspector", "status"], name="inspections_inspector_idx"),
            models.Index(fields=["status", "scheduled_at"], name="inspections_status_sched_idx"),
        ]

    def __str__(self):
        return f"{self.type} inspection of {self.listing_id} at {self.scheduled_at:%Y-%m-%d %H:%M}"


class InspectionClient(models.Model):
    """A client registered for an inspection; created with it and never edited"""

    inspection = models.ForeignKey(Inspection, related_name="clients", on_delete=models.CASCADE)
    client = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="inspection_registrations", on_delete=models.CASCADE)
    interested = models.BooleanField(default=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "inspection_clients"
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["inspection", "client"], name="unique_inspection_client"),
        ]


class Earning(models.Model):
    INSPECTION_FEE = "INSPECTION_FEE"
    TYPE_CHOICES = ((INSPECTION_FEE, "Inspection fee"),)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    type = models.CharField(max_length=30, choices=TYPE_CHOICES, default=INSPECTION_FEE)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="NGN")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="earnings", on_delete=models.CASCADE)
    company = models.ForeignKey(Company, null=True, blank=True, related_name="earnings", on_delete=models.SET_NULL)
    inspection = models.ForeignKey(Inspection, related_name="earnings", on_delete=models.CASCADE)
    paid = models.BooleanField(default=False)  # settled during the payout cycle
    platform_cut = models.DecimalField(max_digits=4, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "earnings"
        ordering = ["-created_at"]
