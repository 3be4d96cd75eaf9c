import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("inspections", "0001_initial"),
        ("listings", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("INSPECTION_SCHEDULED", "Inspection scheduled"),
                            ("INSPECTION_ACCEPTED", "Inspection accepted"),
                            ("INSPECTION_COMPLETED", "Inspection completed"),
                            ("INQUIRY_RECEIVED", "Inquiry received"),
                            ("PAYMENT_RECEIVED", "Payment received"),
                            ("LISTING_SAVED", "Listing saved"),
                            ("VERIFICATION_APPROVED", "Verification approved"),
                            ("VERIFICATION_REJECTED", "Verification rejected"),
                            ("NEW_JOB_AVAILABLE", "New job available"),
                        ],
                        max_length=40,
                    ),
                ),
                ("title", models.CharField(max_length=255)),
                ("message", models.TextField()),
                ("payment_id", models.CharField(blank=True, max_length=64, null=True)),
                ("metadata", models.JSONField(blank=True, null=True)),
                ("read", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "inspection",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="notifications",
                        to="inspections.inspection",
                    ),
                ),
                (
                    "listing",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="notifications",
                        to="listings.listing",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "notifications",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "read"], name="notifications_user_read_idx"),
                    models.Index(fields=["created_at"], name="notifications_created_idx"),
                ],
            },
        ),
    ]
