import uuid
from django.conf import settings
from django.db import models

from apps.listings.models import Listing


class UploadedFile(models.Model):
    IMAGE = "IMAGE"
    TYPE_CHOICES = ((IMAGE, "Image"),)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    filename = models.CharField(max_length=255)
    original_name = models.CharField(max_length=255)
    url = models.URLField(max_length=1000)
    public_id = models.CharField(max_length=500)  # Cloudinary public_id
    size = models.PositiveIntegerField()  # bytes
    mime_type = models.CharField(max_length=100)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=IMAGE)

    uploaded_by = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="uploads", on_delete=models.CASCADE)
    listing = models.ForeignKey(Listing, null=True, blank=True, related_name="uploads", on_delete=models.SET_NULL)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "uploaded_files"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["uploaded_by"], name="uploads_user_idx"),
            models.Index(fields=["listing"], name="uploads_listing_idx"),
        ]

    def __str__(self):
        return f"{self.original_name} ({self.public_id})"

    @property
    def thumbnail_url(self):
        """Get 200px thumbnail URL"""
        from .services.cloudinary_service import CloudinaryService

        return CloudinaryService().get_thumbnail_url(self.public_id, width=200)
