from django.contrib import admin
from .models import UploadedFile


@admin.register(UploadedFile)
class UploadedFileAdmin(admin.ModelAdmin):
    list_display = ["original_name", "uploaded_by", "listing", "size", "created_at"]
    list_filter = ["type", "mime_type"]
    search_fields = ["original_name", "public_id", "uploaded_by__email"]
    readonly_fields = ["id", "public_id", "url", "created_at"]
