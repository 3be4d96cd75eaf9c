from rest_framework import serializers
from .models import UploadedFile


class UploadedFileSerializer(serializers.ModelSerializer):
    originalName = serializers.CharField(source="original_name", read_only=True)
    publicId = serializers.CharField(source="public_id", read_only=True)
    mimeType = serializers.CharField(source="mime_type", read_only=True)
    thumbnailUrl = serializers.SerializerMethodField()
    propertyId = serializers.UUIDField(source="listing_id", read_only=True, allow_null=True)
    uploadedBy = serializers.UUIDField(source="uploaded_by_id", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = UploadedFile
        fields = [
            "id",
            "filename",
            "originalName",
            "url",
            "thumbnailUrl",
            "publicId",
            "size",
            "mimeType",
            "type",
            "propertyId",
            "uploadedBy",
            "createdAt",
        ]
        read_only_fields = fields

    def get_thumbnailUrl(self, obj):
        return obj.thumbnail_url
