import logging
import uuid

from django.conf import settings
from django.db import transaction
from django_ratelimit.decorators import ratelimit
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.authentication.models import User
from apps.core.exceptions import AuthorizationDenied, ResourceNotFound, ValidationFailed
from apps.listings.models import Listing
from .models import UploadedFile
from .serializers import UploadedFileSerializer
from .services.cloudinary_service import CloudinaryService

logger = logging.getLogger(__name__)

cloudinary_service = CloudinaryService()

UPLOADER_ROLES = (User.AGENT, User.COMPANY_ADMIN, User.PLATFORM_ADMIN)


def _resolve_listing(property_id, user, for_write: bool):
    try:
        pk = uuid.UUID(str(property_id))
    except ValueError:
        raise ResourceNotFound("Property not found")

    listing = Listing.objects.filter(pk=pk).first()
    if listing is None:
        raise ResourceNotFound("Property not found")
    if for_write and listing.agent_id != user.id and user.role != User.PLATFORM_ADMIN:
        raise AuthorizationDenied("You can only upload images for your own listings")
    return listing


def _validate_files(files):
    if not files:
        raise ValidationFailed("No images provided")

    if len(files) > settings.UPLOAD_MAX_FILES:
        raise ValidationFailed(f"Maximum {settings.UPLOAD_MAX_FILES} images allowed per upload")

    max_mb = settings.UPLOAD_MAX_FILE_SIZE // (1024 * 1024)
    for file in files:
        if file.content_type not in settings.UPLOAD_ALLOWED_TYPES:
            raise ValidationFailed(f"Invalid file type for {file.name}. Only JPEG, PNG and WebP images are allowed")
        if file.size > settings.UPLOAD_MAX_FILE_SIZE:
            raise ValidationFailed(f"{file.name} exceeds the {max_mb}MB size limit")


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
@ratelimit(key="user", rate="20/m", method="POST")
def images(request):
    """
    Listing images stored on Cloudinary
    Uploads are rate limited to 20 requests per minute per user

    POST /api/upload/images  (multipart: images[], propertyId optional)
    GET  /api/upload/images?propertyId=<uuid>&limit=50
    """
    if request.method == "GET":
        return _list_images(request)

    if getattr(request, "limited", False):
        return Response(
            {"success": False, "error": "Too many upload requests. Please try again later."},
            status=status.HTTP_429_TOO_MANY_REQUESTS,
        )

    return _upload_images(request)


def _upload_images(request):
    user = request.user
    if user.role not in UPLOADER_ROLES:
        raise AuthorizationDenied("Only agents can upload property images")

    files = request.FILES.getlist("images")
    _validate_files(files)

    listing = None
    property_id = request.data.get("propertyId")
    if property_id:
        listing = _resolve_listing(property_id, user, for_write=True)

    prefix = f"property-{listing.id}" if listing else f"user-{user.id}"
    rows = []
    try:
        for file in files:
            stored = cloudinary_service.upload_image(file, cloudinary_service.build_public_id(prefix))
            extension = stored["format"] or file.name.rsplit(".", 1)[-1].lower()
            rows.append(
                UploadedFile(
                    filename=f"{stored['public_id'].rsplit('/', 1)[-1]}.{extension}",
                    original_name=file.name,
                    url=stored["url"],
                    public_id=stored["public_id"],
                    size=stored["bytes"] or file.size,
                    mime_type=file.content_type,
                    uploaded_by=user,
                    listing=listing,
                )
            )

        with transaction.atomic():
            UploadedFile.objects.bulk_create(rows)

    except Exception as e:
        logger.error(f"Image upload by {user.email} failed after {len(rows)} of {len(files)} files: {str(e)}")
        # do not leave orphaned files behind
        for row in rows:
            cloudinary_service.delete_image(row.public_id)
        return Response({"success": False, "error": "Failed to upload images"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(f"{len(rows)} images uploaded by {user.email}" + (f" for listing {listing.id}" if listing else ""))

    return Response(
        {
            "success": True,
            "message": f"{len(rows)} image(s) uploaded successfully",
            "images": UploadedFileSerializer(rows, many=True).data,
            "urls": [row.url for row in rows],
        },
        status=status.HTTP_201_CREATED,
    )


def _list_images(request):
    params = request.query_params
    try:
        limit = min(int(params.get("limit", 50)), 200)
    except ValueError:
        raise ValidationFailed("limit must be a number")

    property_id = params.get("propertyId")
    if property_id:
        listing = _resolve_listing(property_id, request.user, for_write=False)
        queryset = UploadedFile.objects.filter(listing=listing)
    else:
        queryset = UploadedFile.objects.filter(uploaded_by=request.user)

    return Response({"success": True, "images": UploadedFileSerializer(queryset[:limit], many=True).data})


@api_view(["DELETE"])
@permission_classes([IsAuthenticated])
def delete_image(request, pk):
    """
    Delete an image from Cloudinary and the database

    DELETE /api/upload/images/<uuid>
    """
    image = UploadedFile.objects.filter(pk=pk).first()
    if image is None:
        raise ResourceNotFound("Image not found")

    if image.uploaded_by_id != request.user.id and request.user.role != User.PLATFORM_ADMIN:
        raise AuthorizationDenied("You can only delete your own images")

    # storage removal is best-effort; the record goes either way
    if not cloudinary_service.delete_image(image.public_id):
        logger.warning(f"Cloudinary did not confirm deletion of {image.public_id}")

    image.delete()
    logger.info(f"Image {pk} deleted by {request.user.email}")

    return Response({"success": True, "message": "Image deleted successfully"})
