import logging
import time

import cloudinary
import cloudinary.uploader
import cloudinary.utils
from django.conf import settings
from django.utils.crypto import get_random_string

logger = logging.getLogger(__name__)

SUFFIX_CHARS = "abcdefghijklmnopqrstuvwxyz0123456789"


class CloudinaryService:
    """
    Service for handling Cloudinary operations
    Uploads listing images server-side and removes them again
    """

    def __init__(self):
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_STORAGE["CLOUD_NAME"],
            api_key=settings.CLOUDINARY_STORAGE["API_KEY"],
            api_secret=settings.CLOUDINARY_STORAGE["API_SECRET"],
            secure=True,
        )

    def build_public_id(self, prefix: str) -> str:
        """
        Collision-free public_id: <prefix>-<epoch ms>-<random suffix>

        Args:
            prefix: e.g. "property-<listing id>" or "user-<user id>"

        Returns:
            public_id string
        """
        return f"{prefix}-{int(time.time() * 1000)}-{get_random_string(8, SUFFIX_CHARS)}"

    def upload_image(self, file, public_id: str, folder: str = "inspekta/listings") -> dict:
        """
        Upload an image file to Cloudinary

        Args:
            file: File-like object (an UploadedFile from the request)
            public_id: Public id without folder
            folder: Cloudinary folder path

        Returns:
            dict with url, public_id, bytes and format of the stored image
        """
        try:
            result = cloudinary.uploader.upload(file, public_id=public_id, folder=folder, resource_type="image")
            logger.info(f"Uploaded image: {result['public_id']}")

            return {
                "url": result["secure_url"],
                "public_id": result["public_id"],
                "bytes": result.get("bytes"),
                "format": result.get("format"),
            }

        except Exception as e:
            logger.error(f"Failed to upload image {public_id}: {str(e)}")
            raise Exception(f"Cloudinary upload failed: {str(e)}")

    def get_image_url(self, public_id: str, transformation: dict = None) -> str:
        try:
            if transformation:
                url, _ = cloudinary.utils.cloudinary_url(public_id, **transformation)
            else:
                url, _ = cloudinary.utils.cloudinary_url(public_id)

            return url
        except Exception as e:
            logger.error(f"Failed to generate Cloudinary URL: {str(e)}")
            return ""

    def get_thumbnail_url(self, public_id: str, width: int = 200) -> str:
        return self.get_image_url(
            public_id,
            transformation={
                "width": width,
                "crop": "fill",
                "quality": "auto",
                "fetch_format": "auto",
            },
        )

    def delete_image(self, public_id: str) -> bool:
        """
        Delete an image from Cloudinary

        Args:
            public_id : Cloudinary public_id

        Returns:
            bool indicating success
        """
        try:
            result = cloudinary.uploader.destroy(public_id)
            logger.info(f"Deleted image: {public_id}")
            return result.get("result") == "ok"

        except Exception as e:
            logger.error(f"Failed to delete image {public_id}: {str(e)}")
            return False
