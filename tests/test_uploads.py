from unittest import mock

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from apps.authentication.models import User
from apps.uploads.models import UploadedFile

URL = "/api/upload/images"


def _image(name="front.jpg", content_type="image/jpeg", size=1024):
    return SimpleUploadedFile(name, b"\xff" * size, content_type=content_type)


@pytest.fixture
def storage():
    with mock.patch("apps.uploads.views.cloudinary_service") as service:
        counter = iter(range(100))
        service.build_public_id.side_effect = lambda prefix: f"{prefix}-{next(counter)}"
        service.upload_image.side_effect = lambda file, public_id: {
            "url": f"https://res.cloudinary.com/demo/image/upload/inspekta/listings/{public_id}.jpg",
            "public_id": f"inspekta/listings/{public_id}",
            "bytes": file.size,
            "format": "jpg",
        }
        service.delete_image.return_value = True
        yield service


@pytest.mark.django_db
class TestUploadImages:
    def test_agent_uploads_images_for_own_listing(self, auth_client, agent, listing, storage):
        response = auth_client(agent).post(
            URL, {"images": [_image(), _image("back.png", "image/png")], "propertyId": str(listing.id)}, format="multipart"
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert len(body["urls"]) == 2
        assert {img["originalName"] for img in body["images"]} == {"front.jpg", "back.png"}

        rows = UploadedFile.objects.filter(listing=listing)
        assert rows.count() == 2
        assert all(row.public_id.startswith(f"inspekta/listings/property-{listing.id}-") for row in rows)

    def test_upload_without_listing_uses_user_prefix(self, auth_client, agent, storage):
        auth_client(agent).post(URL, {"images": [_image()]}, format="multipart")

        storage.build_public_id.assert_called_once_with(f"user-{agent.id}")

    def test_client_cannot_upload(self, auth_client, client_user, storage):
        response = auth_client(client_user).post(URL, {"images": [_image()]}, format="multipart")

        assert response.status_code == 403
        storage.upload_image.assert_not_called()

    def test_no_files(self, auth_client, agent, storage):
        response = auth_client(agent).post(URL, {}, format="multipart")

        assert response.status_code == 400
        assert response.json()["error"] == "No images provided"

    def test_too_many_files(self, auth_client, agent, storage):
        files = [_image(f"{i}.jpg") for i in range(11)]

        response = auth_client(agent).post(URL, {"images": files}, format="multipart")

        assert response.status_code == 400
        storage.upload_image.assert_not_called()

    def test_wrong_type(self, auth_client, agent, storage):
        response = auth_client(agent).post(URL, {"images": [_image("doc.pdf", "application/pdf")]}, format="multipart")

        assert response.status_code == 400
        assert "Invalid file type" in response.json()["error"]

    def test_file_too_large(self, auth_client, agent, storage, settings):
        settings.UPLOAD_MAX_FILE_SIZE = 512

        response = auth_client(agent).post(URL, {"images": [_image(size=1024)]}, format="multipart")

        assert response.status_code == 400

    def test_other_agents_listing_forbidden(self, auth_client, make_user, listing, storage):
        other_agent = make_user(User.AGENT)

        response = auth_client(other_agent).post(
            URL, {"images": [_image()], "propertyId": str(listing.id)}, format="multipart"
        )

        assert response.status_code == 403

    def test_storage_failure_rolls_back_uploaded_files(self, auth_client, agent, storage):
        uploaded = storage.upload_image.side_effect

        def fail_second(file, public_id):
            if file.name == "second.jpg":
                raise Exception("Cloudinary upload failed: timeout")
            return uploaded(file, public_id)

        storage.upload_image.side_effect = fail_second

        response = auth_client(agent).post(
            URL, {"images": [_image("first.jpg"), _image("second.jpg")]}, format="multipart"
        )

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to upload images"}
        assert not UploadedFile.objects.exists()
        storage.delete_image.assert_called_once()


@pytest.mark.django_db
class TestListAndDeleteImages:
    def _row(self, user, listing=None, name="a.jpg"):
        return UploadedFile.objects.create(
            filename=name,
            original_name=name,
            url=f"https://res.cloudinary.com/demo/{name}",
            public_id=f"inspekta/listings/{name}",
            size=10,
            mime_type="image/jpeg",
            uploaded_by=user,
            listing=listing,
        )

    def test_lists_own_uploads(self, auth_client, agent, make_user):
        mine = self._row(agent)
        self._row(make_user(User.AGENT))

        body = auth_client(agent).get(URL).json()

        assert [img["id"] for img in body["images"]] == [str(mine.id)]

    def test_lists_by_listing(self, auth_client, client_user, agent, listing):
        row = self._row(agent, listing=listing)
        self._row(agent)

        body = auth_client(client_user).get(URL, {"propertyId": str(listing.id)}).json()

        assert [img["id"] for img in body["images"]] == [str(row.id)]

    def test_uploader_deletes(self, auth_client, agent, storage):
        row = self._row(agent)

        response = auth_client(agent).delete(f"{URL}/{row.id}")

        assert response.status_code == 200
        storage.delete_image.assert_called_once_with(row.public_id)
        assert not UploadedFile.objects.exists()

    def test_row_deleted_even_if_storage_refuses(self, auth_client, agent, storage):
        storage.delete_image.return_value = False
        row = self._row(agent)

        auth_client(agent).delete(f"{URL}/{row.id}")

        assert not UploadedFile.objects.filter(pk=row.pk).exists()

    def test_other_user_cannot_delete(self, auth_client, agent, make_user, storage):
        row = self._row(agent)

        response = auth_client(make_user(User.AGENT)).delete(f"{URL}/{row.id}")

        assert response.status_code == 403
        assert UploadedFile.objects.filter(pk=row.pk).exists()

    def test_platform_admin_can_delete(self, auth_client, agent, platform_admin, storage):
        row = self._row(agent)

        assert auth_client(platform_admin).delete(f"{URL}/{row.id}").status_code == 200

    def test_missing_image(self, auth_client, agent, storage):
        response = auth_client(agent).delete(f"{URL}/3c9d8e7f-1a2b-4c3d-8e9f-0a1b2c3d4e5f")

        assert response.status_code == 404
