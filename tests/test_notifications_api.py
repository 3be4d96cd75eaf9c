import json

import pytest

from apps.authentication.models import User
from apps.notifications.models import Notification
from apps.notifications.views import event_stream

URL = "/api/notifications"


@pytest.fixture
def make_notification(db):
    def _make(user, read=False, title="Hello"):
        return Notification.objects.create(
            user=user, type=Notification.LISTING_SAVED, title=title, message="Body", read=read
        )

    return _make


@pytest.mark.django_db
class TestListNotifications:
    def test_lists_own_notifications_with_unread_count(self, auth_client, client_user, make_user, make_notification):
        make_notification(client_user)
        make_notification(client_user, read=True)
        make_notification(make_user(User.CLIENT))

        response = auth_client(client_user).get(URL)

        assert response.status_code == 200
        body = response.json()
        assert len(body["notifications"]) == 2
        assert body["unreadCount"] == 1
        assert body["pagination"] == {"total": 2, "limit": 50, "offset": 0, "hasMore": False}
        assert all(n["userId"] == str(client_user.id) for n in body["notifications"])

    def test_unread_only(self, auth_client, client_user, make_notification):
        unread = make_notification(client_user)
        make_notification(client_user, read=True)

        body = auth_client(client_user).get(URL, {"unreadOnly": "true"}).json()

        assert [n["id"] for n in body["notifications"]] == [str(unread.id)]
        assert body["unreadCount"] == 1

    def test_limit_and_offset(self, auth_client, client_user, make_notification):
        for i in range(5):
            make_notification(client_user, title=f"n{i}")

        body = auth_client(client_user).get(URL, {"limit": 2, "offset": 2}).json()

        assert len(body["notifications"]) == 2
        assert body["pagination"] == {"total": 5, "limit": 2, "offset": 2, "hasMore": True}

    def test_requires_authentication(self, api_client):
        assert api_client.get(URL).status_code == 401


@pytest.mark.django_db
class TestCreateNotification:
    def test_admin_issues_notification(self, auth_client, platform_admin, client_user, registry):
        registry.connected.add(str(client_user.id))
        data = {"userId": str(client_user.id), "type": "PAYMENT_RECEIVED", "title": "Paid", "message": "Thanks"}

        response = auth_client(platform_admin).post(URL, data, format="json")

        assert response.status_code == 201
        assert response.json()["notification"]["type"] == "PAYMENT_RECEIVED"
        assert Notification.objects.get().user == client_user
        assert registry.sent[0][0] == str(client_user.id)

    def test_missing_fields(self, auth_client, platform_admin, client_user):
        data = {"userId": str(client_user.id), "type": "PAYMENT_RECEIVED"}

        response = auth_client(platform_admin).post(URL, data, format="json")

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields"

    def test_non_admin_forbidden(self, auth_client, client_user):
        data = {"userId": str(client_user.id), "type": "PAYMENT_RECEIVED", "title": "Paid", "message": "Thanks"}

        response = auth_client(client_user).post(URL, data, format="json")

        assert response.status_code == 403
        assert response.json()["error"] == "Insufficient permissions"


@pytest.mark.django_db
class TestReadState:
    def test_mark_read_then_unread(self, auth_client, client_user, make_notification):
        notification = make_notification(client_user)
        client = auth_client(client_user)

        response = client.put(f"{URL}/{notification.id}/read")
        assert response.status_code == 200
        assert response.json()["notification"]["read"] is True

        response = client.delete(f"{URL}/{notification.id}/read")
        assert response.status_code == 200
        notification.refresh_from_db()
        assert notification.read is False

    def test_other_users_notification_forbidden(self, auth_client, client_user, make_user, make_notification):
        notification = make_notification(make_user(User.CLIENT))

        response = auth_client(client_user).put(f"{URL}/{notification.id}/read")

        assert response.status_code == 403
        notification.refresh_from_db()
        assert notification.read is False

    def test_missing_notification(self, auth_client, client_user):
        response = auth_client(client_user).put(f"{URL}/5b1e7c0a-3d2f-4e6a-8b9c-0d1e2f3a4b5c/read")

        assert response.status_code == 404

    def test_malformed_id_is_not_found(self, auth_client, client_user):
        response = auth_client(client_user).put(f"{URL}/{'-' * 36}/read")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Notification not found"}

    def test_mark_all_read(self, auth_client, client_user, make_user, make_notification):
        for _ in range(3):
            make_notification(client_user)
        make_notification(client_user, read=True)
        someone_else = make_notification(make_user(User.CLIENT))

        response = auth_client(client_user).put(f"{URL}/mark-all-read")

        assert response.status_code == 200
        assert response.json()["updatedCount"] == 3
        assert not Notification.objects.filter(user=client_user, read=False).exists()
        someone_else.refresh_from_db()
        assert someone_else.read is False


class TestEventStream:
    def test_connects_forwards_and_disconnects(self, registry):
        stream = event_stream(registry, "u1", heartbeat_seconds=0.01)

        connected = json.loads(next(stream)[len("data: "):])
        assert connected["type"] == "connected"
        assert registry.is_connected("u1")

        heartbeat = json.loads(next(stream)[len("data: "):])
        assert heartbeat["type"] == "heartbeat"

        stream.close()
        assert not registry.is_connected("u1")
