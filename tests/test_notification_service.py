import json
import queue
from unittest import mock

import pytest

from apps.authentication.models import User
from apps.notifications.models import Notification
from apps.notifications.services import (
    EmailService,
    InProcessConnectionRegistry,
    NotificationService,
    get_email_service,
    get_notification_service,
)


@pytest.fixture
def email_service():
    service = mock.Mock(spec=EmailService)
    service.send_inspection_scheduled.return_value = True
    return service


@pytest.fixture
def service(registry, email_service):
    return NotificationService(registry=registry, email_service=email_service)


@pytest.mark.django_db
class TestCreateNotification:
    def test_persists_and_pushes_to_connected_user(self, service, registry, client_user):
        registry.connected.add(str(client_user.id))

        result = service.create_notification(client_user.id, Notification.LISTING_SAVED, "Saved", "You saved a listing")

        assert result.ok
        assert result.pushed is True
        assert Notification.objects.get().user == client_user
        user_id, payload = registry.sent[0]
        assert user_id == str(client_user.id)
        assert payload["title"] == "Saved"
        assert payload["read"] is False

    def test_offline_user_still_gets_row(self, service, registry, client_user):
        result = service.create_notification(client_user.id, Notification.LISTING_SAVED, "Saved", "msg")

        assert result.ok
        assert result.pushed is False
        assert Notification.objects.count() == 1

    def test_push_failure_keeps_row(self, service, registry, client_user):
        registry.connected.add(str(client_user.id))
        registry.fail = True

        result = service.create_notification(client_user.id, Notification.LISTING_SAVED, "Saved", "msg")

        assert result.ok
        assert result.pushed is False
        assert Notification.objects.count() == 1

    def test_persist_failure_returned_not_raised(self, service, registry, client_user, monkeypatch):
        registry.connected.add(str(client_user.id))

        def broken_create(**kwargs):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(Notification.objects, "create", broken_create)

        result = service.create_notification(client_user.id, Notification.LISTING_SAVED, "T", "m")

        assert not result.ok
        assert result.error.stage == "persist"
        assert registry.sent == []


@pytest.mark.django_db
class TestBulkNotifications:
    def test_every_row_persisted_even_when_all_pushes_fail(self, service, registry, make_user):
        users = [make_user(User.INSPECTOR) for _ in range(3)]
        registry.connected.update(str(u.id) for u in users)
        registry.fail = True

        result = service.create_bulk_notifications(
            [u.id for u in users],
            {"type": Notification.NEW_JOB_AVAILABLE, "title": "Job", "message": "New job"},
        )

        assert result.ok
        assert result.count == 3
        assert result.delivered == 0
        assert Notification.objects.filter(type=Notification.NEW_JOB_AVAILABLE).count() == 3

    def test_delivered_counts_connected_recipients(self, service, registry, make_user):
        users = [make_user(User.INSPECTOR) for _ in range(3)]
        registry.connected.add(str(users[1].id))

        result = service.create_bulk_notifications(
            [u.id for u in users],
            {"type": Notification.NEW_JOB_AVAILABLE, "title": "Job", "message": "New job"},
        )

        assert result.count == 3
        assert result.delivered == 1

    def test_no_recipients(self, service):
        result = service.create_bulk_notifications([], {"type": Notification.NEW_JOB_AVAILABLE, "title": "T", "message": "m"})

        assert result.ok
        assert result.count == 0


@pytest.mark.django_db
class TestTemplates:
    def test_scheduled_notification_emails_client(self, service, email_service, client_user, make_inspection):
        inspection = make_inspection()

        result = service.notify_inspection_scheduled(client_user, inspection)

        assert result.emailed is True
        email_service.send_inspection_scheduled.assert_called_once_with(client_user, inspection)
        assert Notification.objects.get().inspection == inspection

    def test_email_exception_is_swallowed(self, service, email_service, client_user, make_inspection):
        email_service.send_inspection_scheduled.side_effect = RuntimeError("smtp down")

        result = service.notify_inspection_scheduled(client_user, make_inspection())

        assert result.ok
        assert result.emailed is False

    def test_new_job_message(self, service, make_user, make_inspection):
        inspector = make_user(User.INSPECTOR)
        inspection = make_inspection()

        service.notify_new_job_available([inspector.id], inspection)

        notification = Notification.objects.get(user=inspector)
        assert notification.message.startswith('New virtual inspection available for "3 Bedroom Duplex" on ')

    def test_agent_acceptance_notice_skips_email(self, service, email_service, agent, inspector, make_inspection):
        inspection = make_inspection(inspector=inspector)

        service.notify_inspection_accepted(agent, inspection, email=False)

        email_service.send_inspector_assigned.assert_not_called()

    def test_verification_rejected_includes_reason(self, service, inspector):
        service.notify_verification_rejected(inspector, "ID document unreadable")

        assert Notification.objects.get().message.endswith("ID document unreadable")


class TestInProcessRegistry:
    def test_send_to_connected_user(self):
        registry = InProcessConnectionRegistry()
        channel = registry.connect("u1")

        assert registry.send("u1", {"id": "n1"}) is True
        frame = channel.get_nowait()
        assert frame.startswith("data: ")
        body = json.loads(frame[len("data: "):])
        assert body["type"] == "notification"
        assert body["data"] == {"id": "n1"}

    def test_send_to_unknown_user(self):
        assert InProcessConnectionRegistry().send("nobody", {}) is False

    def test_full_channel_drops_connection(self):
        registry = InProcessConnectionRegistry(max_pending=1)
        registry.connect("u1")

        assert registry.send("u1", {}) is True
        assert registry.send("u1", {}) is False
        assert not registry.is_connected("u1")

    def test_stale_disconnect_keeps_new_channel(self):
        registry = InProcessConnectionRegistry()
        old = registry.connect("u1")
        registry.connect("u1")

        registry.disconnect("u1", old)

        assert registry.is_connected("u1")
        assert registry.connected_count() == 1

    def test_broadcast_counts_deliveries(self):
        registry = InProcessConnectionRegistry()
        registry.connect("u1")
        registry.connect("u2")

        assert registry.broadcast(["u1", "u2", "u3"], {"x": 1}) == 2

    def test_channels_are_queues(self):
        assert isinstance(InProcessConnectionRegistry().connect("u1"), queue.Queue)


class TestDefaultEmailService:
    def test_shared_across_notification_services(self, settings):
        settings.SENDGRID_API_KEY = ""
        get_email_service.cache_clear()
        try:
            with mock.patch("apps.notifications.services.email_service.logger") as email_logger:
                first = get_notification_service()
                second = get_notification_service()

            assert first.email_service is second.email_service
            assert email_logger.warning.call_count == 1
        finally:
            get_email_service.cache_clear()
