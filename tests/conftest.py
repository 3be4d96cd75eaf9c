import itertools
import queue
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from apps.authentication.models import User, InspectorProfile
from apps.inspections.models import Inspection, InspectionClient
from apps.listings.models import Listing
from apps.notifications.services.live import LiveConnectionRegistry


class FakeRegistry(LiveConnectionRegistry):
    """Records pushes to users marked connected; optionally raises on every send"""

    def __init__(self):
        self.connected = set()
        self.sent = []
        self.fail = False

    def connect(self, user_id):
        self.connected.add(str(user_id))
        return queue.Queue()

    def disconnect(self, user_id, channel=None):
        self.connected.discard(str(user_id))

    def is_connected(self, user_id):
        return str(user_id) in self.connected

    def connected_count(self):
        return len(self.connected)

    def send(self, user_id, payload):
        if self.fail:
            raise RuntimeError("registry unavailable")
        if str(user_id) not in self.connected:
            return False
        self.sent.append((str(user_id), payload))
        return True


@pytest.fixture(autouse=True)
def registry(monkeypatch):
    fake = FakeRegistry()
    monkeypatch.setattr("apps.notifications.services.notification_service.get_live_registry", lambda: fake)
    return fake


@pytest.fixture
def make_user(db):
    counter = itertools.count()

    def _make(role=User.CLIENT, verification_status=User.VERIFIED, **extra):
        n = next(counter)
        user = User.objects.create_user(
            email=f"{role.lower()}{n}@example.com",
            password="password123",
            first_name=role.title(),
            last_name=f"User{n}",
            role=role,
            verification_status=verification_status,
            **extra,
        )
        if role == User.INSPECTOR:
            InspectorProfile.objects.create(user=user)
        return user

    return _make


@pytest.fixture
def client_user(make_user):
    return make_user(User.CLIENT)


@pytest.fixture
def agent(make_user):
    return make_user(User.AGENT)


@pytest.fixture
def inspector(make_user):
    return make_user(User.INSPECTOR)


@pytest.fixture
def platform_admin(make_user):
    return make_user(User.PLATFORM_ADMIN)


@pytest.fixture
def make_listing(db, agent):
    def _make(**overrides):
        fields = {
            "title": "3 Bedroom Duplex",
            "type": "HOUSE",
            "price": Decimal("45000000"),
            "address": "12 Admiralty Way",
            "city": "Lekki",
            "state": "Lagos",
            "agent": agent,
        }
        fields.update(overrides)
        return Listing.objects.create(**fields)

    return _make


@pytest.fixture
def listing(make_listing):
    return make_listing()


@pytest.fixture
def make_inspection(db, listing, client_user):
    def _make(scheduled_in=timedelta(days=2), client=client_user, notes="", **overrides):
        fields = {
            "type": Inspection.VIRTUAL,
            "scheduled_at": timezone.now() + scheduled_in,
            "duration": 30,
            "fee": 15000,
            "listing": listing,
        }
        fields.update(overrides)
        inspection = Inspection.objects.create(**fields)
        if client is not None:
            InspectionClient.objects.create(inspection=inspection, client=client, notes=notes)
        return inspection

    return _make


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client():
    def _for(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _for
