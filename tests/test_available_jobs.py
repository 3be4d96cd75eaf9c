from datetime import timedelta
from types import SimpleNamespace

import pytest
from django.utils import timezone

from apps.authentication.models import User
from apps.inspections.models import Inspection
from apps.inspections.services import project_available_job

URL = "/api/inspections/available-jobs"


def _jobs(response):
    return response.json()["availableJobs"]


@pytest.mark.django_db
class TestAvailableJobs:
    def test_only_inspectors_may_browse(self, auth_client, client_user):
        response = auth_client(client_user).get(URL)

        assert response.status_code == 403
        assert response.json()["error"] == "Only inspectors can view available jobs"

    def test_unauthenticated_gets_401(self, api_client):
        assert api_client.get(URL).status_code == 401

    def test_excludes_assigned_past_and_non_scheduled(self, auth_client, inspector, make_user, make_inspection):
        open_job = make_inspection()
        make_inspection(inspector=make_user(User.INSPECTOR))
        make_inspection(scheduled_in=timedelta(hours=-1))
        make_inspection(status=Inspection.CANCELLED)
        make_inspection(status=Inspection.IN_PROGRESS)

        response = auth_client(inspector).get(URL)

        assert response.status_code == 200
        assert [job["id"] for job in _jobs(response)] == [str(open_job.id)]

    def test_job_view_shape(self, auth_client, inspector, client_user, listing, make_inspection):
        inspection = make_inspection(scheduled_in=timedelta(hours=10), notes="Bring a ladder")

        job = _jobs(auth_client(inspector).get(URL))[0]

        assert job["id"] == str(inspection.id)
        assert job["type"] == "VIRTUAL"
        assert job["status"] == "SCHEDULED"
        assert job["urgency"] == "HIGH"
        assert job["duration"] == 30
        assert job["notes"] == "Bring a ladder"
        assert job["payment"] == {"amount": 15000, "status": "PENDING"}
        assert job["property"]["id"] == str(listing.id)
        assert job["property"]["city"] == "Lekki"
        assert job["client"]["id"] == str(client_user.id)
        assert job["client"]["email"] == client_user.email
        assert job["agent"]["id"] == str(listing.agent_id)
        assert "scheduledAt" in job

    def test_ordered_soonest_first_then_oldest_request(self, auth_client, inspector, make_inspection):
        scheduled_at = timezone.now() + timedelta(days=2)
        first_request = make_inspection(scheduled_at=scheduled_at)
        second_request = make_inspection(scheduled_at=scheduled_at)
        sooner = make_inspection(scheduled_in=timedelta(hours=5))

        ids = [job["id"] for job in _jobs(auth_client(inspector).get(URL))]

        assert ids == [str(sooner.id), str(first_request.id), str(second_request.id)]

    def test_type_filter(self, auth_client, inspector, make_inspection):
        make_inspection()
        physical = make_inspection(type=Inspection.PHYSICAL, fee=25000, duration=60)

        jobs = _jobs(auth_client(inspector).get(URL, {"type": "PHYSICAL"}))

        assert [job["id"] for job in jobs] == [str(physical.id)]

    @pytest.mark.parametrize("location", ["lekki", "LAGOS", "admiralty"])
    def test_location_matches_city_state_or_address(self, auth_client, inspector, make_inspection, location):
        inspection = make_inspection()

        jobs = _jobs(auth_client(inspector).get(URL, {"location": location}))

        assert [job["id"] for job in jobs] == [str(inspection.id)]

    def test_location_without_match(self, auth_client, inspector, make_inspection):
        make_inspection()

        assert _jobs(auth_client(inspector).get(URL, {"location": "Abuja"})) == []

    def test_urgency_filter(self, auth_client, inspector, make_inspection):
        high = make_inspection(scheduled_in=timedelta(hours=12))
        medium = make_inspection(scheduled_in=timedelta(hours=48))
        low = make_inspection(scheduled_in=timedelta(days=7))

        client = auth_client(inspector)
        for urgency, expected in [("HIGH", high), ("MEDIUM", medium), ("LOW", low)]:
            jobs = _jobs(client.get(URL, {"urgency": urgency}))
            assert [job["id"] for job in jobs] == [str(expected.id)]


def _fake_inspection(clients, fee=15000, paid=False):
    agent = SimpleNamespace(id="a1", name="Agent A", email="agent@example.com", phone="080")
    listing = SimpleNamespace(
        id="l1", title="Flat", address="1 Road", city="Yaba", state="Lagos", type="APARTMENT", price=100, agent=agent
    )
    return SimpleNamespace(
        id="i1",
        listing=listing,
        clients=SimpleNamespace(all=lambda: clients),
        type="PHYSICAL",
        scheduled_at=timezone.now() + timedelta(days=10),
        status="SCHEDULED",
        fee=fee,
        paid=paid,
        duration=60,
    )


class TestProjection:
    def test_without_clients(self):
        job = project_available_job(_fake_inspection([]), timezone.now())

        assert job.client is None
        assert job.notes == ""
        assert job.urgency == "LOW"

    def test_missing_fee_reported_as_zero_and_paid_status(self):
        job = project_available_job(_fake_inspection([], fee=None, paid=True), timezone.now())

        assert job.payment.amount == 0
        assert job.payment.status == "PAID"

    def test_only_first_client_exposed(self):
        first = SimpleNamespace(client=SimpleNamespace(id="c1", name="Ada", email="ada@example.com", phone=""), notes=None)
        second = SimpleNamespace(client=SimpleNamespace(id="c2", name="Obi", email="obi@example.com", phone=""), notes="x")

        job = project_available_job(_fake_inspection([first, second]), timezone.now())

        assert job.client.id == "c1"
        assert job.notes == ""
        assert job.as_dict()["client"]["email"] == "ada@example.com"
