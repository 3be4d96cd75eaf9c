from datetime import timedelta

import pytest

from apps.authentication.models import User
from apps.inspections.models import Inspection, InspectionClient

URL = "/api/inspections"


def _ids(response):
    return [item["id"] for item in response.json()["inspections"]]


@pytest.mark.django_db
class TestRoleScopedListing:
    def test_client_sees_only_inspections_they_joined(self, auth_client, client_user, make_user, make_inspection):
        mine = make_inspection()
        other_client = make_user(User.CLIENT)
        make_inspection(client=other_client)

        response = auth_client(client_user).get(URL)

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert _ids(response) == [str(mine.id)]

    def test_client_registered_on_shared_inspection_sees_it_once(self, auth_client, client_user, make_user, make_inspection):
        inspection = make_inspection()
        InspectionClient.objects.create(inspection=inspection, client=make_user(User.CLIENT))

        response = auth_client(client_user).get(URL)

        assert _ids(response) == [str(inspection.id)]

    def test_inspector_sees_only_assigned(self, auth_client, inspector, make_user, make_inspection):
        assigned = make_inspection(inspector=inspector)
        make_inspection(inspector=make_user(User.INSPECTOR))
        make_inspection()

        response = auth_client(inspector).get(URL)

        assert _ids(response) == [str(assigned.id)]

    def test_agent_sees_inspections_of_own_listings(self, auth_client, agent, make_user, make_listing, make_inspection):
        own = make_inspection()
        other_listing = make_listing(agent=make_user(User.AGENT))
        make_inspection(listing=other_listing)

        response = auth_client(agent).get(URL)

        assert _ids(response) == [str(own.id)]

    def test_company_admin_scoped_by_agent(self, auth_client, make_user, make_listing, make_inspection):
        company_admin = make_user(User.COMPANY_ADMIN)
        own = make_inspection(listing=make_listing(agent=company_admin))
        make_inspection()

        response = auth_client(company_admin).get(URL)

        assert _ids(response) == [str(own.id)]

    def test_platform_admin_sees_everything(self, auth_client, platform_admin, make_user, make_inspection):
        make_inspection()
        make_inspection(client=make_user(User.CLIENT))

        response = auth_client(platform_admin).get(URL)

        assert len(_ids(response)) == 2

    def test_ordered_by_schedule_descending(self, auth_client, client_user, make_inspection):
        soon = make_inspection(scheduled_in=timedelta(days=1))
        later = make_inspection(scheduled_in=timedelta(days=5))
        middle = make_inspection(scheduled_in=timedelta(days=3))

        response = auth_client(client_user).get(URL)

        assert _ids(response) == [str(later.id), str(middle.id), str(soon.id)]

    def test_unauthenticated_gets_401(self, api_client):
        assert api_client.get(URL).status_code == 401


@pytest.mark.django_db
class TestListingFilters:
    def test_status_filter(self, auth_client, client_user, make_inspection):
        make_inspection()
        cancelled = make_inspection(status=Inspection.CANCELLED)

        response = auth_client(client_user).get(URL, {"status": "CANCELLED"})

        assert _ids(response) == [str(cancelled.id)]

    def test_type_filter(self, auth_client, client_user, make_inspection):
        make_inspection()
        physical = make_inspection(type=Inspection.PHYSICAL, fee=25000, duration=60)

        response = auth_client(client_user).get(URL, {"type": "PHYSICAL"})

        assert _ids(response) == [str(physical.id)]

    def test_upcoming_excludes_past(self, auth_client, client_user, make_inspection):
        upcoming = make_inspection(scheduled_in=timedelta(hours=3))
        make_inspection(scheduled_in=timedelta(hours=-3))

        response = auth_client(client_user).get(URL, {"upcoming": "true"})

        assert _ids(response) == [str(upcoming.id)]

    def test_upcoming_false_keeps_past(self, auth_client, client_user, make_inspection):
        make_inspection(scheduled_in=timedelta(hours=3))
        make_inspection(scheduled_in=timedelta(hours=-3))

        response = auth_client(client_user).get(URL, {"upcoming": "false"})

        assert len(_ids(response)) == 2


@pytest.mark.django_db
class TestRetrieve:
    def test_party_can_read_inspection(self, auth_client, client_user, make_inspection):
        inspection = make_inspection()

        response = auth_client(client_user).get(f"{URL}/{inspection.id}")

        assert response.status_code == 200
        assert response.json()["inspection"]["id"] == str(inspection.id)

    def test_outsider_gets_404(self, auth_client, make_user, make_inspection):
        inspection = make_inspection()

        response = auth_client(make_user(User.CLIENT)).get(f"{URL}/{inspection.id}")

        assert response.status_code == 404
