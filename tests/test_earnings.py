from datetime import timedelta
from decimal import Decimal

import pytest

from apps.inspections.models import Earning
from apps.inspections.services import InspectionService

URL = "/api/agents/earnings"


@pytest.fixture
def make_earning(make_inspection):
    def _make(user, amount, paid=False):
        return Earning.objects.create(
            amount=Decimal(amount),
            user=user,
            inspection=make_inspection(),
            platform_cut=Decimal("0.30"),
            paid=paid,
        )

    return _make


@pytest.mark.django_db
class TestAgentEarnings:
    def test_lists_own_earnings_with_totals(self, auth_client, agent, inspector, make_earning):
        make_earning(agent, "3000.00", paid=True)
        make_earning(agent, "4500.00")
        make_earning(inspector, "7500.00")

        response = auth_client(agent).get(URL)

        assert response.status_code == 200
        body = response.json()
        assert len(body["earnings"]) == 2
        assert all(e["userId"] == str(agent.id) for e in body["earnings"])
        assert body["totals"] == {"total": "7500.00", "paid": "3000.00", "pending": "4500.00", "count": 2}

    def test_empty(self, auth_client, agent):
        body = auth_client(agent).get(URL).json()

        assert body["earnings"] == []
        assert body["totals"] == {"total": "0.00", "paid": "0.00", "pending": "0.00", "count": 0}

    def test_completion_earning_shows_up_for_agent(self, auth_client, agent, inspector, make_inspection):
        inspection = make_inspection(inspector=inspector, scheduled_in=timedelta(minutes=-5))
        InspectionService.complete(inspection.id, inspector)

        body = auth_client(agent).get(URL).json()

        assert [e["inspectionId"] for e in body["earnings"]] == [str(inspection.id)]

    def test_inspector_forbidden(self, auth_client, inspector):
        response = auth_client(inspector).get(URL)

        assert response.status_code == 403
        assert response.json()["error"] == "Only agents can view their earnings"

    def test_requires_authentication(self, api_client):
        assert api_client.get(URL).status_code == 401
