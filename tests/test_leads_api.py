from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.api.deps import get_analytics_service, get_lead_service, get_notifier
from app.repositories.lead_event_repository import LeadEventRepository
from app.repositories.lead_repository import LeadRepository
from app.services.analytics import LeadAnalyticsService
from app.services.lead_service import LeadService
from app.services.notifications import EmailNotifier
from factories import lead_row


@pytest.fixture
def lead_repo() -> AsyncMock:
    return AsyncMock(spec=LeadRepository)


@pytest.fixture
def event_repo() -> AsyncMock:
    return AsyncMock(spec=LeadEventRepository)


@pytest.fixture
def notifier(overrides) -> MagicMock:
    notifier = MagicMock(spec=EmailNotifier)
    overrides[get_notifier] = lambda: notifier
    return notifier


@pytest.fixture
def logged_in(overrides, as_user, owner, lead_repo, event_repo):
    """Owner session backed by a real LeadService over mocked repositories."""
    service = LeadService(lead_repo=lead_repo, event_repo=event_repo)
    overrides[get_lead_service] = lambda: service
    return as_user(owner)


class TestListAndCreate:
    @pytest.mark.asyncio
    async def test_list_is_scoped_to_tenant(self, async_client, logged_in, lead_repo):
        lead_repo.get_by_company.return_value = [lead_row(logged_in.tenant_id, name="Omar")]
        response = await async_client.get("/api/leads")
        assert response.status_code == 200
        assert [l["name"] for l in response.json()["data"]] == ["Omar"]
        lead_repo.get_by_company.assert_awaited_once_with(logged_in.tenant_id, None)

    @pytest.mark.asyncio
    async def test_list_filters_by_property(self, async_client, logged_in, lead_repo):
        property_id = uuid4()
        lead_repo.get_by_company.return_value = []
        response = await async_client.get(f"/api/leads?propertyId={property_id}")
        assert response.status_code == 200
        lead_repo.get_by_company.assert_awaited_once_with(logged_in.tenant_id, property_id)

    @pytest.mark.asyncio
    async def test_create_uses_session_tenant(self, async_client, logged_in, lead_repo):
        lead_repo.create.return_value = lead_row(logged_in.tenant_id, name="Layla")
        response = await async_client.post(
            "/api/leads",
            json={
                "name": "Layla",
                "email": "",
                "phone": "",
                "property_id": "",
                "follow_up_date": "",
                "company_id": str(uuid4()),
            },
        )
        assert response.status_code == 201
        kwargs = lead_repo.create.await_args.kwargs
        assert kwargs["company_id"] == logged_in.tenant_id
        assert kwargs["broker_id"] == logged_in.id
        assert kwargs["email"] is None
        assert kwargs["property_id"] is None
        assert kwargs["status"] == "New"


class TestBulkEndpoints:
    @pytest.mark.asyncio
    async def test_bulk_update_without_ids_returns_400(self, async_client, logged_in, lead_repo):
        response = await async_client.put("/api/leads", json={"data": {"status": "Won"}})
        assert response.status_code == 400
        assert response.json() == {"error": "No lead IDs provided", "type": "invalid_request"}
        lead_repo.bulk_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_bulk_update_without_body_returns_400(self, async_client, logged_in):
        response = await async_client.put("/api/leads")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_bulk_update_returns_rows_and_count(
        self, async_client, logged_in, lead_repo, event_repo
    ):
        ids = [uuid4(), uuid4()]
        lead_repo.bulk_update.return_value = [
            lead_row(logged_in.tenant_id, id=i, status="Won") for i in ids
        ]
        response = await async_client.put(
            "/api/leads",
            json={"ids": [str(i) for i in ids], "data": {"status": "Won"}},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert {row["status"] for row in body["data"]} == {"Won"}
        lead_repo.bulk_update.assert_awaited_once_with(
            ids, logged_in.tenant_id, {"status": "Won"}
        )
        event_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_bulk_null_status_is_rejected(self, async_client, logged_in, lead_repo):
        response = await async_client.put(
            "/api/leads", json={"ids": [str(uuid4())], "data": {"status": None}}
        )
        assert response.status_code == 422
        assert response.json()["type"] == "validation_error"
        lead_repo.bulk_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_bulk_delete_without_ids_returns_400(self, async_client, logged_in, lead_repo):
        response = await async_client.request("DELETE", "/api/leads", json={"ids": []})
        assert response.status_code == 400
        lead_repo.bulk_delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_bulk_delete_reports_count(self, async_client, logged_in, lead_repo):
        ids = [uuid4(), uuid4(), uuid4()]
        lead_repo.bulk_delete.return_value = 3
        response = await async_client.request(
            "DELETE", "/api/leads", json={"ids": [str(i) for i in ids]}
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "count": 3}
        lead_repo.bulk_delete.assert_awaited_once_with(ids, logged_in.tenant_id)


class TestSingleLeadUpdate:
    @pytest.mark.asyncio
    async def test_status_change_emails_lead_after_response(
        self, async_client, logged_in, lead_repo, notifier
    ):
        lead = lead_row(logged_in.tenant_id, status="New", email="client@example.com")
        lead_repo.get_by_id.return_value = lead
        response = await async_client.put(f"/api/leads/{lead.id}", json={"status": "Viewing"})
        assert response.status_code == 200
        notifier.send.assert_called_once()
        message = notifier.send.call_args.args[0]
        assert message.to == "client@example.com"
        assert "Viewing" in message.html

    @pytest.mark.asyncio
    async def test_no_email_without_status_change(
        self, async_client, logged_in, lead_repo, notifier
    ):
        lead = lead_row(logged_in.tenant_id, status="New", email="client@example.com")
        lead_repo.get_by_id.return_value = lead
        response = await async_client.put(f"/api/leads/{lead.id}", json={"phone": "+971500000000"})
        assert response.status_code == 200
        notifier.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_null_name_is_rejected(self, async_client, logged_in, lead_repo):
        response = await async_client.put(f"/api/leads/{uuid4()}", json={"name": None})
        assert response.status_code == 422
        lead_repo.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_events_endpoint_checks_tenant(self, async_client, logged_in, lead_repo):
        lead_repo.get_by_id.return_value = None
        response = await async_client.get(f"/api/leads/{uuid4()}/events")
        assert response.status_code == 404


class TestUpcomingAndAnalytics:
    @pytest.mark.asyncio
    async def test_upcoming_defaults_to_seven_days(self, async_client, logged_in, lead_repo):
        lead_repo.get_upcoming_follow_ups.return_value = []
        response = await async_client.get("/api/leads/upcoming")
        assert response.status_code == 200
        lead_repo.get_upcoming_follow_ups.assert_awaited_once_with(logged_in.tenant_id, 7)

    @pytest.mark.asyncio
    async def test_analytics_uses_camel_case_keys(
        self, async_client, overrides, logged_in, lead_repo
    ):
        overrides[get_analytics_service] = lambda: LeadAnalyticsService(lead_repo=lead_repo)
        lead_repo.analytics_rows.return_value = [
            {"status": "Won", "source": "Website", "property_id": None, "property_title": None},
            {"status": "Won", "source": "Website", "property_id": None, "property_title": None},
            {"status": "Lost", "source": None, "property_id": None, "property_title": None},
        ]
        response = await async_client.get("/api/leads/analytics")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 3
        assert data["conversionRate"] == 67
        assert data["byStatus"] == {"Won": 2, "Lost": 1}
        assert data["bySource"] == {"Website": 2, "Unknown": 1}
        assert data["topProperties"] == []
