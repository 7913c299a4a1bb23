from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from app.api.deps import get_optional_user, get_portal_service
from app.models.favorite import Favorite
from app.repositories.action_log_repository import ActionLogRepository
from app.repositories.favorite_repository import FavoriteRepository
from app.repositories.lead_repository import LeadRepository
from app.repositories.property_repository import PropertyRepository
from app.services.portal_service import PortalService
from factories import TENANT_ID, lead_row, property_row


@pytest.fixture
def repos():
    return {
        "property_repo": AsyncMock(spec=PropertyRepository),
        "lead_repo": AsyncMock(spec=LeadRepository),
        "favorite_repo": AsyncMock(spec=FavoriteRepository),
        "action_log_repo": AsyncMock(spec=ActionLogRepository),
    }


@pytest.fixture
def portal(overrides, repos):
    service = PortalService(**repos)
    overrides[get_portal_service] = lambda: service
    return service


class TestPublishedSearch:
    @pytest.mark.asyncio
    async def test_page_envelope(self, async_client, anonymous, portal, repos):
        repos["property_repo"].get_published.return_value = {
            "properties": [property_row(price=1_200_000)],
            "total": 25,
            "page": 2,
            "limit": 12,
            "total_pages": 3,
        }
        response = await async_client.get(
            "/api/portal/properties?priceMin=1000000&priceMax=2000000&page=2&sortBy=price_asc"
        )
        assert response.status_code == 200
        body = response.json()
        assert body["totalPages"] == 3
        assert body["total"] == 25
        assert len(body["properties"]) == 1

        filters = repos["property_repo"].get_published.await_args.args[0]
        assert filters.price_min == 1_000_000
        assert filters.price_max == 2_000_000
        assert filters.page == 2
        assert filters.sort_by.value == "price_asc"

    @pytest.mark.asyncio
    async def test_anonymous_search_is_not_logged(self, async_client, anonymous, portal, repos):
        repos["property_repo"].get_published.return_value = {
            "properties": [], "total": 0, "page": 1, "limit": 12, "total_pages": 0,
        }
        response = await async_client.get("/api/portal/properties?q=villa")
        assert response.status_code == 200
        repos["action_log_repo"].log.assert_not_called()

    @pytest.mark.asyncio
    async def test_signed_in_search_is_logged(self, async_client, overrides, owner, portal, repos):
        overrides[get_optional_user] = lambda: owner
        repos["property_repo"].get_published.return_value = {
            "properties": [], "total": 0, "page": 1, "limit": 12, "total_pages": 0,
        }
        response = await async_client.get("/api/portal/properties?q=villa")
        assert response.status_code == 200
        args = repos["action_log_repo"].log.await_args.args
        assert args[0] == owner.id
        assert args[1] == "search"

    @pytest.mark.asyncio
    async def test_unpublished_listing_is_404(self, async_client, anonymous, portal, repos):
        repos["property_repo"].get_published_by_id.return_value = None
        response = await async_client.get(f"/api/portal/properties/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["type"] == "property_not_found"


class TestFavorites:
    @pytest.mark.asyncio
    async def test_requires_login(self, async_client, anonymous, portal):
        response = await async_client.get("/api/portal/favorites")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_favorite_ids(self, async_client, as_user, owner, portal, repos):
        as_user(owner)
        saved = [uuid4(), uuid4()]
        repos["favorite_repo"].get_ids.return_value = saved
        response = await async_client.get("/api/portal/favorites")
        assert response.status_code == 200
        assert response.json() == {"favoriteIds": [str(i) for i in saved]}

    @pytest.mark.asyncio
    async def test_add_favorite(self, async_client, as_user, owner, portal, repos):
        as_user(owner)
        property_id = uuid4()
        repos["favorite_repo"].add.return_value = Favorite(
            id=uuid4(), buyer_id=owner.id, property_id=property_id
        )
        response = await async_client.post(
            "/api/portal/favorites", json={"propertyId": str(property_id)}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["property_id"] == str(property_id)
        repos["action_log_repo"].log.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_favorite_reports_already_exists(
        self, async_client, as_user, owner, portal, repos
    ):
        as_user(owner)
        repos["favorite_repo"].add.return_value = {"already_exists": True}
        response = await async_client.post(
            "/api/portal/favorites", json={"propertyId": str(uuid4())}
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"alreadyExists": True}}
        repos["action_log_repo"].log.assert_not_called()

    @pytest.mark.asyncio
    async def test_remove_favorite(self, async_client, as_user, owner, portal, repos):
        as_user(owner)
        property_id = uuid4()
        response = await async_client.request(
            "DELETE", "/api/portal/favorites", json={"propertyId": str(property_id)}
        )
        assert response.status_code == 200
        repos["favorite_repo"].remove.assert_awaited_once_with(owner.id, property_id)

    @pytest.mark.asyncio
    async def test_favorite_properties_include_saved_time(
        self, async_client, as_user, owner, portal, repos
    ):
        as_user(owner)
        saved_at = datetime(2026, 10, 2, tzinfo=timezone.utc)
        repos["favorite_repo"].get_properties.return_value = [
            {"property": property_row(title="Saved Villa"), "favorited_at": saved_at}
        ]
        response = await async_client.get("/api/portal/favorites/properties")
        assert response.status_code == 200
        [item] = response.json()["properties"]
        assert item["title"] == "Saved Villa"
        assert item["favorited_at"].startswith("2026-10-02")


class TestInquiries:
    @pytest.mark.asyncio
    async def test_anonymous_inquiry_creates_portal_lead(
        self, async_client, anonymous, portal, repos
    ):
        property_id = uuid4()
        repos["property_repo"].get_owner_company.return_value = TENANT_ID
        repos["lead_repo"].create_inquiry_lead.return_value = lead_row(
            status="New", source="portal", property_id=property_id, name="Visitor"
        )
        response = await async_client.post(
            "/api/portal/inquire",
            json={
                "name": "Visitor",
                "email": "visitor@example.com",
                "message": "Is it still available?",
                "propertyId": str(property_id),
            },
        )
        assert response.status_code == 200
        assert response.json()["lead"]["source"] == "portal"
        kwargs = repos["lead_repo"].create_inquiry_lead.await_args.kwargs
        assert kwargs["company_id"] == TENANT_ID
        assert kwargs["property_id"] == property_id
        repos["action_log_repo"].log.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_owner_returns_400(self, async_client, anonymous, portal, repos):
        repos["property_repo"].get_owner_company.return_value = None
        response = await async_client.post(
            "/api/portal/inquire",
            json={"name": "Visitor", "email": "visitor@example.com", "propertyId": str(uuid4())},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Could not determine property owner"
        repos["lead_repo"].create_inquiry_lead.assert_not_called()

    @pytest.mark.asyncio
    async def test_history_uses_caller_email(self, async_client, as_user, owner, portal, repos):
        as_user(owner)
        repos["lead_repo"].get_inquiries_by_email.return_value = [
            lead_row(source="portal", email=owner.user.email)
        ]
        response = await async_client.get("/api/portal/inquiries")
        assert response.status_code == 200
        assert len(response.json()["inquiries"]) == 1
        repos["lead_repo"].get_inquiries_by_email.assert_awaited_once_with(owner.user.email)
