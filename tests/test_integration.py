import os
from datetime import date, timedelta
from decimal import Decimal
from typing import AsyncGenerator
from uuid import uuid4

import asyncpg
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.models.base import Base
from app.models.favorite import Favorite
from app.models.lead import Lead
from app.models.property import Property
from app.repositories.favorite_repository import FavoriteRepository
from app.repositories.lead_repository import LeadRepository
from app.repositories.property_repository import PropertyRepository
from app.schemas.portal import PortalPropertyFilters

_PG_HOST = os.getenv("TEST_PG_HOST", "localhost")
_PG_PORT = int(os.getenv("TEST_PG_PORT", "5433"))
_PG_USER = os.getenv("TEST_PG_USER", "postgres")
_PG_PASS = os.getenv("TEST_PG_PASSWORD", "postgres")
_TEST_DB = "estate_crm_test_db"

_TEST_DB_URL = (
    f"postgresql+asyncpg://{_PG_USER}:{_PG_PASS}@{_PG_HOST}:{_PG_PORT}/{_TEST_DB}"
)

# NullPool: every test runs on its own event loop, so connections are not reused
_TEST_ENGINE = create_async_engine(_TEST_DB_URL, echo=False, poolclass=NullPool)

_TestSessionLocal = async_sessionmaker(
    _TEST_ENGINE,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def _override_get_db():
    """Yield a test-scoped async session."""
    async with _TestSessionLocal() as session:
        yield session


@pytest_asyncio.fixture(autouse=True)
async def _setup_database():
    """Create the test database if needed, then fresh tables for each test.

    Skips every test in this module when PostgreSQL cannot be reached.
    """
    try:
        conn = await asyncpg.connect(
            user=_PG_USER,
            password=_PG_PASS,
            host=_PG_HOST,
            port=_PG_PORT,
            database="postgres",
        )
        exists = await conn.fetchval(
            "SELECT 1 FROM pg_database WHERE datname = $1", _TEST_DB
        )
        if not exists:
            await conn.execute(f'CREATE DATABASE "{_TEST_DB}"')
        await conn.close()
    except (OSError, asyncpg.PostgresError) as exc:
        pytest.skip(f"PostgreSQL not available ({_PG_HOST}:{_PG_PORT}): {exc}")

    async with _TEST_ENGINE.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with _TEST_ENGINE.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a raw async DB session for direct repository tests."""
    async with _TestSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def integration_client() -> AsyncGenerator[AsyncClient, None]:
    """HTTP client wired to the FastAPI app with overridden DB dependency."""
    from app.core.database import get_db
    from app.main import app

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def _seed_property(session: AsyncSession, **overrides) -> Property:
    """Insert a property row and return it."""
    defaults = {
        "company_id": uuid4(),
        "title": "Test Apartment",
        "price": Decimal("1500000"),
        "location": "Dubai Marina",
        "bedrooms": 2,
        "type": "Apartment",
        "status": "For Sale",
        "images": ["https://cdn.example.com/properties/a.jpg"],
        "is_published": True,
    }
    defaults.update(overrides)
    prop = Property(**defaults)
    session.add(prop)
    await session.commit()
    await session.refresh(prop)
    return prop


async def _seed_lead(session: AsyncSession, **overrides) -> Lead:
    """Insert a lead row and return it."""
    defaults = {
        "company_id": uuid4(),
        "name": "Test Lead",
        "status": "New",
        "source": "Website",
    }
    defaults.update(overrides)
    lead = Lead(**defaults)
    session.add(lead)
    await session.commit()
    await session.refresh(lead)
    return lead


class TestPublishedSearchIntegration:
    @pytest.mark.asyncio
    async def test_price_range_is_inclusive_and_unpublished_hidden(
        self, db_session: AsyncSession
    ):
        for price in ("900000", "1000000", "1500000", "2000000", "2100000"):
            await _seed_property(db_session, price=Decimal(price))
        await _seed_property(db_session, price=Decimal("1200000"), is_published=False)

        repo = PropertyRepository(db_session)
        page = await repo.get_published(
            PortalPropertyFilters(price_min=1_000_000, price_max=2_000_000, limit=2)
        )

        assert page["total"] == 3
        assert page["total_pages"] == 2
        assert len(page["properties"]) == 2

    @pytest.mark.asyncio
    async def test_page_past_the_end_keeps_total(self, db_session: AsyncSession):
        await _seed_property(db_session)
        repo = PropertyRepository(db_session)
        page = await repo.get_published(PortalPropertyFilters(page=5))
        assert page["properties"] == []
        assert page["total"] == 1

    @pytest.mark.asyncio
    async def test_text_query_matches_location(self, db_session: AsyncSession):
        await _seed_property(db_session, title="Sea Villa", location="Palm Jumeirah")
        await _seed_property(db_session, title="City Flat", location="Downtown")
        repo = PropertyRepository(db_session)
        page = await repo.get_published(PortalPropertyFilters(query="palm"))
        assert [p.title for p in page["properties"]] == ["Sea Villa"]

    @pytest.mark.asyncio
    async def test_portal_endpoint_envelope(self, integration_client: AsyncClient, db_session):
        await _seed_property(db_session)
        response = await integration_client.get("/api/portal/properties?limit=1")
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["totalPages"] == 1


class TestLeadRepositoryIntegration:
    @pytest.mark.asyncio
    async def test_bulk_update_skips_other_tenants(self, db_session: AsyncSession):
        tenant, other = uuid4(), uuid4()
        mine = await _seed_lead(db_session, company_id=tenant)
        theirs = await _seed_lead(db_session, company_id=other)

        repo = LeadRepository(db_session)
        updated = await repo.bulk_update([mine.id, theirs.id], tenant, {"status": "Won"})

        assert [lead.id for lead in updated] == [mine.id]
        untouched = await repo.get_by_id(theirs.id)
        assert untouched.status == "New"

    @pytest.mark.asyncio
    async def test_bulk_delete_counts_only_own_rows(self, db_session: AsyncSession):
        tenant = uuid4()
        mine = await _seed_lead(db_session, company_id=tenant)
        theirs = await _seed_lead(db_session)

        repo = LeadRepository(db_session)
        assert await repo.bulk_delete([mine.id, theirs.id], tenant) == 1
        assert await repo.get_by_id(theirs.id) is not None

    @pytest.mark.asyncio
    async def test_upcoming_follow_ups_window(self, db_session: AsyncSession):
        tenant = uuid4()
        today = date(2026, 10, 19)
        await _seed_lead(db_session, company_id=tenant, name="Later", follow_up_date=today + timedelta(days=6))
        await _seed_lead(db_session, company_id=tenant, name="Soon", follow_up_date=today + timedelta(days=1))
        await _seed_lead(db_session, company_id=tenant, name="Too far", follow_up_date=today + timedelta(days=8))
        await _seed_lead(db_session, company_id=tenant, name="Past", follow_up_date=today - timedelta(days=1))

        repo = LeadRepository(db_session)
        leads = await repo.get_upcoming_follow_ups(tenant, 7, today=today)
        assert [lead.name for lead in leads] == ["Soon", "Later"]

    @pytest.mark.asyncio
    async def test_property_links(self, db_session: AsyncSession):
        prop = await _seed_property(db_session)
        linked = await _seed_lead(db_session, company_id=prop.company_id, property_id=prop.id)
        loose = await _seed_lead(db_session, company_id=prop.company_id)

        repo = LeadRepository(db_session)
        assert [lead.id for lead in await repo.get_by_property(prop.id)] == [linked.id]
        assert [lead.id for lead in await repo.get_unassigned(prop.company_id)] == [loose.id]

    @pytest.mark.asyncio
    async def test_inquiry_lead_is_portal_sourced(self, db_session: AsyncSession):
        prop = await _seed_property(db_session)
        repo = LeadRepository(db_session)
        lead = await repo.create_inquiry_lead(
            company_id=prop.company_id,
            name="Visitor",
            email="visitor@example.com",
            property_id=prop.id,
        )
        assert lead.status == "New"
        assert lead.source == "portal"

        history = await repo.get_inquiries_by_email("visitor@example.com")
        assert [item.id for item in history] == [lead.id]
        assert history[0].property_title == prop.title


class TestFavoriteRepositoryIntegration:
    @pytest.mark.asyncio
    async def test_duplicate_favorite_reports_already_exists(self, db_session: AsyncSession):
        prop = await _seed_property(db_session)
        buyer = uuid4()
        repo = FavoriteRepository(db_session)

        first = await repo.add(buyer, prop.id)
        second = await repo.add(buyer, prop.id)

        assert isinstance(first, Favorite)
        assert second == {"already_exists": True}
        assert await repo.get_ids(buyer) == [prop.id]

    @pytest.mark.asyncio
    async def test_favorite_properties_skip_unpublished(self, db_session: AsyncSession):
        shown = await _seed_property(db_session, title="Shown")
        hidden = await _seed_property(db_session, title="Hidden")
        buyer = uuid4()
        repo = FavoriteRepository(db_session)
        await repo.add(buyer, shown.id)
        await repo.add(buyer, hidden.id)

        hidden.is_published = False
        await db_session.commit()

        rows = await repo.get_properties(buyer)
        assert [row["property"].title for row in rows] == ["Shown"]
