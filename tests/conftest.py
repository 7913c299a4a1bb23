from typing import AsyncGenerator
from unittest.mock import AsyncMock
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.backend import HostedBackend
from app.dependencies import CurrentUser, get_backend, get_current_user, get_profile_repo
from app.main import app
from app.repositories.profile_repository import ProfileRepository
from factories import TENANT_ID, make_current


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Yield an ``httpx.AsyncClient`` wired to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def overrides():
    """Register dependency overrides for one test and always clean them up."""
    yield app.dependency_overrides
    app.dependency_overrides.clear()


@pytest.fixture
def owner() -> CurrentUser:
    return make_current()


@pytest.fixture
def make_user():
    """Factory fixture building a :class:`CurrentUser` with a given role."""
    return make_current


@pytest.fixture
def as_user(overrides):
    """Authenticate requests as the given :class:`CurrentUser`."""

    def _login(current: CurrentUser) -> CurrentUser:
        overrides[get_current_user] = lambda: current
        return current

    return _login


@pytest.fixture
def anonymous(overrides) -> AsyncMock:
    """No bearer token resolves; returns the backend mock for assertions."""
    backend = AsyncMock(spec=HostedBackend)
    backend.get_user.return_value = None
    overrides[get_backend] = lambda: backend
    overrides[get_profile_repo] = lambda: AsyncMock(spec=ProfileRepository)
    return backend


@pytest.fixture
def tenant_id() -> UUID:
    return TENANT_ID
