import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.backend import AuthUser, HostedBackend
from app.core.constants import SUPERUSER_ROLES
from app.core.database import get_db
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.models.profile import Profile
from app.repositories.action_log_repository import ActionLogRepository
from app.repositories.favorite_repository import FavoriteRepository
from app.repositories.lead_event_repository import LeadEventRepository
from app.repositories.lead_repository import LeadRepository
from app.repositories.profile_repository import ProfileRepository
from app.repositories.property_repository import PropertyRepository
from app.schemas.user import UserPermissions
from app.services.notifications import EmailNotifier

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    """The authenticated caller, their profile and the tenant they act for."""

    user: AuthUser
    profile: Optional[Profile]
    tenant_id: UUID

    @property
    def id(self) -> UUID:
        return self.user.id

    @property
    def role(self) -> Optional[str]:
        return self.profile.role if self.profile is not None else None


def parse_permissions(raw: Any) -> UserPermissions:
    """Permissions column as a model; unreadable values grant nothing."""
    data: Dict[str, Any] = {}
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed permissions JSON")
    elif isinstance(raw, dict):
        data = raw
    try:
        return UserPermissions.model_validate(data)
    except ValueError:
        logger.warning("Ignoring invalid permissions matrix")
        return UserPermissions()


def check_account_active(profile: Optional[Profile], now: Optional[datetime] = None) -> None:
    """Disabled or expired accounts may not use the dashboard."""
    if profile is None:
        return
    if profile.is_disabled:
        raise ForbiddenError("Account disabled")
    if profile.expiry_date is not None:
        current = now or datetime.now(timezone.utc)
        expiry = profile.expiry_date
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        if expiry <= current:
            raise ForbiddenError("Account expired")


def has_permission(profile: Optional[Profile], module: str, *actions: str) -> bool:
    """Superuser roles bypass the matrix; otherwise any listed action suffices."""
    if profile is None:
        return False
    if profile.role in SUPERUSER_ROLES:
        return True
    permissions = parse_permissions(profile.permissions)
    if not actions:
        return permissions.allows(module)
    return any(permissions.allows(module, action) for action in actions)


# ---------------------------------------------------------------------------
# Hosted backend and mail transport (process-wide)
# ---------------------------------------------------------------------------


@lru_cache
def get_backend() -> HostedBackend:
    return HostedBackend.from_settings()


@lru_cache
def get_notifier() -> EmailNotifier:
    return EmailNotifier.from_settings()


# ---------------------------------------------------------------------------
# Repository factory functions (one per repository, each gets the shared db)
# ---------------------------------------------------------------------------


async def get_property_repo(db: AsyncSession = Depends(get_db)) -> PropertyRepository:
    return PropertyRepository(db)


async def get_lead_repo(db: AsyncSession = Depends(get_db)) -> LeadRepository:
    return LeadRepository(db)


async def get_lead_event_repo(db: AsyncSession = Depends(get_db)) -> LeadEventRepository:
    return LeadEventRepository(db)


async def get_favorite_repo(db: AsyncSession = Depends(get_db)) -> FavoriteRepository:
    return FavoriteRepository(db)


async def get_profile_repo(db: AsyncSession = Depends(get_db)) -> ProfileRepository:
    return ProfileRepository(db)


async def get_action_log_repo(db: AsyncSession = Depends(get_db)) -> ActionLogRepository:
    return ActionLogRepository(db)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


async def _resolve_user(
    credentials: Optional[HTTPAuthorizationCredentials],
    backend: HostedBackend,
    profile_repo: ProfileRepository,
) -> Optional[CurrentUser]:
    if credentials is None or not credentials.credentials:
        return None
    user = await backend.get_user(credentials.credentials)
    if user is None:
        return None
    profile = await profile_repo.get_by_id(user.id)
    tenant_id = profile.tenant_id if profile is not None else user.id
    return CurrentUser(user=user, profile=profile, tenant_id=tenant_id)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    backend: HostedBackend = Depends(get_backend),
    profile_repo: ProfileRepository = Depends(get_profile_repo),
) -> CurrentUser:
    """Require a valid bearer token (401 otherwise)."""
    current = await _resolve_user(credentials, backend, profile_repo)
    if current is None:
        raise UnauthorizedError()
    return current


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    backend: HostedBackend = Depends(get_backend),
    profile_repo: ProfileRepository = Depends(get_profile_repo),
) -> Optional[CurrentUser]:
    """The caller if a valid token was sent, else ``None``."""
    return await _resolve_user(credentials, backend, profile_repo)


def require_permission(module: str, *actions: str):
    """Dependency factory guarding a dashboard route.

    ``require_permission("leads", "edit")`` passes for admins, company
    owners and members whose matrix grants ``leads.edit``.
    """

    async def _guard(current: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        check_account_active(current.profile)
        if not has_permission(current.profile, module, *actions):
            logger.warning(
                "User %s lacks %s:%s", current.id, module, "/".join(actions) or "-"
            )
            raise ForbiddenError()
        return current

    return _guard


# ---------------------------------------------------------------------------
# Service factory functions
# ---------------------------------------------------------------------------


async def get_lead_service(
    lead_repo: LeadRepository = Depends(get_lead_repo),
    event_repo: LeadEventRepository = Depends(get_lead_event_repo),
):
    """Build a :class:`LeadService` with injected repositories."""
    from app.services.lead_service import LeadService

    return LeadService(lead_repo=lead_repo, event_repo=event_repo)


async def get_analytics_service(
    lead_repo: LeadRepository = Depends(get_lead_repo),
):
    from app.services.analytics import LeadAnalyticsService

    return LeadAnalyticsService(lead_repo=lead_repo)


async def get_property_service(
    property_repo: PropertyRepository = Depends(get_property_repo),
    backend: HostedBackend = Depends(get_backend),
):
    from app.services.property_service import PropertyService

    return PropertyService(property_repo=property_repo, backend=backend)


async def get_user_service(
    profile_repo: ProfileRepository = Depends(get_profile_repo),
    backend: HostedBackend = Depends(get_backend),
):
    from app.services.user_service import UserService

    return UserService(profile_repo=profile_repo, backend=backend)


async def get_portal_service(
    property_repo: PropertyRepository = Depends(get_property_repo),
    lead_repo: LeadRepository = Depends(get_lead_repo),
    favorite_repo: FavoriteRepository = Depends(get_favorite_repo),
    action_log_repo: ActionLogRepository = Depends(get_action_log_repo),
):
    """Build a :class:`PortalService` with injected repositories."""
    from app.services.portal_service import PortalService

    return PortalService(
        property_repo=property_repo,
        lead_repo=lead_repo,
        favorite_repo=favorite_repo,
        action_log_repo=action_log_repo,
    )
