import logging
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from app.core.backend import AuthUser, HostedBackend
from app.core.constants import DEFAULT_USER_PASSWORD
from app.core.exceptions import QueryError, UserNotFoundError
from app.models.profile import Profile
from app.repositories.profile_repository import ProfileRepository
from app.schemas.user import UserForm
from app.services.notifications import EmailMessage, account_disabled_email

logger = logging.getLogger(__name__)


@dataclass
class UserUpdateResult:
    profile: Profile
    emails: List[EmailMessage] = field(default_factory=list)


class UserService:
    """Team management: profiles in the database, accounts in hosted auth."""

    def __init__(self, profile_repo: ProfileRepository, backend: HostedBackend) -> None:
        self._profiles = profile_repo
        self._backend = backend

    async def list_team(self, caller: AuthUser, tenant_id: UUID) -> List[Profile]:
        return await self._profiles.list_team(tenant_id, exclude_id=caller.id)

    async def _get_member(self, user_id: UUID, tenant_id: UUID) -> Profile:
        profile = await self._profiles.get_by_id(user_id)
        if profile is None or profile.tenant_id != tenant_id:
            raise UserNotFoundError()
        return profile

    async def create_user(self, form: UserForm, tenant_id: UUID) -> Profile:
        """Create a confirmed auth account and its profile in the caller's tenant.

        If the profile cannot be written the freshly created auth account
        is removed again.
        """
        account = await self._backend.create_user(
            email=form.email,
            password=form.password or DEFAULT_USER_PASSWORD,
            full_name=form.full_name,
        )
        fields = {**form.profile_fields(), "email": form.email, "company_id": tenant_id}
        try:
            profile = await self._profiles.upsert(account.id, fields)
        except QueryError:
            logger.error("Profile write failed, removing auth user %s", account.id)
            await self._backend.delete_user(account.id)
            raise
        logger.info("User %s created in tenant %s", account.id, tenant_id)
        return profile

    async def update_user(
        self,
        user_id: UUID,
        form: UserForm,
        tenant_id: UUID,
        note: Optional[str] = None,
    ) -> UserUpdateResult:
        """Update a team member.

        The account-disabled email is produced only on the transition
        from enabled to disabled.
        """
        profile = await self._get_member(user_id, tenant_id)
        being_disabled = form.is_disabled and not profile.is_disabled

        profile = await self._profiles.update(profile, form.profile_fields())
        result = UserUpdateResult(profile=profile)

        if being_disabled:
            email = await self._backend.get_user_email(user_id) or profile.email
            if email:
                result.emails.append(account_disabled_email(email, form.full_name, note))
            logger.info("User %s disabled", user_id)
        return result

    async def delete_user(self, user_id: UUID, tenant_id: UUID) -> bool:
        """Remove the profile row, then the auth account.

        If the profile delete fails the auth account is still there, so
        the delete can be retried.
        """
        await self._get_member(user_id, tenant_id)
        await self._profiles.delete(user_id)
        await self._backend.delete_user(user_id)
        logger.info("User %s deleted from tenant %s", user_id, tenant_id)
        return True
