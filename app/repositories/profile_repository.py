from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError

from app.models.profile import Profile
from app.repositories.base import BaseRepository


class ProfileRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``profiles`` table."""

    async def get_by_id(self, user_id: UUID) -> Optional[Profile]:
        try:
            result = await self._db.execute(select(Profile).where(Profile.id == user_id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch profile", exc) from exc

    async def list_team(self, tenant_id: UUID, exclude_id: UUID) -> List[Profile]:
        """Members of a tenant other than the caller, newest first.

        The tenant owner's own row (``id == tenant_id``) counts as a member.
        """
        try:
            result = await self._db.execute(
                select(Profile)
                .where(
                    or_(Profile.company_id == tenant_id, Profile.id == tenant_id),
                    Profile.id != exclude_id,
                )
                .order_by(Profile.created_at.desc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch users", exc) from exc

    async def upsert(self, user_id: UUID, fields: Dict[str, Any]) -> Profile:
        """Create or overwrite the profile row of an auth user."""
        stmt = (
            insert(Profile)
            .values(id=user_id, **fields)
            .on_conflict_do_update(index_elements=[Profile.id], set_=fields)
            .returning(Profile)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self._db.execute(stmt)
            profile = result.scalar_one()
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise self._query_error("Failed to save profile", exc) from exc
        return profile

    async def update(self, profile: Profile, changes: Dict[str, Any]) -> Profile:
        for key, value in changes.items():
            setattr(profile, key, value)
        try:
            await self._db.commit()
            await self._db.refresh(profile)
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise self._query_error("Failed to update user", exc) from exc
        return profile

    async def delete(self, user_id: UUID) -> bool:
        try:
            await self._db.execute(delete(Profile).where(Profile.id == user_id))
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise self._query_error("Failed to delete profile", exc) from exc
        return True
