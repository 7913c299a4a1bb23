import logging
from typing import Any, Dict, List, Union
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.favorite import Favorite
from app.models.property import Property
from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

# Postgres unique_violation
_UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    code = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if code is not None:
        return code == _UNIQUE_VIOLATION
    return "uq_favorites_buyer_property" in str(exc)


class FavoriteRepository(BaseRepository):
    """Buyer favorites (saved portal listings)."""

    async def get_ids(self, buyer_id: UUID) -> List[UUID]:
        try:
            result = await self._db.execute(
                select(Favorite.property_id).where(Favorite.buyer_id == buyer_id)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch favorite IDs", exc) from exc

    async def get_properties(self, buyer_id: UUID) -> List[Dict[str, Any]]:
        """Published favorited properties, most recently saved first.

        Non-critical: a failure is logged and yields an empty list.
        """
        try:
            result = await self._db.execute(
                select(Property, Favorite.created_at.label("favorited_at"))
                .join(Favorite, Favorite.property_id == Property.id)
                .where(
                    Favorite.buyer_id == buyer_id,
                    Property.is_published.is_(True),
                )
                .order_by(Favorite.created_at.desc())
            )
            return [
                {"property": row.Property, "favorited_at": row.favorited_at}
                for row in result.all()
            ]
        except SQLAlchemyError as exc:
            logger.error("Failed to fetch favorite properties: %s", exc)
            return []

    async def add(
        self, buyer_id: UUID, property_id: UUID
    ) -> Union[Favorite, Dict[str, bool]]:
        """Save a favorite; a duplicate returns ``{"already_exists": True}``."""
        favorite = Favorite(buyer_id=buyer_id, property_id=property_id)
        self._db.add(favorite)
        try:
            await self._db.commit()
            await self._db.refresh(favorite)
        except IntegrityError as exc:
            await self._db.rollback()
            if _is_unique_violation(exc):
                return {"already_exists": True}
            raise self._query_error("Failed to add favorite", exc) from exc
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise self._query_error("Failed to add favorite", exc) from exc
        return favorite

    async def remove(self, buyer_id: UUID, property_id: UUID) -> bool:
        try:
            await self._db.execute(
                delete(Favorite).where(
                    Favorite.buyer_id == buyer_id,
                    Favorite.property_id == property_id,
                )
            )
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise self._query_error("Failed to remove favorite", exc) from exc
        return True
