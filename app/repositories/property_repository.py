import logging
import math
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import Select, delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError

from app.models.property import Property
from app.repositories.base import BaseRepository
from app.schemas.common import PortalSort
from app.schemas.portal import PortalPropertyFilters, PropertyFilters

logger = logging.getLogger(__name__)

_PORTAL_ORDER = {
    PortalSort.price_asc: (Property.price.asc(),),
    PortalSort.price_desc: (Property.price.desc(),),
    PortalSort.date_asc: (Property.created_at.asc(),),
    PortalSort.date_desc: (Property.created_at.desc(),),
    PortalSort.beds_desc: (Property.bedrooms.desc().nulls_last(),),
}


def _apply_common_filters(stmt: Select, filters: PropertyFilters) -> Select:
    """Add only the constraints that are actually set on *filters*."""
    if filters.price_min is not None:
        stmt = stmt.where(Property.price >= filters.price_min)
    if filters.price_max is not None:
        stmt = stmt.where(Property.price <= filters.price_max)
    if filters.bedrooms is not None:
        stmt = stmt.where(Property.bedrooms >= filters.bedrooms)
    if filters.status:
        stmt = stmt.where(Property.status.in_([s.value for s in filters.status]))
    if filters.type:
        stmt = stmt.where(Property.type.in_([t.value for t in filters.type]))
    return stmt


def build_published_query(filters: PortalPropertyFilters) -> Select:
    """Compose the portal search statement (no offset/limit).

    Unset filters add no WHERE clause at all; the sort falls back to
    newest first.
    """
    stmt = select(Property).where(Property.is_published.is_(True))
    if filters.query:
        pattern = f"%{filters.query}%"
        stmt = stmt.where(
            or_(
                Property.title.ilike(pattern),
                Property.description.ilike(pattern),
                Property.location.ilike(pattern),
            )
        )
    stmt = _apply_common_filters(stmt, filters)
    if filters.location:
        stmt = stmt.where(Property.location.ilike(f"%{filters.location}%"))
    order = _PORTAL_ORDER.get(filters.sort_by, _PORTAL_ORDER[PortalSort.date_desc])
    return stmt.order_by(*order, Property.id)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


class PropertyRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``properties`` table."""

    # -- dashboard (tenant scoped) ---------------------------------------

    async def get_by_company(self, company_id: UUID) -> List[Property]:
        """All properties of a tenant, newest first."""
        try:
            result = await self._db.execute(
                select(Property)
                .where(Property.company_id == company_id)
                .order_by(Property.created_at.desc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch properties", exc) from exc

    async def get_filtered(
        self, company_id: UUID, filters: PropertyFilters
    ) -> List[Property]:
        """Tenant properties matching the dashboard advanced search."""
        stmt = select(Property).where(Property.company_id == company_id)
        stmt = _apply_common_filters(stmt, filters).order_by(
            Property.created_at.desc()
        )
        try:
            result = await self._db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch filtered properties", exc) from exc

    async def get_by_id(self, property_id: UUID) -> Optional[Property]:
        try:
            result = await self._db.execute(
                select(Property).where(Property.id == property_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch property details", exc) from exc

    async def create(self, **kwargs: Any) -> Property:
        """Insert a property and return it with server defaults loaded."""
        prop = Property(**kwargs)
        self._db.add(prop)
        try:
            await self._db.commit()
            await self._db.refresh(prop)
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise self._query_error("Failed to create property", exc) from exc
        return prop

    async def update(self, prop: Property, changes: Dict[str, Any]) -> Property:
        """Apply *changes* to an already-loaded property."""
        for key, value in changes.items():
            setattr(prop, key, value)
        try:
            await self._db.commit()
            await self._db.refresh(prop)
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise self._query_error("Failed to update property", exc) from exc
        return prop

    async def delete(self, property_id: UUID) -> bool:
        try:
            await self._db.execute(delete(Property).where(Property.id == property_id))
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise self._query_error("Failed to delete property", exc) from exc
        return True

    # -- public portal ---------------------------------------------------

    async def get_published(self, filters: PortalPropertyFilters) -> Dict[str, Any]:
        """One page of published properties plus the pagination envelope.

        Runs the count over the same filtered statement so ``total`` is
        correct even when the requested page is past the end.
        """
        stmt = build_published_query(filters)
        offset = (filters.page - 1) * filters.limit
        count_stmt = select(func.count()).select_from(
            stmt.order_by(None).subquery()
        )
        try:
            total = (await self._db.execute(count_stmt)).scalar_one()
            result = await self._db.execute(stmt.offset(offset).limit(filters.limit))
            properties = list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch published properties", exc) from exc

        logger.debug(
            "Portal search page=%s limit=%s matched %s properties",
            filters.page,
            filters.limit,
            total,
        )
        return {
            "properties": properties,
            "total": total,
            "page": filters.page,
            "limit": filters.limit,
            "total_pages": total_pages(total, filters.limit),
        }

    async def get_published_by_id(self, property_id: UUID) -> Optional[Property]:
        try:
            result = await self._db.execute(
                select(Property).where(
                    Property.id == property_id,
                    Property.is_published.is_(True),
                )
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch property", exc) from exc

    async def get_owner_company(self, property_id: UUID) -> Optional[UUID]:
        """Tenant that owns a property (used to route portal inquiries)."""
        try:
            result = await self._db.execute(
                select(Property.company_id).where(Property.id == property_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch property owner", exc) from exc
