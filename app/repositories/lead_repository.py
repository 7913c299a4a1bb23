import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from app.core.constants import INQUIRY_HISTORY_LIMIT, UPCOMING_FOLLOW_UP_DEFAULT_DAYS
from app.models.lead import Lead
from app.models.property import Property
from app.repositories.base import BaseRepository
from app.schemas.common import LeadSource, LeadStatus

logger = logging.getLogger(__name__)


class LeadRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``leads`` table.

    Dashboard queries are always scoped to a tenant (``company_id``).
    Lists eagerly load the linked property so ``Lead.property_title``
    is available without another round-trip.
    """

    async def get_by_company(
        self, company_id: UUID, property_id: Optional[UUID] = None
    ) -> List[Lead]:
        """Tenant leads with property titles, newest first."""
        stmt = (
            select(Lead)
            .options(selectinload(Lead.listing))
            .where(Lead.company_id == company_id)
        )
        if property_id is not None:
            stmt = stmt.where(Lead.property_id == property_id)
        try:
            result = await self._db.execute(stmt.order_by(Lead.created_at.desc()))
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch leads", exc) from exc

    async def get_by_property(self, property_id: UUID) -> List[Lead]:
        try:
            result = await self._db.execute(
                select(Lead)
                .where(Lead.property_id == property_id)
                .order_by(Lead.created_at.desc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch leads", exc) from exc

    async def get_by_id(
        self, lead_id: UUID, company_id: Optional[UUID] = None
    ) -> Optional[Lead]:
        """Return a single lead, optionally restricted to one tenant."""
        stmt = select(Lead).options(selectinload(Lead.listing)).where(Lead.id == lead_id)
        if company_id is not None:
            stmt = stmt.where(Lead.company_id == company_id)
        try:
            result = await self._db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch lead details", exc) from exc

    async def _insert(self, lead: Lead, context: str) -> Lead:
        self._db.add(lead)
        try:
            await self._db.commit()
            await self._db.refresh(lead)
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise self._query_error(context, exc) from exc
        return lead

    async def create(self, **kwargs: Any) -> Lead:
        """Insert a new lead and return it with server defaults loaded."""
        return await self._insert(Lead(**kwargs), "Failed to create lead")

    async def update(self, lead: Lead, changes: Dict[str, Any]) -> Lead:
        """Apply *changes* to an already-loaded lead.

        The caller commits, so the lead update and its audit events land
        in one transaction.
        """
        for key, value in changes.items():
            setattr(lead, key, value)
        if "property_id" in changes:
            # the eagerly loaded listing no longer matches the new link
            self._db.expire(lead, ["listing"])
        try:
            await self._db.flush()
            await self._db.refresh(lead, attribute_names=["updated_at"])
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise self._query_error("Failed to update lead", exc) from exc
        return lead

    async def delete(self, lead_id: UUID, company_id: UUID) -> bool:
        try:
            await self._db.execute(
                delete(Lead).where(Lead.id == lead_id, Lead.company_id == company_id)
            )
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise self._query_error("Failed to delete lead", exc) from exc
        return True

    async def get_unassigned(self, company_id: UUID) -> List[Lead]:
        """Tenant leads with no linked property."""
        try:
            result = await self._db.execute(
                select(Lead)
                .where(Lead.company_id == company_id, Lead.property_id.is_(None))
                .order_by(Lead.created_at.desc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch unassigned leads", exc) from exc

    async def bulk_update(
        self, lead_ids: Sequence[UUID], company_id: UUID, changes: Dict[str, Any]
    ) -> List[Lead]:
        """Apply the same patch to every listed lead of the tenant.

        Ids that belong to another tenant are silently skipped; the
        returned list only contains rows that were actually updated.
        """
        stmt = (
            update(Lead)
            .where(Lead.id.in_(list(lead_ids)), Lead.company_id == company_id)
            .values(**changes)
            .returning(Lead)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._db.execute(stmt)
            leads = list(result.scalars().all())
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise self._query_error("Failed to bulk update leads", exc) from exc
        logger.info("Bulk updated %s/%s leads", len(leads), len(lead_ids))
        return leads

    async def bulk_delete(self, lead_ids: Sequence[UUID], company_id: UUID) -> int:
        """Delete every listed lead of the tenant; returns the deleted count."""
        try:
            result = await self._db.execute(
                delete(Lead).where(
                    Lead.id.in_(list(lead_ids)), Lead.company_id == company_id
                )
            )
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise self._query_error("Failed to bulk delete leads", exc) from exc
        logger.info("Bulk deleted %s/%s leads", result.rowcount, len(lead_ids))
        return result.rowcount

    async def get_upcoming_follow_ups(
        self,
        company_id: UUID,
        days: int = UPCOMING_FOLLOW_UP_DEFAULT_DAYS,
        today: Optional[date] = None,
    ) -> List[Lead]:
        """Leads due for follow-up between today and today + *days*, soonest first."""
        start = today or date.today()
        end = start + timedelta(days=days)
        try:
            result = await self._db.execute(
                select(Lead)
                .options(selectinload(Lead.listing))
                .where(
                    Lead.company_id == company_id,
                    Lead.follow_up_date.is_not(None),
                    Lead.follow_up_date >= start,
                    Lead.follow_up_date <= end,
                )
                .order_by(Lead.follow_up_date.asc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch upcoming follow-ups", exc) from exc

    async def analytics_rows(self, company_id: UUID) -> List[Dict[str, Any]]:
        """Minimal per-lead columns needed by the analytics summary."""
        try:
            result = await self._db.execute(
                select(
                    Lead.status,
                    Lead.source,
                    Lead.property_id,
                    Property.title.label("property_title"),
                )
                .outerjoin(Property, Property.id == Lead.property_id)
                .where(Lead.company_id == company_id)
                .order_by(Lead.created_at.asc())
            )
            return [dict(row._mapping) for row in result.all()]
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch leads analytics", exc) from exc

    # -- portal inquiries --------------------------------------------------

    async def create_inquiry_lead(
        self,
        *,
        company_id: UUID,
        name: str,
        email: Optional[str],
        phone: Optional[str] = None,
        message: Optional[str] = None,
        property_id: Optional[UUID] = None,
    ) -> Lead:
        """Create the lead a portal inquiry turns into."""
        lead = Lead(
            company_id=company_id,
            property_id=property_id,
            name=name,
            email=email,
            phone=phone,
            message=message,
            status=LeadStatus.new.value,
            source=LeadSource.portal.value,
        )
        return await self._insert(lead, "Failed to create inquiry lead")

    async def get_inquiries_by_email(self, email: str) -> List[Lead]:
        """Latest portal inquiries sent from *email*.

        Non-critical: a failure is logged and yields an empty history.
        """
        try:
            result = await self._db.execute(
                select(Lead)
                .options(selectinload(Lead.listing))
                .where(Lead.email == email, Lead.source == LeadSource.portal.value)
                .order_by(Lead.created_at.desc())
                .limit(INQUIRY_HISTORY_LIMIT)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            logger.error("Failed to fetch user inquiries for %s: %s", email, exc)
            return []
