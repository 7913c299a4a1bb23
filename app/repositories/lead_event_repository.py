from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.models.lead_event import LeadEvent
from app.repositories.base import BaseRepository


class LeadEventRepository(BaseRepository):
    """Append-only access to the ``lead_events`` audit table."""

    async def list_for_lead(self, lead_id: UUID) -> List[LeadEvent]:
        """Events of a lead, newest first."""
        try:
            result = await self._db.execute(
                select(LeadEvent)
                .where(LeadEvent.lead_id == lead_id)
                .order_by(LeadEvent.created_at.desc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise self._query_error("Failed to fetch lead events", exc) from exc

    async def create(
        self,
        lead_id: UUID,
        event_type: str,
        old_value: Optional[str],
        new_value: Optional[str],
        broker_id: Optional[UUID],
    ) -> LeadEvent:
        """Stage an event in the current unit of work (caller commits)."""
        event = LeadEvent(
            lead_id=lead_id,
            event_type=event_type,
            old_value=old_value,
            new_value=new_value,
            broker_id=broker_id,
        )
        self._db.add(event)
        return event
