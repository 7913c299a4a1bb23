import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from app.core.backend import AuthUser
from app.core.constants import CONTACTED_FOLLOW_UP_DAYS
from app.core.exceptions import InvalidRequestError, LeadNotFoundError
from app.models.lead import Lead
from app.models.lead_event import LeadEvent
from app.repositories.lead_event_repository import LeadEventRepository
from app.repositories.lead_repository import LeadRepository
from app.schemas.common import LeadEventType, LeadStatus
from app.schemas.lead import LeadCreate, LeadUpdate
from app.services.notifications import EmailMessage, lead_status_change_email

logger = logging.getLogger(__name__)

UNASSIGNED = "Unassigned"


@dataclass
class LeadUpdateResult:
    lead: Lead
    events: List[LeadEvent] = field(default_factory=list)
    emails: List[EmailMessage] = field(default_factory=list)


def apply_follow_up_rule(changes: Dict[str, Any], today: date) -> Dict[str, Any]:
    """Schedule a follow-up when a lead moves to Contacted without one."""
    if changes.get("status") == LeadStatus.contacted.value and not changes.get(
        "follow_up_date"
    ):
        changes["follow_up_date"] = today + timedelta(days=CONTACTED_FOLLOW_UP_DAYS)
    return changes


class LeadService:
    """Orchestrates the lead workflows of the dashboard.

    All database operations are delegated to the injected repositories;
    every query is scoped to the caller's tenant.
    """

    def __init__(
        self, lead_repo: LeadRepository, event_repo: LeadEventRepository
    ) -> None:
        self._lead_repo = lead_repo
        self._event_repo = event_repo

    async def list_leads(
        self, tenant_id: UUID, property_id: Optional[UUID] = None
    ) -> List[Lead]:
        return await self._lead_repo.get_by_company(tenant_id, property_id)

    async def create_lead(
        self, payload: LeadCreate, user: AuthUser, tenant_id: UUID
    ) -> Lead:
        """Create a lead owned by the caller's tenant."""
        lead = await self._lead_repo.create(
            **payload.model_dump(),
            company_id=tenant_id,
            broker_id=user.id,
        )
        logger.info("Lead %s created by %s", lead.id, user.id)
        return lead

    async def update_lead(
        self,
        lead_id: UUID,
        payload: LeadUpdate,
        user: AuthUser,
        tenant_id: UUID,
        today: Optional[date] = None,
    ) -> LeadUpdateResult:
        """Update one lead, apply automation rules and record audit events.

        A status change, a new note and a changed property assignment
        each append one ``LeadEvent``.  A status change on a lead with an
        email address also yields a notification for the caller to send.
        """
        lead = await self._lead_repo.get_by_id(lead_id, company_id=tenant_id)
        if lead is None:
            raise LeadNotFoundError()

        changes = apply_follow_up_rule(payload.changes(), today or date.today())
        old_status = lead.status
        old_notes = lead.notes
        old_property_id = lead.property_id
        property_title = lead.property_title

        await self._lead_repo.update(lead, changes)

        result = LeadUpdateResult(lead=lead)
        new_status = changes.get("status")
        if new_status and new_status != old_status:
            result.events.append(
                await self._event_repo.create(
                    lead_id, LeadEventType.status_changed.value, old_status, new_status, user.id
                )
            )
            if lead.email:
                result.emails.append(
                    lead_status_change_email(
                        to=lead.email,
                        broker_name=user.display_name,
                        lead_name=lead.name or "Client",
                        old_status=old_status,
                        new_status=new_status,
                        property_title=property_title or "our properties",
                    )
                )

        new_notes = changes.get("notes")
        if new_notes and new_notes != old_notes:
            result.events.append(
                await self._event_repo.create(
                    lead_id, LeadEventType.note_added.value, old_notes, new_notes, user.id
                )
            )

        if "property_id" in changes and changes["property_id"] != old_property_id:
            new_property_id = changes["property_id"]
            result.events.append(
                await self._event_repo.create(
                    lead_id,
                    LeadEventType.property_assigned.value,
                    str(old_property_id) if old_property_id else UNASSIGNED,
                    str(new_property_id) if new_property_id else UNASSIGNED,
                    user.id,
                )
            )

        await self._lead_repo.commit()
        logger.info(
            "Lead %s updated by %s (%s events)", lead_id, user.id, len(result.events)
        )
        return result

    async def delete_lead(self, lead_id: UUID, tenant_id: UUID) -> bool:
        return await self._lead_repo.delete(lead_id, tenant_id)

    async def bulk_update(
        self, lead_ids: Sequence[UUID], payload: LeadUpdate, tenant_id: UUID
    ) -> List[Lead]:
        """Apply one patch to many leads; no audit events are written."""
        if not lead_ids:
            raise InvalidRequestError("No lead IDs provided")
        changes = payload.changes()
        if not changes:
            raise InvalidRequestError("No fields to update")
        return await self._lead_repo.bulk_update(lead_ids, tenant_id, changes)

    async def bulk_delete(self, lead_ids: Sequence[UUID], tenant_id: UUID) -> int:
        if not lead_ids:
            raise InvalidRequestError("No lead IDs provided")
        await self._lead_repo.bulk_delete(lead_ids, tenant_id)
        return len(lead_ids)

    async def upcoming_follow_ups(self, tenant_id: UUID, days: int) -> List[Lead]:
        return await self._lead_repo.get_upcoming_follow_ups(tenant_id, days)

    async def list_events(self, lead_id: UUID, tenant_id: UUID) -> List[LeadEvent]:
        lead = await self._lead_repo.get_by_id(lead_id, company_id=tenant_id)
        if lead is None:
            raise LeadNotFoundError()
        return await self._event_repo.list_for_lead(lead_id)
