from typing import Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query

from app.api.deps import (
    CurrentUser,
    get_analytics_service,
    get_lead_service,
    get_notifier,
    require_permission,
)
from app.core.constants import UPCOMING_FOLLOW_UP_DEFAULT_DAYS
from app.schemas.analytics import AnalyticsResponse
from app.schemas.common import SuccessResponse
from app.schemas.lead import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    BulkUpdateRequest,
    BulkUpdateResponse,
    LeadCreate,
    LeadEventOut,
    LeadEventsResponse,
    LeadListResponse,
    LeadOut,
    LeadResponse,
    LeadUpdate,
)
from app.services.analytics import LeadAnalyticsService
from app.services.lead_service import LeadService
from app.services.notifications import EmailNotifier, send_quietly

router = APIRouter(prefix="/leads", tags=["Leads"])


@router.get("", response_model=LeadListResponse)
async def list_leads(
    property_id: Optional[UUID] = Query(None, alias="propertyId"),
    current: CurrentUser = Depends(require_permission("leads", "view")),
    service: LeadService = Depends(get_lead_service),
) -> LeadListResponse:
    """Tenant leads with property titles, newest first."""
    leads = await service.list_leads(current.tenant_id, property_id)
    return LeadListResponse(data=[LeadOut.model_validate(lead) for lead in leads])


@router.post("", response_model=LeadResponse, status_code=201)
async def create_lead(
    payload: LeadCreate,
    current: CurrentUser = Depends(require_permission("leads", "create")),
    service: LeadService = Depends(get_lead_service),
) -> LeadResponse:
    lead = await service.create_lead(payload, current.user, current.tenant_id)
    return LeadResponse(data=LeadOut.model_validate(lead))


@router.put("", response_model=BulkUpdateResponse)
async def bulk_update_leads(
    payload: Optional[BulkUpdateRequest] = Body(None),
    current: CurrentUser = Depends(require_permission("leads", "edit")),
    service: LeadService = Depends(get_lead_service),
) -> BulkUpdateResponse:
    """Apply one patch (e.g. a status) to every selected lead."""
    payload = payload or BulkUpdateRequest()
    leads = await service.bulk_update(payload.ids, payload.data, current.tenant_id)
    return BulkUpdateResponse(
        data=[LeadOut.model_validate(lead) for lead in leads],
        count=len(leads),
    )


@router.delete("", response_model=BulkDeleteResponse)
async def bulk_delete_leads(
    payload: Optional[BulkDeleteRequest] = Body(None),
    current: CurrentUser = Depends(require_permission("leads", "delete")),
    service: LeadService = Depends(get_lead_service),
) -> BulkDeleteResponse:
    payload = payload or BulkDeleteRequest()
    count = await service.bulk_delete(payload.ids, current.tenant_id)
    return BulkDeleteResponse(count=count)


@router.get("/analytics", response_model=AnalyticsResponse, response_model_by_alias=True)
async def leads_analytics(
    current: CurrentUser = Depends(require_permission("analytics")),
    service: LeadAnalyticsService = Depends(get_analytics_service),
) -> AnalyticsResponse:
    """Counts by source and status, conversion rate and top properties."""
    return AnalyticsResponse(data=await service.summary(current.tenant_id))


@router.get("/upcoming", response_model=LeadListResponse)
async def upcoming_follow_ups(
    days: int = Query(UPCOMING_FOLLOW_UP_DEFAULT_DAYS, ge=0, le=365),
    current: CurrentUser = Depends(require_permission("leads", "view")),
    service: LeadService = Depends(get_lead_service),
) -> LeadListResponse:
    leads = await service.upcoming_follow_ups(current.tenant_id, days)
    return LeadListResponse(data=[LeadOut.model_validate(lead) for lead in leads])


@router.put("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: UUID,
    payload: LeadUpdate,
    background_tasks: BackgroundTasks,
    current: CurrentUser = Depends(require_permission("leads", "edit")),
    service: LeadService = Depends(get_lead_service),
    notifier: EmailNotifier = Depends(get_notifier),
) -> LeadResponse:
    """Update a lead; status, note and property changes are audited.

    Status notifications are sent after the response, best effort.
    """
    result = await service.update_lead(lead_id, payload, current.user, current.tenant_id)
    for message in result.emails:
        background_tasks.add_task(send_quietly, notifier, message)
    return LeadResponse(data=LeadOut.model_validate(result.lead))


@router.delete("/{lead_id}", response_model=SuccessResponse)
async def delete_lead(
    lead_id: UUID,
    current: CurrentUser = Depends(require_permission("leads", "delete")),
    service: LeadService = Depends(get_lead_service),
) -> SuccessResponse:
    await service.delete_lead(lead_id, current.tenant_id)
    return SuccessResponse()


@router.get("/{lead_id}/events", response_model=LeadEventsResponse)
async def lead_events(
    lead_id: UUID,
    current: CurrentUser = Depends(require_permission("leads", "view")),
    service: LeadService = Depends(get_lead_service),
) -> LeadEventsResponse:
    events = await service.list_events(lead_id, current.tenant_id)
    return LeadEventsResponse(events=[LeadEventOut.model_validate(e) for e in events])
