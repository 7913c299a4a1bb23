from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from app.api.deps import CurrentUser, get_current_user, get_optional_user, get_portal_service
from app.core.config import settings
from app.core.rate_limit import limiter
from app.models.favorite import Favorite
from app.schemas.common import PortalSort, PropertyStatus, PropertyType, SuccessResponse
from app.schemas.lead import LeadOut
from app.schemas.portal import (
    FavoriteIdsResponse,
    FavoritePropertiesResponse,
    FavoriteProperty,
    FavoriteRequest,
    FavoriteToggleResponse,
    InquiryHistoryItem,
    InquiryHistoryResponse,
    InquiryRequest,
    InquiryResponse,
    PortalPropertyFilters,
    PublishedPage,
)
from app.schemas.property import PropertyOut, PropertyResponse
from app.services.portal_service import PortalService

router = APIRouter(prefix="/portal", tags=["Portal"])


@router.get("/properties", response_model=PublishedPage)
async def search_properties(
    q: Optional[str] = Query(None, description="Free-text search"),
    price_min: Optional[float] = Query(None, alias="priceMin", ge=0),
    price_max: Optional[float] = Query(None, alias="priceMax", ge=0),
    bedrooms: Optional[int] = Query(None, ge=0),
    status: List[PropertyStatus] = Query([]),
    type: List[PropertyType] = Query([]),
    location: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.PORTAL_PAGE_SIZE, ge=1, le=100),
    sort_by: PortalSort = Query(PortalSort.date_desc, alias="sortBy"),
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: PortalService = Depends(get_portal_service),
) -> PublishedPage:
    """Published listings matching the buyer's filters, one page at a time."""
    filters = PortalPropertyFilters(
        query=q,
        price_min=price_min,
        price_max=price_max,
        bedrooms=bedrooms,
        status=status,
        type=type,
        location=location,
        page=page,
        limit=limit,
        sort_by=sort_by,
    )
    result = await service.search(filters, user.user if user else None)
    return PublishedPage(
        properties=[PropertyOut.model_validate(p) for p in result["properties"]],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
        total_pages=result["total_pages"],
    )


@router.get("/properties/{property_id}", response_model=PropertyResponse)
async def get_listing(
    property_id: UUID,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: PortalService = Depends(get_portal_service),
) -> PropertyResponse:
    prop = await service.get_listing(property_id, user.user if user else None)
    return PropertyResponse(property=PropertyOut.model_validate(prop))


# -- favorites --------------------------------------------------------------


@router.get("/favorites", response_model=FavoriteIdsResponse)
async def favorite_ids(
    current: CurrentUser = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
) -> FavoriteIdsResponse:
    return FavoriteIdsResponse(favorite_ids=await service.favorite_ids(current.user))


@router.get("/favorites/properties", response_model=FavoritePropertiesResponse)
async def favorite_properties(
    current: CurrentUser = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
) -> FavoritePropertiesResponse:
    rows = await service.favorite_properties(current.user)
    return FavoritePropertiesResponse(
        properties=[
            FavoriteProperty.model_validate(
                {
                    **PropertyOut.model_validate(row["property"]).model_dump(),
                    "favorited_at": row["favorited_at"],
                }
            )
            for row in rows
        ]
    )


@router.post("/favorites", response_model=FavoriteToggleResponse)
async def add_favorite(
    payload: FavoriteRequest,
    current: CurrentUser = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
) -> FavoriteToggleResponse:
    """Save a listing; saving it twice reports ``alreadyExists``."""
    result = await service.add_favorite(current.user, payload.property_id)
    if isinstance(result, Favorite):
        data = {
            "id": str(result.id),
            "buyer_id": str(result.buyer_id),
            "property_id": str(result.property_id),
        }
    else:
        data = {"alreadyExists": bool(result.get("already_exists"))}
    return FavoriteToggleResponse(data=data)


@router.delete("/favorites", response_model=SuccessResponse)
async def remove_favorite(
    payload: FavoriteRequest,
    current: CurrentUser = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
) -> SuccessResponse:
    await service.remove_favorite(current.user, payload.property_id)
    return SuccessResponse()


# -- inquiries --------------------------------------------------------------


@router.post("/inquire", response_model=InquiryResponse)
@limiter.limit(settings.INQUIRY_RATE_LIMIT)
async def submit_inquiry(
    request: Request,
    payload: InquiryRequest,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: PortalService = Depends(get_portal_service),
) -> InquiryResponse:
    """Create a portal lead for the listing's tenant.

    Anonymous visitors may inquire; rate-limited per client IP.
    """
    lead = await service.submit_inquiry(payload, user.user if user else None)
    return InquiryResponse(lead=LeadOut.model_validate(lead))


@router.get("/inquiries", response_model=InquiryHistoryResponse)
async def inquiry_history(
    current: CurrentUser = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
) -> InquiryHistoryResponse:
    """The caller's latest portal inquiries."""
    leads = await service.inquiry_history(current.user)
    return InquiryHistoryResponse(
        inquiries=[InquiryHistoryItem.model_validate(lead) for lead in leads]
    )
