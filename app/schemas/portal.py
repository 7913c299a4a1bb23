"""Portal (buyer-facing) schemas: listing filters, favorites and inquiries."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.schemas.common import PortalSort, PropertyStatus, PropertyType, SuccessResponse
from app.schemas.lead import LeadOut
from app.schemas.property import PropertyOut

# Listings per portal page unless the client asks otherwise
DEFAULT_PAGE_SIZE = 12


class PropertyFilters(BaseModel):
    """Dashboard advanced-search filters (tenant scoped)."""

    price_min: Optional[float] = Field(None, ge=0)
    price_max: Optional[float] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    status: List[PropertyStatus] = Field(default_factory=list)
    type: List[PropertyType] = Field(default_factory=list)


class PortalPropertyFilters(PropertyFilters):
    """Filters accepted by the public listing search.

    A field left as ``None`` (or an empty list) means "no constraint",
    never a default value.
    """

    query: Optional[str] = None
    location: Optional[str] = None
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=100)
    sort_by: PortalSort = PortalSort.date_desc

    @field_validator("query", "location")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class PublishedPage(BaseModel):
    """One page of published listings plus the pagination envelope."""

    model_config = ConfigDict(populate_by_name=True)

    properties: List[PropertyOut] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    total_pages: int = Field(0, alias="totalPages")


class FavoriteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    property_id: UUID = Field(..., alias="propertyId")


class FavoriteIdsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    favorite_ids: List[UUID] = Field(default_factory=list, alias="favoriteIds")


class FavoriteToggleResponse(SuccessResponse):
    data: Optional[dict] = None


class FavoriteProperty(PropertyOut):
    favorited_at: Optional[datetime] = None


class InquiryRequest(BaseModel):
    """Body of POST /api/portal/inquire."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    message: Optional[str] = None
    property_id: Optional[UUID] = Field(None, alias="propertyId")


class InquiryHistoryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: Optional[str] = None
    message: Optional[str] = None
    status: str
    source: Optional[str] = None
    property_id: Optional[UUID] = None
    property_title: Optional[str] = None
    created_at: Optional[datetime] = None


class InquiryResponse(SuccessResponse):
    lead: LeadOut


class InquiryHistoryResponse(BaseModel):
    inquiries: List[InquiryHistoryItem] = Field(default_factory=list)


class FavoritePropertiesResponse(BaseModel):
    properties: List[FavoriteProperty] = Field(default_factory=list)
