"""Property schemas: REST payloads, response shape and the dashboard form."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import Self

from app.schemas.common import PropertyStatus, PropertyType


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyBase(BaseModel):
    location: Optional[str] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    area: Optional[float] = Field(None, ge=0)
    type: Optional[PropertyType] = None
    status: Optional[PropertyStatus] = None
    images: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    furnished: bool = False
    is_published: bool = False
    description: Optional[str] = None
    notes: Optional[str] = None
    handover_date: Optional[date] = None
    payment_plan: Optional[str] = None
    rera_id: Optional[str] = None
    roi_estimate: Optional[float] = None

    @field_validator("images", "amenities", mode="before")
    @classmethod
    def _empty_lists(cls, value: Any) -> Any:
        return _none_to_list(value)


class PropertyCreate(PropertyBase):
    """Body of POST /api/properties.

    Tenant and creator are always taken from the session, never from
    the body.
    """

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    title: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)

    @model_validator(mode="after")
    def published_needs_image(self) -> Self:
        if self.is_published and not self.images:
            raise ValueError("Published properties must have at least one image")
        return self


class PropertyUpdate(BaseModel):
    """Body of PUT /api/properties/{id}; only the sent fields change."""

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    title: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, gt=0)
    location: Optional[str] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    area: Optional[float] = Field(None, ge=0)
    type: Optional[PropertyType] = None
    status: Optional[PropertyStatus] = None
    images: Optional[List[str]] = None
    amenities: Optional[List[str]] = None
    furnished: Optional[bool] = None
    is_published: Optional[bool] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    handover_date: Optional[date] = None
    payment_plan: Optional[str] = None
    rera_id: Optional[str] = None
    roi_estimate: Optional[float] = None


# ---------------------------------------------------------------------------
# Dashboard form (nested sections, flattened before posting)
# ---------------------------------------------------------------------------


class BasicInfoSection(BaseModel):
    title: str = Field(..., min_length=3)
    price: float = Field(..., ge=0)
    location: str = Field(..., min_length=2)
    type: PropertyType
    status: PropertyStatus


class SpecificationsSection(BaseModel):
    bedrooms: int = Field(0, ge=0)
    bathrooms: int = Field(0, ge=0)
    area: float = Field(0, ge=0)
    furnished: bool = False


class PublishingSection(BaseModel):
    description: Optional[str] = None
    is_published: bool = True
    notes: Optional[str] = None


class PropertyFormValues(BaseModel):
    """Values collected by the multi-step property form."""

    basic_info: BasicInfoSection
    specifications: SpecificationsSection = Field(default_factory=SpecificationsSection)
    publishing: PublishingSection = Field(default_factory=PublishingSection)
    images: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    handover_date: Optional[date] = None
    payment_plan: Optional[str] = None
    rera_id: Optional[str] = None
    roi_estimate: Optional[float] = None

    def to_payload(self) -> Dict[str, Any]:
        """Flatten the sections into the JSON body the REST endpoints take."""
        payload: Dict[str, Any] = {}
        for section in (self.basic_info, self.specifications, self.publishing):
            payload.update(section.model_dump(mode="json"))
        payload.update(
            self.model_dump(
                mode="json",
                exclude={"basic_info", "specifications", "publishing"},
            )
        )
        return payload


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: Optional[UUID] = None
    broker_id: Optional[UUID] = None
    title: str
    price: float
    location: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    area: Optional[float] = None
    type: Optional[str] = None
    status: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    furnished: bool = False
    is_published: bool = False
    description: Optional[str] = None
    notes: Optional[str] = None
    handover_date: Optional[date] = None
    payment_plan: Optional[str] = None
    rera_id: Optional[str] = None
    roi_estimate: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("images", "amenities", mode="before")
    @classmethod
    def _empty_lists(cls, value: Any) -> Any:
        return _none_to_list(value)


class PropertyResponse(BaseModel):
    property: PropertyOut


class PropertyListResponse(BaseModel):
    properties: List[PropertyOut] = Field(default_factory=list)


class UploadResponse(BaseModel):
    urls: List[str] = Field(default_factory=list)


class ImageDeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(..., alias="imageUrl", min_length=1)
