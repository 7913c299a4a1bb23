"""Lead-specific Pydantic schemas (form, update, bulk actions, response)."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.schemas.common import LeadEventType, LeadSource, LeadStatus, SuccessResponse

# Fields a form may send as "" meaning "not set"
_BLANKABLE_FIELDS = ("email", "phone", "message", "source", "property_id", "notes", "follow_up_date")


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class LeadCreate(BaseModel):
    """Body of POST /api/leads and the dashboard lead form.

    Empty strings coming from the form are stored as NULL.
    """

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    name: str = Field(..., min_length=2)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    status: LeadStatus = LeadStatus.new.value
    source: Optional[LeadSource] = None
    property_id: Optional[UUID] = None
    notes: Optional[str] = None
    follow_up_date: Optional[date] = None

    @field_validator(*_BLANKABLE_FIELDS, mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class LeadUpdate(BaseModel):
    """Body of PUT /api/leads/{id}.

    Only the fields present in the request are written; sending
    ``property_id: ""`` explicitly unassigns the property.
    """

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    name: Optional[str] = Field(None, min_length=2)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    status: Optional[LeadStatus] = None
    source: Optional[LeadSource] = None
    property_id: Optional[UUID] = None
    notes: Optional[str] = None
    follow_up_date: Optional[date] = None

    @field_validator(*_BLANKABLE_FIELDS, mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)

    # Optional means "may be omitted"; these columns are NOT NULL
    @field_validator("name", "status")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value

    def changes(self) -> Dict[str, Any]:
        """Sent fields only, as column values."""
        return self.model_dump(exclude_unset=True, mode="python")


class BulkUpdateRequest(BaseModel):
    """Body of PUT /api/leads: one patch applied to many leads."""

    ids: List[UUID] = Field(default_factory=list)
    data: LeadUpdate = Field(default_factory=LeadUpdate)


class BulkDeleteRequest(BaseModel):
    ids: List[UUID] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeadOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: Optional[UUID] = None
    broker_id: Optional[UUID] = None
    property_id: Optional[UUID] = None
    property_title: Optional[str] = None
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None
    status: str
    source: Optional[str] = None
    follow_up_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LeadEventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    lead_id: UUID
    event_type: LeadEventType
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    broker_id: Optional[UUID] = None
    created_at: Optional[datetime] = None


class LeadResponse(BaseModel):
    data: LeadOut


class LeadListResponse(BaseModel):
    data: List[LeadOut] = Field(default_factory=list)


class BulkUpdateResponse(BaseModel):
    data: List[LeadOut] = Field(default_factory=list)
    count: int = 0


class BulkDeleteResponse(SuccessResponse):
    count: int = 0


class LeadEventsResponse(BaseModel):
    events: List[LeadEventOut] = Field(default_factory=list)
