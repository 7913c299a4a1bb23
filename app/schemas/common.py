from enum import Enum
from pydantic import BaseModel


class PropertyType(str, Enum):
    apartment = "Apartment"
    villa = "Villa"
    townhouse = "Townhouse"
    office = "Office"
    plot = "Plot"
    commercial = "Commercial"


class PropertyStatus(str, Enum):
    for_sale = "For Sale"
    for_rent = "For Rent"
    off_plan = "Off-Plan"
    ready = "Ready"


class LeadStatus(str, Enum):
    new = "New"
    contacted = "Contacted"
    viewing = "Viewing"
    negotiation = "Negotiation"
    won = "Won"
    lost = "Lost"


class LeadSource(str, Enum):
    whatsapp = "WhatsApp"
    website = "Website"
    referral = "Referral"
    other = "Other"
    portal = "portal"


class UserRole(str, Enum):
    admin = "admin"
    company_owner = "company_owner"
    broker = "broker"
    agent = "agent"
    buyer = "buyer"


class LeadEventType(str, Enum):
    status_changed = "status_changed"
    note_added = "note_added"
    property_assigned = "property_assigned"


class UserActionType(str, Enum):
    search = "search"
    filter = "filter"
    save = "save"
    inquire = "inquire"
    view = "view"


class PortalSort(str, Enum):
    price_asc = "price_asc"
    price_desc = "price_desc"
    date_desc = "date_desc"
    date_asc = "date_asc"
    beds_desc = "beds_desc"


class SuccessResponse(BaseModel):
    """Generic success response base."""

    success: bool = True
