"""Pydantic schemas package – re-exports for convenience."""

# Common enums
from app.schemas.common import (
    PropertyType as PropertyType,
    PropertyStatus as PropertyStatus,
    LeadStatus as LeadStatus,
    LeadSource as LeadSource,
    LeadEventType as LeadEventType,
    UserRole as UserRole,
    UserActionType as UserActionType,
    PortalSort as PortalSort,
    SuccessResponse as SuccessResponse,
)

# Property schemas
from app.schemas.property import (
    PropertyCreate as PropertyCreate,
    PropertyUpdate as PropertyUpdate,
    PropertyFormValues as PropertyFormValues,
    PropertyOut as PropertyOut,
    PropertyResponse as PropertyResponse,
    PropertyListResponse as PropertyListResponse,
    UploadResponse as UploadResponse,
    ImageDeleteRequest as ImageDeleteRequest,
)

# Lead schemas
from app.schemas.lead import (
    LeadCreate as LeadCreate,
    LeadUpdate as LeadUpdate,
    BulkUpdateRequest as BulkUpdateRequest,
    BulkDeleteRequest as BulkDeleteRequest,
    LeadOut as LeadOut,
    LeadEventOut as LeadEventOut,
)

# User schemas
from app.schemas.user import (
    UserPermissions as UserPermissions,
    UserNotifications as UserNotifications,
    UserForm as UserForm,
    UserOut as UserOut,
)

# Portal schemas
from app.schemas.portal import (
    PropertyFilters as PropertyFilters,
    PortalPropertyFilters as PortalPropertyFilters,
    PublishedPage as PublishedPage,
    InquiryRequest as InquiryRequest,
)

# Analytics schemas
from app.schemas.analytics import (
    LeadsAnalytics as LeadsAnalytics,
    TopProperty as TopProperty,
)
