from typing import FrozenSet, Tuple

from app.schemas.common import (
    LeadSource,
    LeadStatus,
    PropertyStatus,
    PropertyType,
    UserRole,
)

PROPERTY_TYPES: Tuple[str, ...] = tuple(t.value for t in PropertyType)
PROPERTY_STATUSES: Tuple[str, ...] = tuple(s.value for s in PropertyStatus)
LEAD_STATUSES: Tuple[str, ...] = tuple(s.value for s in LeadStatus)
LEAD_SOURCES: Tuple[str, ...] = tuple(s.value for s in LeadSource)


def _in_clause(column: str, values: Tuple[str, ...]) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in values)})"


PROPERTY_TYPE_CHECK_CLAUSE: str = _in_clause("type", PROPERTY_TYPES)
PROPERTY_STATUS_CHECK_CLAUSE: str = _in_clause("status", PROPERTY_STATUSES)
LEAD_STATUS_CHECK_CLAUSE: str = _in_clause("status", LEAD_STATUSES)
LEAD_SOURCE_CHECK_CLAUSE: str = (
    f"source IS NULL OR {_in_clause('source', LEAD_SOURCES)}"
)

WON_STATUS: str = LeadStatus.won.value

# Moving a lead to "Contacted" without a date schedules a follow-up
CONTACTED_FOLLOW_UP_DAYS: int = 3
UPCOMING_FOLLOW_UP_DEFAULT_DAYS: int = 7

TOP_PROPERTIES_LIMIT: int = 5
INQUIRY_HISTORY_LIMIT: int = 20

# Image uploads
MAX_UPLOAD_FILES: int = 10
MAX_UPLOAD_SIZE_MB: int = 5

# Roles with full access regardless of the permission matrix
SUPERUSER_ROLES: FrozenSet[str] = frozenset(
    {UserRole.admin.value, UserRole.company_owner.value}
)

# Initial password for team members created without one
DEFAULT_USER_PASSWORD: str = "Temp1234!"
