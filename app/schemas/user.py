"""Team-user schemas: permission matrix, notification flags and the user form."""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.schemas.common import UserRole


class ModulePermissions(BaseModel):
    view: bool = False
    edit: bool = False
    create: bool = False
    delete: bool = False


class UserPermissions(BaseModel):
    """Per-module access matrix stored on the profile as JSON."""

    properties: ModulePermissions = Field(default_factory=ModulePermissions)
    leads: ModulePermissions = Field(default_factory=ModulePermissions)
    users: ModulePermissions = Field(default_factory=ModulePermissions)
    analytics: bool = False
    profile: bool = False

    def allows(self, module: str, action: Optional[str] = None) -> bool:
        """Return whether *action* on *module* is granted.

        Boolean modules (analytics, profile) ignore *action*.
        """
        entry = getattr(self, module, None)
        if isinstance(entry, bool):
            return entry
        if isinstance(entry, ModulePermissions):
            return bool(getattr(entry, action or "view", False))
        return False


class UserNotifications(BaseModel):
    on_login: bool = False
    on_disable: bool = True
    on_expiry: bool = True


class UserForm(BaseModel):
    """Body of POST /api/users and PUT /api/users/{id}.

    The password is optional when editing; an empty string means
    "keep the current one".
    """

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    full_name: str = Field(..., min_length=2)
    email: EmailStr
    password: Optional[str] = None
    role: UserRole = UserRole.agent.value
    is_disabled: bool = False
    expiry_date: Optional[datetime] = None
    permissions: UserPermissions = Field(default_factory=UserPermissions)
    notifications: UserNotifications = Field(default_factory=UserNotifications)

    @field_validator("password")
    @classmethod
    def password_min_length(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if len(value) < 6:
            raise ValueError("Password must be at least 6 characters")
        return value

    @field_validator("expiry_date", mode="before")
    @classmethod
    def blank_expiry(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def profile_fields(self) -> Dict[str, Any]:
        """Columns written to the ``profiles`` row."""
        return {
            "full_name": self.full_name,
            "role": self.role,
            "is_disabled": self.is_disabled,
            "expiry_date": self.expiry_date,
            "permissions": self.permissions.model_dump(),
            "notifications": self.notifications.model_dump(),
        }


def unwrap_user_payload(payload: Dict[str, Any]) -> Tuple[Dict[str, Any], Optional[str]]:
    """Split a user request body into (form fields, admin note).

    Multipart-style clients send the form serialised under ``data``;
    plain JSON clients send the fields at the top level.
    """
    note = payload.get("note")
    raw = payload.get("data")
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise ValueError("Malformed user payload") from exc
    if isinstance(raw, dict):
        return raw, note
    fields = {k: v for k, v in payload.items() if k != "note"}
    return fields, note


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: Optional[str] = None
    email: Optional[str] = None
    company_id: Optional[UUID] = None
    role: str
    is_disabled: bool = False
    expiry_date: Optional[datetime] = None
    permissions: Optional[Dict[str, Any]] = None
    notifications: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


class UserResponse(BaseModel):
    success: bool = True
    data: UserOut


class UserListResponse(BaseModel):
    data: List[UserOut] = Field(default_factory=list)
