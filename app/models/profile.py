from sqlalchemy import Boolean, Column, DateTime, String, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.sql import func

from app.models.base import Base


class Profile(Base):
    """Application-side data for an auth user.

    ``id`` equals the hosted auth user id.  ``company_id`` scopes team
    members to their tenant; owners leave it empty and act as their own
    tenant.
    """

    __tablename__ = "profiles"
    id = Column(UUID(as_uuid=True), primary_key=True)
    full_name = Column(String(255))
    email = Column(String(255))
    company_name = Column(String(255))
    company_id = Column(UUID(as_uuid=True), index=True)
    role = Column(String(50), nullable=False, server_default="agent")
    permissions = Column(JSONB, nullable=False, server_default=text("'{}'::jsonb"))
    notifications = Column(JSONB, nullable=False, server_default=text("'{}'::jsonb"))
    is_disabled = Column(Boolean, nullable=False, server_default=text("false"))
    expiry_date = Column(DateTime(timezone=True))
    avatar_url = Column(String(512))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def tenant_id(self):
        return self.company_id or self.id
