from sqlalchemy import CheckConstraint, Column, DateTime, String, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.sql import func

from app.models.base import Base


class UserActionLog(Base):
    """Portal activity trail (searches, saves, inquiries)."""

    __tablename__ = "user_action_logs"
    id = Column(UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid())
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    action_type = Column(String(20), nullable=False)
    details = Column(JSONB, nullable=False, server_default=text("'{}'::jsonb"))
    property_id = Column(UUID(as_uuid=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "action_type IN ('search', 'filter', 'save', 'inquire', 'view')",
            name="ck_user_action_type",
        ),
    )
