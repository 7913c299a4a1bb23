from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.models.base import Base


class LeadEvent(Base):
    """Append-only audit record of a change to a tracked lead field."""

    __tablename__ = "lead_events"
    id = Column(UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid())
    lead_id = Column(UUID(as_uuid=True), ForeignKey("leads.id", ondelete="CASCADE"), nullable=False)
    event_type = Column(String(50), nullable=False)
    old_value = Column(Text)
    new_value = Column(Text)
    broker_id = Column(UUID(as_uuid=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    lead = relationship("Lead", back_populates="events")

    __table_args__ = (
        Index("idx_lead_events_lead_created", "lead_id", "created_at"),
        CheckConstraint(
            "event_type IN ('status_changed', 'note_added', 'property_assigned')",
            name="ck_lead_event_type",
        ),
    )
