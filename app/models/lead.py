from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.constants import LEAD_SOURCE_CHECK_CLAUSE, LEAD_STATUS_CHECK_CLAUSE
from app.models.base import Base


class Lead(Base):
    """A sales contact captured manually by a broker or from a portal inquiry.

    ``property_id`` is a weak reference: deleting the property keeps the
    lead and clears the link.
    """

    __tablename__ = "leads"
    id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    company_id = Column(UUID(as_uuid=True), nullable=False)
    broker_id = Column(UUID(as_uuid=True))
    property_id = Column(
        UUID(as_uuid=True), ForeignKey("properties.id", ondelete="SET NULL")
    )
    name = Column(String(255), nullable=False)
    phone = Column(String(50))
    email = Column(String(255))
    message = Column(Text)
    status = Column(String(50), nullable=False, server_default="New")
    source = Column(String(50))
    follow_up_date = Column(Date)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    listing = relationship("Property", back_populates="leads", lazy="raise")
    events = relationship(
        "LeadEvent", back_populates="lead", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_leads_company_created", "company_id", "created_at"),
        Index("idx_leads_follow_up", "company_id", "follow_up_date"),
        Index("idx_leads_email_source", "email", "source"),
        CheckConstraint(LEAD_STATUS_CHECK_CLAUSE, name="ck_lead_status"),
        CheckConstraint(LEAD_SOURCE_CHECK_CLAUSE, name="ck_lead_source"),
    )

    @property
    def property_title(self):
        """Title of the linked property when it was eagerly loaded."""
        linked = self.__dict__.get("listing")
        return linked.title if linked is not None else None
