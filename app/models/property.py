from sqlalchemy import (
    ARRAY,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.constants import PROPERTY_STATUS_CHECK_CLAUSE, PROPERTY_TYPE_CHECK_CLAUSE
from app.models.base import Base


class Property(Base):
    """A listing owned by a tenant (company).

    ``images`` keeps the upload order; the first entry is the cover photo.
    Only rows with ``is_published`` are visible on the public portal.
    """

    __tablename__ = "properties"
    id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    company_id = Column(UUID(as_uuid=True), nullable=False)
    broker_id = Column(UUID(as_uuid=True))
    title = Column(String(255), nullable=False)
    price = Column(Numeric(15, 2), nullable=False)
    location = Column(String(255))
    bedrooms = Column(Integer)
    bathrooms = Column(Integer)
    area = Column(Numeric(12, 2))
    type = Column(String(50))
    status = Column(String(50))
    images = Column(ARRAY(String), nullable=False, server_default=text("'{}'"))
    amenities = Column(ARRAY(String), nullable=False, server_default=text("'{}'"))
    furnished = Column(Boolean, nullable=False, server_default=text("false"))
    is_published = Column(Boolean, nullable=False, server_default=text("false"))
    description = Column(Text)
    notes = Column(Text)

    # UAE-specific listing details
    handover_date = Column(Date)
    payment_plan = Column(String(255))
    rera_id = Column(String(50))
    roi_estimate = Column(Numeric(5, 2))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    leads = relationship("Lead", back_populates="listing", passive_deletes=True)

    __table_args__ = (
        Index("idx_properties_company_created", "company_id", "created_at"),
        Index("idx_properties_published_created", "is_published", "created_at"),
        CheckConstraint("price >= 0", name="ck_property_price_non_negative"),
        CheckConstraint(
            f"type IS NULL OR {PROPERTY_TYPE_CHECK_CLAUSE}", name="ck_property_type"
        ),
        CheckConstraint(
            f"status IS NULL OR {PROPERTY_STATUS_CHECK_CLAUSE}",
            name="ck_property_status",
        ),
    )
