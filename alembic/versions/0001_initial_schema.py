"""initial schema: properties, leads, lead events, profiles, favorites, action logs

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Keep in sync with the enums in app.schemas.common
_PROPERTY_TYPES_IN = (
    "'Apartment', 'Villa', 'Townhouse', 'Office', 'Plot', 'Commercial'"
)
_PROPERTY_STATUSES_IN = "'For Sale', 'For Rent', 'Off-Plan', 'Ready'"
_LEAD_STATUSES_IN = "'New', 'Contacted', 'Viewing', 'Negotiation', 'Won', 'Lost'"
_LEAD_SOURCES_IN = "'WhatsApp', 'Website', 'Referral', 'Other', 'portal'"

_UUID = postgresql.UUID(as_uuid=True)


def _id_column() -> sa.Column:
    return sa.Column(
        "id", _UUID, primary_key=True, server_default=sa.text("gen_random_uuid()")
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.text("now()"))


def upgrade() -> None:
    op.create_table(
        "properties",
        _id_column(),
        sa.Column("company_id", _UUID, nullable=False),
        sa.Column("broker_id", _UUID),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("price", sa.Numeric(15, 2), nullable=False),
        sa.Column("location", sa.String(255)),
        sa.Column("bedrooms", sa.Integer()),
        sa.Column("bathrooms", sa.Integer()),
        sa.Column("area", sa.Numeric(12, 2)),
        sa.Column("type", sa.String(50)),
        sa.Column("status", sa.String(50)),
        sa.Column(
            "images",
            postgresql.ARRAY(sa.String()),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column(
            "amenities",
            postgresql.ARRAY(sa.String()),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column("furnished", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("description", sa.Text()),
        sa.Column("notes", sa.Text()),
        sa.Column("handover_date", sa.Date()),
        sa.Column("payment_plan", sa.String(255)),
        sa.Column("rera_id", sa.String(50)),
        sa.Column("roi_estimate", sa.Numeric(5, 2)),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("price >= 0", name="ck_property_price_non_negative"),
        sa.CheckConstraint(
            f"type IS NULL OR type IN ({_PROPERTY_TYPES_IN})", name="ck_property_type"
        ),
        sa.CheckConstraint(
            f"status IS NULL OR status IN ({_PROPERTY_STATUSES_IN})",
            name="ck_property_status",
        ),
    )
    op.create_index(
        "idx_properties_company_created", "properties", ["company_id", "created_at"]
    )
    op.create_index(
        "idx_properties_published_created", "properties", ["is_published", "created_at"]
    )

    op.create_table(
        "leads",
        _id_column(),
        sa.Column("company_id", _UUID, nullable=False),
        sa.Column("broker_id", _UUID),
        sa.Column(
            "property_id",
            _UUID,
            sa.ForeignKey("properties.id", ondelete="SET NULL"),
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50)),
        sa.Column("email", sa.String(255)),
        sa.Column("message", sa.Text()),
        sa.Column("status", sa.String(50), nullable=False, server_default="New"),
        sa.Column("source", sa.String(50)),
        sa.Column("follow_up_date", sa.Date()),
        sa.Column("notes", sa.Text()),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint(f"status IN ({_LEAD_STATUSES_IN})", name="ck_lead_status"),
        sa.CheckConstraint(
            f"source IS NULL OR source IN ({_LEAD_SOURCES_IN})", name="ck_lead_source"
        ),
    )
    op.create_index("idx_leads_company_created", "leads", ["company_id", "created_at"])
    op.create_index("idx_leads_follow_up", "leads", ["company_id", "follow_up_date"])
    op.create_index("idx_leads_email_source", "leads", ["email", "source"])

    op.create_table(
        "lead_events",
        _id_column(),
        sa.Column(
            "lead_id",
            _UUID,
            sa.ForeignKey("leads.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("old_value", sa.Text()),
        sa.Column("new_value", sa.Text()),
        sa.Column("broker_id", _UUID),
        _timestamp("created_at"),
        sa.CheckConstraint(
            "event_type IN ('status_changed', 'note_added', 'property_assigned')",
            name="ck_lead_event_type",
        ),
    )
    op.create_index(
        "idx_lead_events_lead_created", "lead_events", ["lead_id", "created_at"]
    )

    op.create_table(
        "profiles",
        sa.Column("id", _UUID, primary_key=True),
        sa.Column("full_name", sa.String(255)),
        sa.Column("email", sa.String(255)),
        sa.Column("company_name", sa.String(255)),
        sa.Column("company_id", _UUID),
        sa.Column("role", sa.String(50), nullable=False, server_default="agent"),
        sa.Column(
            "permissions",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "notifications",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("is_disabled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("expiry_date", sa.DateTime(timezone=True)),
        sa.Column("avatar_url", sa.String(512)),
        _timestamp("created_at"),
    )
    op.create_index("ix_profiles_company_id", "profiles", ["company_id"])

    op.create_table(
        "favorites",
        _id_column(),
        sa.Column("buyer_id", _UUID, nullable=False),
        sa.Column(
            "property_id",
            _UUID,
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _timestamp("created_at"),
        sa.UniqueConstraint("buyer_id", "property_id", name="uq_favorites_buyer_property"),
    )

    op.create_table(
        "user_action_logs",
        _id_column(),
        sa.Column("user_id", _UUID, nullable=False),
        sa.Column("action_type", sa.String(20), nullable=False),
        sa.Column(
            "details",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("property_id", _UUID),
        _timestamp("created_at"),
        sa.CheckConstraint(
            "action_type IN ('search', 'filter', 'save', 'inquire', 'view')",
            name="ck_user_action_type",
        ),
    )
    op.create_index("ix_user_action_logs_user_id", "user_action_logs", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_user_action_logs_user_id", table_name="user_action_logs")
    op.drop_table("user_action_logs")
    op.drop_table("favorites")
    op.drop_index("ix_profiles_company_id", table_name="profiles")
    op.drop_table("profiles")
    op.drop_index("idx_lead_events_lead_created", table_name="lead_events")
    op.drop_table("lead_events")
    op.drop_index("idx_leads_email_source", table_name="leads")
    op.drop_index("idx_leads_follow_up", table_name="leads")
    op.drop_index("idx_leads_company_created", table_name="leads")
    op.drop_table("leads")
    op.drop_index("idx_properties_published_created", table_name="properties")
    op.drop_index("idx_properties_company_created", table_name="properties")
    op.drop_table("properties")
