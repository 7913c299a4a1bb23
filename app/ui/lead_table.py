"""Column and menu configuration of the dashboard leads table."""

import re
from typing import Any, List

from app.core.constants import LEAD_STATUSES
from app.schemas.common import LeadSource
from app.ui.enums import Align, ColumnKind, FilterType
from app.ui.grid import (
    ColumnDescriptor,
    EmptyState,
    FilterConfig,
    MenuOption,
    SelectOption,
    row_value,
)

# Manual lead sources; portal leads are created by inquiries only
_FILTERABLE_SOURCES = tuple(s.value for s in LeadSource if s != LeadSource.portal)

LEAD_COLUMNS: List[ColumnDescriptor] = [
    ColumnDescriptor("name", "leads.fields.name", sortable=True),
    ColumnDescriptor("actions", "", kind=ColumnKind.action, align=Align.end),
    ColumnDescriptor(
        "property_title",
        "leads.fields.property",
        render=lambda row: row_value(row, "property_title") or "-",
    ),
    ColumnDescriptor(
        "status",
        "leads.fields.status",
        sortable=True,
        filter=FilterConfig(
            FilterType.select, tuple(SelectOption(s, s) for s in LEAD_STATUSES)
        ),
    ),
    ColumnDescriptor(
        "source",
        "leads.fields.source",
        sortable=True,
        render=lambda row: row_value(row, "source") or "-",
        filter=FilterConfig(
            FilterType.select, tuple(SelectOption(s, s) for s in _FILTERABLE_SOURCES)
        ),
    ),
    ColumnDescriptor("phone", "leads.fields.phone"),
    ColumnDescriptor("email", "leads.fields.email", filter=FilterConfig()),
    ColumnDescriptor("follow_up_date", "leads.fields.follow_up", sortable=True),
    ColumnDescriptor("created_at", "leads.fields.created", sortable=True),
]

LEADS_EMPTY_STATE = EmptyState(
    message="leads.empty.title",
    icon="contact",
    description="leads.empty.description",
    cta_label="leads.actions.add",
    cta_command="create",
)

LEAD_MASS_MENU: List[MenuOption] = [
    MenuOption(1, "leads.bulk.change_status", "bulk_status"),
    MenuOption(2, "leads.bulk.export_selected", "export_selected"),
    MenuOption(3, "leads.bulk.clear", "clear_selection"),
    MenuOption(10, "leads.bulk.delete", "bulk_delete", destructive=True, separator=True),
]


def whatsapp_url(phone: str) -> str:
    return "https://wa.me/" + re.sub(r"[^0-9]", "", phone)


def lead_row_options(row: Any) -> List[MenuOption]:
    """Context menu of one lead; contact entries need a phone or email."""
    phone = row_value(row, "phone")
    email = row_value(row, "email")
    return [
        MenuOption(1, "leads.actions.view", "view"),
        MenuOption(2, "leads.actions.whatsapp", "whatsapp", visible=bool(phone)),
        MenuOption(3, "leads.actions.call", "call", visible=bool(phone)),
        MenuOption(4, "leads.actions.email", "email", visible=bool(email)),
        MenuOption(10, "leads.actions.delete", "delete", destructive=True, separator=True),
    ]
