"""Client-side CSV export of the leads table."""

import csv
import io
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, List, Optional

from app.ui.grid import row_value

LEAD_CSV_COLUMNS = (
    "Name",
    "Phone",
    "Email",
    "Status",
    "Source",
    "Property",
    "Follow-Up",
    "Notes",
    "Created",
)


@dataclass(frozen=True)
class CsvFile:
    filename: str
    content: str


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _property_title(row: Any) -> str:
    title = row_value(row, "property_title")
    if title is None:
        nested = row_value(row, "properties")
        title = row_value(nested, "title") if nested else None
    return _text(title)


def lead_csv_row(row: Any) -> List[str]:
    return [
        _text(row_value(row, "name")),
        _text(row_value(row, "phone")),
        _text(row_value(row, "email")),
        _text(row_value(row, "status")),
        _text(row_value(row, "source")),
        _property_title(row),
        _text(row_value(row, "follow_up_date")),
        _text(row_value(row, "notes")),
        _text(row_value(row, "created_at")),
    ]


def export_leads(rows: Iterable[Any], today: Optional[date] = None) -> CsvFile:
    """Render *rows* as ``leads-<YYYY-MM-DD>.csv``."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(LEAD_CSV_COLUMNS)
    for row in rows:
        writer.writerow(lead_csv_row(row))
    day = today or date.today()
    return CsvFile(filename=f"leads-{day.isoformat()}.csv", content=buffer.getvalue())
