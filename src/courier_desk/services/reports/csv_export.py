"""CSV export of courier entries."""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Optional, Sequence

from ...models.domain import CourierEntry
from .filters import parse_created_at, resolve_timezone

CSV_HEADERS = (
    "Invoice",
    "Recipient Name",
    "Phone",
    "Address",
    "COD Amount",
    "Status",
    "Note",
    "Created At",
)

# Fixed English abbreviations so output does not depend on the process locale.
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_datetime(value: str, tz: Optional[tzinfo] = None) -> str:
    """``05 Jan 2024 14:30`` in the report timezone; unparseable values are returned as-is."""
    parsed = parse_created_at(value, resolve_timezone(tz))
    if parsed is None:
        return value or ""
    return f"{parsed.day:02d} {_MONTHS[parsed.month - 1]} {parsed.year} {parsed.hour:02d}:{parsed.minute:02d}"


def format_amount(value: float | int | None) -> str:
    if value is None:
        return "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _quote(value: Optional[str]) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


def _status_value(status: object) -> str:
    return str(getattr(status, "value", status) or "")


def export_to_csv(entries: Sequence[CourierEntry], tz: Optional[tzinfo] = None) -> str:
    """Serialize entries with a fixed 8-column header.

    Only the address and note columns are quoted (with embedded quotes
    doubled); rows are joined by ``\\n`` with no trailing newline.
    """
    zone = resolve_timezone(tz)
    lines = [",".join(CSV_HEADERS)]
    for entry in entries:
        row = [
            entry.invoice or "",
            entry.recipient_name or "",
            entry.recipient_phone or "",
            _quote(entry.recipient_address),
            format_amount(entry.cod_amount),
            _status_value(entry.status),
            _quote(entry.note),
            format_datetime(entry.created_at, zone),
        ]
        lines.append(",".join(row))
    return "\n".join(lines)


def report_filename(today: Optional[date] = None) -> str:
    day = today or datetime.now().date()
    return f"courier-report-{day.isoformat()}.csv"
