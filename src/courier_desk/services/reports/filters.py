"""Report filtering over recorded courier entries."""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from ...config import settings
from ...models.domain import CourierEntry, ReportFilters

ALL_STATUSES = "all"


def resolve_timezone(tz: Optional[tzinfo] = None) -> tzinfo:
    """Zone for calendar-day comparisons: explicit, configured, or the host's local zone."""
    if tz is not None:
        return tz
    if settings.report_timezone:
        return ZoneInfo(settings.report_timezone)
    return datetime.now().astimezone().tzinfo or timezone.utc


def parse_filter_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` filter bound (a full ISO timestamp is also accepted)."""
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


def parse_created_at(value: str, tz: tzinfo) -> Optional[datetime]:
    """``created_at`` as an aware datetime in ``tz``; naive values are taken to be in ``tz``."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=tz)
    return parsed.astimezone(tz)


def _status_value(status: object) -> str:
    return getattr(status, "value", status) if status is not None else ""


def _matches_search(search: str, *values: Optional[str]) -> bool:
    for value in values:
        if isinstance(value, str) and search in value.lower():
            return True
    return False


def filter_entries(
    entries: Iterable[CourierEntry],
    filters: ReportFilters,
    tz: Optional[tzinfo] = None,
) -> List[CourierEntry]:
    """Entries matching every active filter, in their original order.

    Date bounds are inclusive whole days in the report timezone. The search
    term matches case-insensitively against invoice, recipient name, phone,
    address and note.
    """
    zone = resolve_timezone(tz)
    date_from = parse_filter_date(filters.date_from) if filters.date_from else None
    date_to = parse_filter_date(filters.date_to) if filters.date_to else None
    status = _status_value(filters.status) or ALL_STATUSES
    search = filters.search_term.lower() if filters.search_term else ""

    matched: List[CourierEntry] = []
    for entry in entries:
        if date_from or date_to:
            created = parse_created_at(entry.created_at, zone)
            if created is None:
                continue
            entry_day = created.date()
            if date_from and entry_day < date_from:
                continue
            if date_to and entry_day > date_to:
                continue

        if status != ALL_STATUSES and _status_value(entry.status) != status:
            continue

        if search and not _matches_search(
            search,
            entry.invoice,
            entry.recipient_name,
            entry.recipient_phone,
            entry.recipient_address,
            entry.note,
        ):
            continue

        matched.append(entry)
    return matched


def summarize_entries(entries: Sequence[CourierEntry]) -> dict:
    """Count and total cash-on-delivery of a (filtered) entry list."""
    total_cod = sum(entry.cod_amount or 0 for entry in entries)
    if isinstance(total_cod, float) and total_cod.is_integer():
        total_cod = int(total_cod)
    return {"count": len(entries), "total_cod": total_cod}
