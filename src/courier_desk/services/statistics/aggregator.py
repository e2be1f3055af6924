"""Merge delivery counters from the aggregator feed and the dedicated courier feed."""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Mapping, Optional

from ...models.domain import (
    CombinedReport,
    CourierBreakdownItem,
    CourierDetail,
    CourierSuccessRate,
    CourierTotals,
)
from .mappings import COURIER_MAPPINGS, CourierMapping, display_name_for

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([-+]?\d+)")

AGGREGATOR_SOURCE = "aggregator"
DEDICATED_SOURCE = "steadfast"


def coerce_count(value: Any) -> int:
    """Coerce an untrusted counter to an int; anything non-numeric becomes 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else 0
    return 0


def success_rate(success: int, total: int) -> int:
    """Integer percentage rounded half up; 0 when there is nothing to divide by."""
    if total <= 0:
        return 0
    return (200 * success + total) // (2 * total)


def _totals(success: int, total: int) -> CourierTotals:
    return CourierTotals(total=total, success=success, success_rate=success_rate(success, total))


def calculate_courier_success_rate(
    data: Optional[Mapping[str, Any]],
    mappings: tuple[CourierMapping, ...] = COURIER_MAPPINGS,
) -> CourierSuccessRate:
    """Normalize an aggregator payload's ``Summaries`` block into per-courier details."""
    summaries = data.get("Summaries") if isinstance(data, Mapping) else None
    if not isinstance(summaries, Mapping):
        summaries = {}

    details: dict[str, CourierDetail] = {}
    total_success = 0
    total_count = 0
    for mapping in mappings:
        courier_data = summaries.get(mapping.display_name)
        if not isinstance(courier_data, Mapping):
            courier_data = {}
        detail = CourierDetail(
            success=coerce_count(courier_data.get(mapping.success_field)),
            cancel=coerce_count(courier_data.get(mapping.cancel_field)),
            total=coerce_count(courier_data.get(mapping.total_field)),
        )
        details[mapping.slug] = detail
        total_success += detail.success
        total_count += detail.total

    totals = _totals(total_success, total_count)
    return CourierSuccessRate(
        total=totals,
        string=build_summary_string(totals, details),
        details=details,
    )


def build_summary_string(totals: CourierTotals, details: Mapping[str, CourierDetail]) -> str:
    """Legacy positional format: ``total_result:T:S:R|slug:T:S:R|...``."""
    parts = [f"total_result:{totals.total}:{totals.success}:{totals.success_rate}"]
    for slug, detail in details.items():
        parts.append(f"{slug}:{detail.total}:{detail.success}:{success_rate(detail.success, detail.total)}")
    return "|".join(parts)


def parse_dedicated_feed(data: Optional[Mapping[str, Any]]) -> Optional[CourierDetail]:
    if not isinstance(data, Mapping):
        return None
    return CourierDetail(
        success=coerce_count(data.get("total_delivered")),
        cancel=coerce_count(data.get("total_cancelled")),
        total=coerce_count(data.get("total_parcels")),
    )


def combine_reports(
    aggregator_payload: Optional[Mapping[str, Any]],
    dedicated_payload: Optional[Mapping[str, Any]],
    *,
    mappings: tuple[CourierMapping, ...] = COURIER_MAPPINGS,
    dedicated_slug: str = DEDICATED_SOURCE,
) -> CombinedReport:
    """Build the combined delivery report from whichever feeds are available.

    Either payload may be ``None`` (feed unavailable). Parsing problems are
    recorded in ``errors`` instead of being raised, so a partial report is
    always returned.
    """
    errors: list[str] = []

    aggregator: Optional[CourierSuccessRate] = None
    if aggregator_payload is not None:
        try:
            aggregator = calculate_courier_success_rate(aggregator_payload, mappings)
        except Exception as exc:
            logger.warning(f"Failed to parse aggregator statistics: {exc}")
            errors.append(f"{AGGREGATOR_SOURCE}: {exc}")

    dedicated: Optional[CourierDetail] = None
    if dedicated_payload is not None:
        try:
            dedicated = parse_dedicated_feed(dedicated_payload)
        except Exception as exc:
            logger.warning(f"Failed to parse {dedicated_slug} statistics: {exc}")
            errors.append(f"{dedicated_slug}: {exc}")

    rows: list[tuple[str, CourierDetail]] = []
    if aggregator is not None:
        for slug, detail in aggregator.details.items():
            if slug == dedicated_slug and dedicated is not None:
                rows.append((slug, dedicated))
            else:
                rows.append((slug, detail))
    if dedicated is not None and not any(slug == dedicated_slug for slug, _ in rows):
        rows.append((dedicated_slug, dedicated))

    combined_success = sum(detail.success for _, detail in rows)
    combined_total = sum(detail.total for _, detail in rows)

    breakdown = [
        CourierBreakdownItem(
            slug=slug,
            display_name=display_name_for(slug, mappings),
            total=detail.total,
            success=detail.success,
            cancel=detail.cancel,
            success_rate=success_rate(detail.success, detail.total),
        )
        for slug, detail in rows
        if detail.total != 0
    ]

    return CombinedReport(
        combined=_totals(combined_success, combined_total),
        aggregator=aggregator,
        steadfast=dedicated,
        breakdown=breakdown,
        sources={AGGREGATOR_SOURCE: aggregator is not None, dedicated_slug: dedicated is not None},
        errors=errors,
    )
