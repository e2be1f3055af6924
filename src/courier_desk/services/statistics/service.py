"""Delivery-history lookup across the aggregator and the dedicated Steadfast feed."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Optional

from ...config import settings
from ...models.domain import CombinedReport, SteadfastCredentials
from ..couriers.hoorin_client import HoorinClient
from ..couriers.steadfast_client import SteadfastClient
from ..phone import digits_only, is_valid_phone, normalize_phone
from .aggregator import AGGREGATOR_SOURCE, combine_reports

logger = logging.getLogger(__name__)


class QueryTracker:
    """Last-query-wins bookkeeping for lookups that may overlap."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest = 0

    def begin(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._latest


@dataclass(slots=True)
class StatisticsLookup:
    phone: str
    ticket: int
    superseded: bool
    report: Optional[CombinedReport]


def _fetch_aggregator(phone: str) -> dict:
    return HoorinClient().search(phone)


def _fetch_dedicated(phone: str, credentials: SteadfastCredentials) -> dict:
    return SteadfastClient(credentials).fraud_check(phone)


def fetch_feeds(
    phone: str,
    credentials: Optional[SteadfastCredentials] = None,
    *,
    max_workers: int | None = None,
    dedicated_slug: str | None = None,
) -> tuple[dict[str, Optional[dict]], list[str]]:
    """Fire every available feed, wait for all of them, and turn failures into ``None``."""
    dedicated_slug = dedicated_slug or settings.dedicated_feed_slug
    tasks: dict[str, Callable[[], dict]] = {AGGREGATOR_SOURCE: lambda: _fetch_aggregator(phone)}
    if credentials is not None and credentials.api_key and credentials.secret_key:
        tasks[dedicated_slug] = lambda: _fetch_dedicated(phone, credentials)

    results: dict[str, Optional[dict]] = {name: None for name in tasks}
    errors: list[str] = []
    workers = min(max_workers or settings.max_parallel_feeds, len(tasks))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(task): name for name, task in tasks.items()}
        for future in as_completed(futures):
            name = futures[future]
            try:
                results[name] = future.result()
            except Exception as exc:
                logger.warning(f"Statistics feed '{name}' unavailable for {phone}: {exc}")
                errors.append(f"{name} unavailable: {exc}")
    return results, errors


def build_statistics(
    phone: str,
    credentials: Optional[SteadfastCredentials] = None,
    *,
    max_workers: int | None = None,
    dedicated_slug: str | None = None,
) -> CombinedReport:
    """Fetch both feeds for an already normalized phone and combine them."""
    dedicated_slug = dedicated_slug or settings.dedicated_feed_slug
    results, fetch_errors = fetch_feeds(
        phone, credentials, max_workers=max_workers, dedicated_slug=dedicated_slug
    )
    report = combine_reports(
        results.get(AGGREGATOR_SOURCE),
        results.get(dedicated_slug),
        dedicated_slug=dedicated_slug,
    )
    report.errors = fetch_errors + report.errors
    return report


class CourierStatisticsService:
    def __init__(self, tracker: QueryTracker | None = None) -> None:
        self.tracker = tracker or QueryTracker()

    def lookup(self, raw_phone: str, credentials: Optional[SteadfastCredentials] = None) -> StatisticsLookup:
        phone = digits_only(normalize_phone(raw_phone))
        if not is_valid_phone(phone):
            raise ValueError("Invalid Bangladesh phone number format")

        ticket = self.tracker.begin()
        report = build_statistics(phone, credentials)
        if not self.tracker.is_current(ticket):
            logger.info(f"Discarding statistics for {phone}: superseded by a newer lookup")
            return StatisticsLookup(phone=phone, ticket=ticket, superseded=True, report=None)
        return StatisticsLookup(phone=phone, ticket=ticket, superseded=False, report=report)
