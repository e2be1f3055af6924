"""Courier delivery statistics services."""

from .aggregator import calculate_courier_success_rate, combine_reports, success_rate
from .mappings import COURIER_MAPPINGS, CourierMapping
from .service import CourierStatisticsService, QueryTracker, build_statistics

__all__ = [
    "COURIER_MAPPINGS",
    "CourierMapping",
    "CourierStatisticsService",
    "QueryTracker",
    "build_statistics",
    "calculate_courier_success_rate",
    "combine_reports",
    "success_rate",
]
