"""Request-scoped access to the application's shared objects."""

from __future__ import annotations

from fastapi import Request

from ..persistence.store import EntryStore
from ..services.statistics import CourierStatisticsService


def get_store(request: Request) -> EntryStore:
    return request.app.state.store


def get_statistics_service(request: Request) -> CourierStatisticsService:
    return request.app.state.statistics
