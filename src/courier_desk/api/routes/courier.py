"""Courier history endpoints."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from ...config import settings
from ...persistence.store import EntryStore
from ...schemas.statistics import StatisticsRequest, StatisticsResponse
from ...services.couriers.hoorin_client import HoorinClient
from ...services.statistics import CourierStatisticsService, calculate_courier_success_rate
from ..dependencies import get_statistics_service, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courier", tags=["courier"])


@router.get("", status_code=status.HTTP_200_OK)
def search_courier(search_term: str | None = Query(default=None, alias="searchTerm")) -> JSONResponse:
    """Aggregator response passed through, with ``courier_success_rate`` attached."""
    if not search_term:
        return JSONResponse({"error": "Search term is required"}, status_code=status.HTTP_400_BAD_REQUEST)
    if not settings.hoorin_api_key:
        logger.error("Hoorin API key is not configured")
        return JSONResponse({"error": "API configuration error"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    try:
        data = HoorinClient().search(search_term)
    except Exception as exc:
        logger.exception(f"Courier search error: {exc}")
        return JSONResponse({"error": str(exc) or "Internal server error"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    payload = dict(data)
    payload["courier_success_rate"] = asdict(calculate_courier_success_rate(data))
    return JSONResponse(payload, status_code=status.HTTP_200_OK)


@router.post("/statistics", response_model=StatisticsResponse, status_code=status.HTTP_200_OK)
def courier_statistics(
    payload: StatisticsRequest,
    store: EntryStore = Depends(get_store),
    service: CourierStatisticsService = Depends(get_statistics_service),
) -> StatisticsResponse:
    """Combined delivery history for a phone number across every reachable feed."""
    credentials = payload.credentials.to_domain() if payload.credentials else None
    if credentials is None and payload.use_stored_credentials:
        credentials = store.credentials

    try:
        lookup = service.lookup(payload.phone, credentials)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return StatisticsResponse.model_validate(lookup, from_attributes=True)
