"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...config import settings
from ...persistence.store import EntryStore
from ..dependencies import get_store

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/config", status_code=status.HTTP_200_OK)
def health_config(store: EntryStore = Depends(get_store)) -> dict:
    """Which integrations are configured, without exposing any secret."""
    return {
        "aggregator": bool(settings.hoorin_api_key),
        "ai_extraction": bool(settings.openai_api_key),
        "google_drive": bool(settings.google_client_id and settings.google_client_secret),
        "steadfast_credentials": store.credentials is not None,
        "google_connected": store.google_tokens is not None,
        "entries": len(store.entries),
    }
