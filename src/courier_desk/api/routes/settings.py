"""Stored Steadfast credentials."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ...persistence.store import EntryStore
from ...schemas.steadfast import CredentialsModel
from ..dependencies import get_store

router = APIRouter(prefix="/settings", tags=["settings"])


def _mask(value: str) -> str:
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"


@router.get("/credentials", status_code=status.HTTP_200_OK)
def get_credentials(store: EntryStore = Depends(get_store)) -> dict:
    credentials = store.credentials
    if credentials is None:
        return {"configured": False}
    return {"configured": True, "apiKey": _mask(credentials.api_key)}


@router.put("/credentials", status_code=status.HTTP_200_OK)
def save_credentials(payload: CredentialsModel, store: EntryStore = Depends(get_store)) -> dict:
    if not payload.api_key or not payload.secret_key:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="API Key and Secret Key are required")
    store.set_credentials(payload.to_domain())
    return {"configured": True, "apiKey": _mask(payload.api_key)}


@router.delete("/credentials", status_code=status.HTTP_200_OK)
def clear_credentials(store: EntryStore = Depends(get_store)) -> dict:
    store.clear_credentials()
    return {"configured": False}
