"""Recorded courier entries."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ...persistence.store import EntryStore
from ...schemas.entries import CourierEntryModel, EntryUpdateRequest
from ..dependencies import get_store

router = APIRouter(prefix="/entries", tags=["entries"])


@router.get("", response_model=List[CourierEntryModel], status_code=status.HTTP_200_OK)
def list_entries(store: EntryStore = Depends(get_store)) -> List[CourierEntryModel]:
    return [CourierEntryModel.model_validate(entry) for entry in store.entries]


@router.get("/{entry_id}", response_model=CourierEntryModel, status_code=status.HTTP_200_OK)
def get_entry(entry_id: str, store: EntryStore = Depends(get_store)) -> CourierEntryModel:
    entry = store.get_entry(entry_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Entry {entry_id} not found")
    return CourierEntryModel.model_validate(entry)


@router.patch("/{entry_id}", response_model=CourierEntryModel, status_code=status.HTTP_200_OK)
def update_entry(entry_id: str, payload: EntryUpdateRequest, store: EntryStore = Depends(get_store)) -> CourierEntryModel:
    updated = store.update_entry(entry_id, status=payload.status)
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Entry {entry_id} not found")
    return CourierEntryModel.model_validate(updated)


@router.delete("/{entry_id}", status_code=status.HTTP_200_OK)
def delete_entry(entry_id: str, store: EntryStore = Depends(get_store)) -> dict:
    if not store.delete_entry(entry_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Entry {entry_id} not found")
    return {"success": True, "message": f"Entry {entry_id} deleted"}


@router.delete("", status_code=status.HTTP_200_OK)
def clear_entries(store: EntryStore = Depends(get_store)) -> dict:
    store.clear_entries()
    return {"success": True, "message": "All entries cleared"}
