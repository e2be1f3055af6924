"""Local and Google Drive backup endpoints."""

from __future__ import annotations

import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, RedirectResponse

from ...config import settings
from ...models.domain import GoogleDriveTokens
from ...persistence.store import EntryStore
from ...schemas.backup import BackupMetadataModel, DriveUploadResponse, RestoreResponse
from ...services.backup import (
    BackupFormatError,
    DriveError,
    GoogleDriveClient,
    TokenExpiredError,
    backup_filename,
    build_backup_document,
    parse_backup_document,
)
from ..dependencies import get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/backup", tags=["backup"])


def _settings_redirect(query: str) -> RedirectResponse:
    return RedirectResponse(f"{settings.app_url.rstrip('/')}/dashboard/settings?{query}")


def _restore(store: EntryStore, document: Any) -> RestoreResponse:
    try:
        entries = parse_backup_document(document)
    except BackupFormatError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    added = store.import_entries(entries)
    logger.info(f"Restored {added} of {len(entries)} backup entries")
    return RestoreResponse(added=added, skipped=len(entries) - added, total=len(store.entries))


# Local backups


@router.get("/local", status_code=status.HTTP_200_OK)
def download_local_backup(store: EntryStore = Depends(get_store)) -> JSONResponse:
    filename = backup_filename()
    return JSONResponse(
        build_backup_document(store.entries),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/local/restore", response_model=RestoreResponse, status_code=status.HTTP_200_OK)
def restore_local_backup(document: Any = Body(...), store: EntryStore = Depends(get_store)) -> RestoreResponse:
    return _restore(store, document)


# Google Drive


def _token_expired() -> JSONResponse:
    return JSONResponse(
        {"error": "token_expired", "message": "Please reconnect to Google Drive"},
        status_code=status.HTTP_401_UNAUTHORIZED,
    )


def _drive_access_token(client: GoogleDriveClient, store: EntryStore) -> str:
    tokens = store.google_tokens
    if tokens is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Google Drive is not connected")
    try:
        valid = client.get_valid_tokens(tokens)
    except TokenExpiredError:
        store.clear_google_tokens()
        raise
    if valid is not tokens:
        store.set_google_tokens(valid)
    return valid.access_token


@router.get("/auth")
def start_drive_auth() -> RedirectResponse:
    try:
        return RedirectResponse(GoogleDriveClient().build_auth_url())
    except DriveError as exc:
        logger.error(f"Google auth error: {exc}")
        return _settings_redirect("error=auth_failed")


@router.get("/callback")
def drive_auth_callback(
    code: str | None = Query(default=None),
    error: str | None = Query(default=None),
    store: EntryStore = Depends(get_store),
) -> RedirectResponse:
    if error:
        return _settings_redirect(f"error={error}")
    if not code:
        return _settings_redirect("error=no_code")
    try:
        tokens: GoogleDriveTokens = GoogleDriveClient().exchange_code(code)
    except DriveError as exc:
        logger.error(f"Google token exchange failed: {exc}")
        return _settings_redirect("error=token_exchange_failed")
    store.set_google_tokens(tokens)
    logger.info("Google Drive connected")
    return _settings_redirect("success=connected")


@router.post("", response_model=DriveUploadResponse, status_code=status.HTTP_200_OK)
def upload_drive_backup(store: EntryStore = Depends(get_store)) -> DriveUploadResponse:
    client = GoogleDriveClient()
    try:
        access_token = _drive_access_token(client, store)
    except TokenExpiredError:
        return _token_expired()
    try:
        metadata = client.upload_backup(access_token, build_backup_document(store.entries))
    except DriveError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return DriveUploadResponse(success=True, file=BackupMetadataModel.model_validate(metadata))


@router.get("/files", response_model=List[BackupMetadataModel], status_code=status.HTTP_200_OK)
def list_drive_backups(store: EntryStore = Depends(get_store)) -> List[BackupMetadataModel]:
    client = GoogleDriveClient()
    try:
        access_token = _drive_access_token(client, store)
    except TokenExpiredError:
        return _token_expired()
    try:
        files = client.list_backups(access_token)
    except DriveError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return [BackupMetadataModel.model_validate(item) for item in files]


@router.post("/files/{file_id}/restore", response_model=RestoreResponse, status_code=status.HTTP_200_OK)
def restore_drive_backup(file_id: str, store: EntryStore = Depends(get_store)) -> RestoreResponse:
    client = GoogleDriveClient()
    try:
        access_token = _drive_access_token(client, store)
    except TokenExpiredError:
        return _token_expired()
    try:
        document = client.download_backup(access_token, file_id)
    except DriveError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return _restore(store, document)
