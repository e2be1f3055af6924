"""Google Drive OAuth and file operations for cloud backups."""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, List, Optional
from urllib.parse import urlencode

import httpx

from ...config import settings
from ...models.domain import BackupMetadata, GoogleDriveTokens
from .archive import backup_filename

logger = logging.getLogger(__name__)

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
FILES_URL = "https://www.googleapis.com/drive/v3/files"
UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"
SCOPES = ("https://www.googleapis.com/auth/drive.file",)

# Tokens expiring within this window are refreshed before use.
REFRESH_MARGIN_MS = 60_000

_BOUNDARY = "-------314159265358979323846"


class DriveError(RuntimeError):
    """A Google Drive or OAuth request failed."""


class TokenExpiredError(DriveError):
    """The stored tokens can no longer be refreshed; the user must re-authenticate."""


def _now_ms() -> int:
    return int(time.time() * 1000)


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if not isinstance(body, dict):
        return default
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return str(body.get("error_description") or default)


class GoogleDriveClient:
    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        redirect_uri: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.client_id = client_id or settings.google_client_id or ""
        self.client_secret = client_secret or settings.google_client_secret or ""
        self.redirect_uri = redirect_uri or settings.google_redirect_uri
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=10.0), transport=self._transport)

    # OAuth

    def build_auth_url(self) -> str:
        if not self.client_id:
            raise DriveError("Google client id is not configured.")
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> GoogleDriveTokens:
        form = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        }
        with self._get_client() as client:
            response = client.post(TOKEN_URL, data=form)
        if not response.is_success:
            raise DriveError(_error_message(response, "Failed to exchange code for tokens"))
        data = response.json()
        return GoogleDriveTokens(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or "",
            expiry_date=_now_ms() + int(data.get("expires_in", 0)) * 1000,
        )

    def refresh_access_token(self, refresh_token: str) -> GoogleDriveTokens:
        if not refresh_token:
            raise TokenExpiredError("No refresh token available")
        form = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }
        try:
            with self._get_client() as client:
                response = client.post(TOKEN_URL, data=form)
        except httpx.HTTPError as exc:
            raise TokenExpiredError(f"Failed to refresh access token: {exc}") from exc
        if not response.is_success:
            raise TokenExpiredError("Failed to refresh access token")
        data = response.json()
        return GoogleDriveTokens(
            access_token=data["access_token"],
            refresh_token=refresh_token,
            expiry_date=_now_ms() + int(data.get("expires_in", 0)) * 1000,
        )

    def get_valid_tokens(self, tokens: GoogleDriveTokens, now_ms: int | None = None) -> GoogleDriveTokens:
        """Return ``tokens`` unchanged if still valid, otherwise refreshed ones."""
        now_ms = now_ms if now_ms is not None else _now_ms()
        if tokens.expiry_date > now_ms + REFRESH_MARGIN_MS:
            return tokens
        logger.info("Google access token expiring, refreshing")
        return self.refresh_access_token(tokens.refresh_token)

    # Drive files

    def upload_backup(self, access_token: str, document: dict, filename: Optional[str] = None) -> BackupMetadata:
        name = filename or backup_filename()
        content = json.dumps(document, ensure_ascii=False, indent=2)
        metadata = {"name": name, "mimeType": "application/json"}

        delimiter = f"\r\n--{_BOUNDARY}\r\n"
        close_delimiter = f"\r\n--{_BOUNDARY}--"
        body = (
            delimiter
            + "Content-Type: application/json; charset=UTF-8\r\n\r\n"
            + json.dumps(metadata)
            + delimiter
            + "Content-Type: application/json\r\n\r\n"
            + content
            + close_delimiter
        )
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": f'multipart/related; boundary="{_BOUNDARY}"',
        }
        with self._get_client() as client:
            response = client.post(
                UPLOAD_URL,
                params={"uploadType": "multipart"},
                content=body.encode("utf-8"),
                headers=headers,
            )
        if not response.is_success:
            raise DriveError(_error_message(response, "Failed to upload backup"))

        uploaded = response.json()
        logger.info(f"Uploaded backup {uploaded.get('name', name)} to Google Drive")
        return BackupMetadata(
            id=str(uploaded.get("id", "")),
            name=str(uploaded.get("name", name)),
            created_time=datetime.now(timezone.utc).isoformat(),
            size=str(len(content.encode("utf-8"))),
        )

    def list_backups(self, access_token: str) -> List[BackupMetadata]:
        params = {
            "q": "name contains 'courier-backup' and mimeType='application/json'",
            "orderBy": "createdTime desc",
            "fields": "files(id,name,createdTime,size)",
        }
        with self._get_client() as client:
            response = client.get(FILES_URL, params=params, headers={"Authorization": f"Bearer {access_token}"})
        if not response.is_success:
            raise DriveError("Failed to list backups")
        files: list[dict[str, Any]] = response.json().get("files") or []
        return [
            BackupMetadata(
                id=str(item.get("id", "")),
                name=str(item.get("name", "")),
                created_time=str(item.get("createdTime", "")),
                size=str(item.get("size", "")),
            )
            for item in files
        ]

    def download_backup(self, access_token: str, file_id: str) -> Any:
        with self._get_client() as client:
            response = client.get(
                f"{FILES_URL}/{file_id}",
                params={"alt": "media"},
                headers={"Authorization": f"Bearer {access_token}"},
            )
        if not response.is_success:
            raise DriveError("Failed to download backup")
        return response.json()
