import json
from datetime import date, datetime, timezone

import httpx
import pytest

from courier_desk.models.domain import CourierEntry, CourierStatus, GoogleDriveTokens
from courier_desk.services.backup import (
    BackupFormatError,
    DriveError,
    GoogleDriveClient,
    TokenExpiredError,
    backup_filename,
    build_backup_document,
    parse_backup_document,
)
from courier_desk.services.backup.drive import TOKEN_URL


def _entry(entry_id: str) -> CourierEntry:
    return CourierEntry(
        id=entry_id,
        invoice=f"INV-{entry_id}",
        recipient_name="Rahim",
        recipient_phone="01712345678",
        recipient_address="Dhaka",
        cod_amount=500,
        note="",
        status=CourierStatus.DELIVERED,
        created_at="2024-01-10T10:00:00Z",
    )


def _drive(handler) -> GoogleDriveClient:
    return GoogleDriveClient(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://localhost:3000/api/backup/callback",
        transport=httpx.MockTransport(handler),
    )


def test_build_backup_document() -> None:
    now = datetime(2024, 1, 31, 8, 15, 0, 123000, tzinfo=timezone.utc)

    document = build_backup_document([_entry("1")], now)

    assert document["version"] == "1.0"
    assert document["exportedAt"] == "2024-01-31T08:15:00.123Z"
    assert document["entries"][0]["id"] == "1"
    assert document["entries"][0]["status"] == "delivered"


def test_parse_backup_document_skips_malformed_entries() -> None:
    document = {"version": "1.0", "entries": [{"id": "1", "invoice": "INV-1"}, {"invoice": "no id"}, "junk"]}

    entries = parse_backup_document(document)

    assert [entry.id for entry in entries] == ["1"]


@pytest.mark.parametrize("payload", [None, [], {"entries": "nope"}, {"version": "1.0"}])
def test_parse_backup_document_rejects_non_backups(payload) -> None:
    with pytest.raises(BackupFormatError):
        parse_backup_document(payload)


def test_backup_filename() -> None:
    assert backup_filename(date(2024, 1, 31)) == "courier-backup-2024-01-31.json"


def test_build_auth_url_requests_offline_drive_file_scope() -> None:
    url = _drive(lambda request: httpx.Response(200)).build_auth_url()

    assert url.startswith("https://accounts.google.com/o/oauth2/v2/auth?")
    assert "access_type=offline" in url
    assert "drive.file" in url
    assert "client_id=client-id" in url


def test_build_auth_url_without_client_id() -> None:
    client = GoogleDriveClient(client_id="", client_secret="", redirect_uri="http://x")
    client.client_id = ""

    with pytest.raises(DriveError):
        client.build_auth_url()


def test_exchange_code() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == TOKEN_URL
        assert b"grant_type=authorization_code" in request.content
        return httpx.Response(200, json={"access_token": "at", "refresh_token": "rt", "expires_in": 3600})

    tokens = _drive(handler).exchange_code("auth-code")

    assert tokens.access_token == "at"
    assert tokens.refresh_token == "rt"
    assert tokens.expiry_date > 0


def test_valid_tokens_are_not_refreshed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("should not refresh")

    tokens = GoogleDriveTokens(access_token="at", refresh_token="rt", expiry_date=10_000_000)

    assert _drive(handler).get_valid_tokens(tokens, now_ms=1_000) is tokens


def test_expiring_tokens_are_refreshed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert b"grant_type=refresh_token" in request.content
        return httpx.Response(200, json={"access_token": "new-at", "expires_in": 3600})

    tokens = GoogleDriveTokens(access_token="at", refresh_token="rt", expiry_date=1_030_000)

    refreshed = _drive(handler).get_valid_tokens(tokens, now_ms=1_000_000)

    assert refreshed.access_token == "new-at"
    assert refreshed.refresh_token == "rt"


def test_failed_refresh_raises_token_expired() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_grant"})

    tokens = GoogleDriveTokens(access_token="at", refresh_token="rt", expiry_date=0)

    with pytest.raises(TokenExpiredError):
        _drive(handler).get_valid_tokens(tokens, now_ms=1_000_000)


def test_upload_backup_sends_multipart_body() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["content_type"] = request.headers["content-type"]
        seen["body"] = request.content.decode("utf-8")
        seen["auth"] = request.headers["authorization"]
        return httpx.Response(200, json={"id": "file-1", "name": "courier-backup-2024-01-31.json"})

    document = build_backup_document([_entry("1")])
    metadata = _drive(handler).upload_backup("at", document, "courier-backup-2024-01-31.json")

    assert metadata.id == "file-1"
    assert seen["auth"] == "Bearer at"
    assert seen["content_type"].startswith("multipart/related")
    assert '"name": "courier-backup-2024-01-31.json"' in seen["body"]
    assert '"version": "1.0"' in seen["body"]


def test_upload_failure_uses_google_error_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": {"message": "Insufficient permissions"}})

    with pytest.raises(DriveError, match="Insufficient permissions"):
        _drive(handler).upload_backup("at", build_backup_document([]))


def test_list_and_download_backups() -> None:
    document = build_backup_document([_entry("1")])

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/files"):
            return httpx.Response(
                200,
                json={"files": [{"id": "f1", "name": "courier-backup-2024-01-31.json", "createdTime": "t", "size": "42"}]},
            )
        assert request.url.params["alt"] == "media"
        return httpx.Response(200, content=json.dumps(document).encode("utf-8"))

    client = _drive(handler)
    files = client.list_backups("at")
    downloaded = client.download_backup("at", files[0].id)

    assert files[0].name == "courier-backup-2024-01-31.json"
    assert files[0].size == "42"
    assert [entry.id for entry in parse_backup_document(downloaded)] == ["1"]
