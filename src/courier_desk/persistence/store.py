"""Application state: credentials, recorded entries and Google Drive tokens.

The store is a single explicit object. It is hydrated once from the state file
and every mutation is written back immediately, last write wins.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Iterable, List, Optional

from ..config import settings
from ..models.domain import CourierEntry, CourierStatus, GoogleDriveTokens, SteadfastCredentials
from .filesystem import FileStorage

logger = logging.getLogger(__name__)

# Recorded entries change only through status updates (or deletion).
_MUTABLE_ENTRY_FIELDS = {"status"}


def entry_to_dict(entry: CourierEntry) -> dict:
    payload = asdict(entry)
    payload["status"] = entry.status.value if isinstance(entry.status, CourierStatus) else str(entry.status)
    return payload


def entry_from_dict(payload: dict) -> CourierEntry:
    """Build an entry from stored or imported JSON, tolerating missing optional fields."""
    if not isinstance(payload, dict) or not payload.get("id"):
        raise ValueError("Entry is missing its id.")
    try:
        cod_amount = float(payload.get("cod_amount") or 0)
    except (TypeError, ValueError):
        cod_amount = 0.0
    consignment_id = payload.get("consignment_id")
    return CourierEntry(
        id=str(payload["id"]),
        invoice=str(payload.get("invoice") or ""),
        recipient_name=str(payload.get("recipient_name") or ""),
        recipient_phone=str(payload.get("recipient_phone") or ""),
        recipient_address=str(payload.get("recipient_address") or ""),
        cod_amount=int(cod_amount) if cod_amount.is_integer() else cod_amount,
        note=str(payload.get("note") or ""),
        status=CourierStatus.coerce(payload.get("status")),
        created_at=str(payload.get("created_at") or ""),
        consignment_id=str(consignment_id) if consignment_id is not None else None,
        tracking_code=payload.get("tracking_code"),
    )


class EntryStore:
    def __init__(self, path: Path | None = None, storage: FileStorage | None = None) -> None:
        self.path = path or settings.state_path
        self.storage = storage or FileStorage(self.path.parent)
        self._lock = threading.RLock()
        self._credentials: Optional[SteadfastCredentials] = None
        self._entries: List[CourierEntry] = []
        self._google_tokens: Optional[GoogleDriveTokens] = None

    # lifecycle

    def hydrate(self) -> "EntryStore":
        """Load state from disk. A missing or unreadable file yields an empty state."""
        with self._lock:
            try:
                raw = self.storage.read_json(self.path)
            except (OSError, ValueError) as exc:
                logger.error(f"Could not read state file {self.path}: {exc}. Starting with empty state.")
                raw = None
            if not isinstance(raw, dict):
                raw = {}

            self._credentials = _credentials_from_dict(raw.get("credentials"))
            self._google_tokens = _tokens_from_dict(raw.get("googleTokens"))
            self._entries = []
            for item in raw.get("entries") or []:
                try:
                    self._entries.append(entry_from_dict(item))
                except ValueError as exc:
                    logger.warning(f"Skipping malformed stored entry: {exc}")
            logger.info(f"Hydrated {len(self._entries)} entries from {self.path}")
        return self

    def persist(self) -> None:
        with self._lock:
            self.storage.write_json(self.path, self.snapshot())

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "credentials": (
                    {"apiKey": self._credentials.api_key, "secretKey": self._credentials.secret_key}
                    if self._credentials
                    else None
                ),
                "entries": [entry_to_dict(entry) for entry in self._entries],
                "googleTokens": asdict(self._google_tokens) if self._google_tokens else None,
            }

    # credentials

    @property
    def credentials(self) -> Optional[SteadfastCredentials]:
        return self._credentials

    def set_credentials(self, credentials: SteadfastCredentials) -> None:
        with self._lock:
            self._credentials = credentials
            self.persist()

    def clear_credentials(self) -> None:
        with self._lock:
            self._credentials = None
            self.persist()

    # entries

    @property
    def entries(self) -> List[CourierEntry]:
        """Newest first."""
        with self._lock:
            return list(self._entries)

    def get_entry(self, entry_id: str) -> Optional[CourierEntry]:
        with self._lock:
            return next((entry for entry in self._entries if entry.id == entry_id), None)

    def add_entry(self, entry: CourierEntry) -> CourierEntry:
        with self._lock:
            self._entries.insert(0, entry)
            self.persist()
        return entry

    def update_entry(self, entry_id: str, **changes: Any) -> Optional[CourierEntry]:
        unknown = set(changes) - _MUTABLE_ENTRY_FIELDS
        if unknown:
            raise ValueError(f"Cannot update entry fields: {', '.join(sorted(unknown))}")
        if "status" in changes:
            changes["status"] = CourierStatus.coerce(changes["status"])
        with self._lock:
            for index, entry in enumerate(self._entries):
                if entry.id == entry_id:
                    updated = replace(entry, **changes)
                    self._entries[index] = updated
                    self.persist()
                    return updated
        return None

    def delete_entry(self, entry_id: str) -> bool:
        with self._lock:
            remaining = [entry for entry in self._entries if entry.id != entry_id]
            if len(remaining) == len(self._entries):
                return False
            self._entries = remaining
            self.persist()
            return True

    def clear_entries(self) -> None:
        with self._lock:
            self._entries = []
            self.persist()

    def import_entries(self, entries: Iterable[CourierEntry]) -> int:
        """Merge ``entries`` by id; existing entries are kept unmodified. Returns how many were added."""
        with self._lock:
            existing_ids = {entry.id for entry in self._entries}
            new_entries: List[CourierEntry] = []
            for entry in entries:
                if entry.id in existing_ids:
                    continue
                existing_ids.add(entry.id)
                new_entries.append(entry)
            if new_entries:
                self._entries = new_entries + self._entries
                self.persist()
            return len(new_entries)

    # google drive

    @property
    def google_tokens(self) -> Optional[GoogleDriveTokens]:
        return self._google_tokens

    def set_google_tokens(self, tokens: GoogleDriveTokens) -> None:
        with self._lock:
            self._google_tokens = tokens
            self.persist()

    def clear_google_tokens(self) -> None:
        with self._lock:
            self._google_tokens = None
            self.persist()


def _credentials_from_dict(payload: Any) -> Optional[SteadfastCredentials]:
    if not isinstance(payload, dict):
        return None
    api_key = payload.get("apiKey")
    secret_key = payload.get("secretKey")
    if not api_key or not secret_key:
        return None
    return SteadfastCredentials(api_key=str(api_key), secret_key=str(secret_key))


def _tokens_from_dict(payload: Any) -> Optional[GoogleDriveTokens]:
    if not isinstance(payload, dict) or not payload.get("access_token"):
        return None
    try:
        expiry_date = int(payload.get("expiry_date") or 0)
    except (TypeError, ValueError):
        expiry_date = 0
    return GoogleDriveTokens(
        access_token=str(payload["access_token"]),
        refresh_token=str(payload.get("refresh_token") or ""),
        expiry_date=expiry_date,
    )
