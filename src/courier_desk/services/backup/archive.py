"""Backup documents for recorded entries."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, List, Optional, Sequence

from ...models.domain import CourierEntry
from ...persistence.store import entry_from_dict, entry_to_dict

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"


class BackupFormatError(ValueError):
    """The supplied document is not a backup this application understands."""


def _isoformat_utc(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_backup_document(entries: Sequence[CourierEntry], now: Optional[datetime] = None) -> dict:
    return {
        "version": BACKUP_VERSION,
        "exportedAt": _isoformat_utc(now or datetime.now(timezone.utc)),
        "entries": [entry_to_dict(entry) for entry in entries],
    }


def parse_backup_document(payload: Any) -> List[CourierEntry]:
    """Entries contained in a backup document. Malformed individual entries are skipped."""
    if not isinstance(payload, dict):
        raise BackupFormatError("Backup must be a JSON object.")
    raw_entries = payload.get("entries")
    if not isinstance(raw_entries, list):
        raise BackupFormatError("Backup does not contain an 'entries' list.")
    version = payload.get("version")
    if version and version != BACKUP_VERSION:
        logger.warning(f"Restoring backup with unexpected version {version!r}")

    entries: List[CourierEntry] = []
    for item in raw_entries:
        try:
            entries.append(entry_from_dict(item))
        except ValueError as exc:
            logger.warning(f"Skipping malformed backup entry: {exc}")
    return entries


def backup_filename(today: Optional[date] = None) -> str:
    day = today or datetime.now(timezone.utc).date()
    return f"courier-backup-{day.isoformat()}.json"
