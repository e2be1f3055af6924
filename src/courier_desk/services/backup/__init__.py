"""Backup services."""

from .archive import BackupFormatError, backup_filename, build_backup_document, parse_backup_document
from .drive import DriveError, GoogleDriveClient, TokenExpiredError

__all__ = [
    "BackupFormatError",
    "DriveError",
    "GoogleDriveClient",
    "TokenExpiredError",
    "backup_filename",
    "build_backup_document",
    "parse_backup_document",
]
