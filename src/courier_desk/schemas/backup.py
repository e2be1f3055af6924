"""Backup API schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BackupMetadataModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    name: str
    created_time: str = Field(..., alias="createdTime")
    size: str


class RestoreResponse(BaseModel):
    added: int
    skipped: int
    total: int


class DriveUploadResponse(BaseModel):
    success: bool
    file: BackupMetadataModel
