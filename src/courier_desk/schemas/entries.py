"""Courier entry and report API schemas."""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict

from ..models.domain import CourierStatus


class CourierEntryModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    invoice: str
    recipient_name: str
    recipient_phone: str
    recipient_address: str
    cod_amount: Union[int, float]
    note: str = ""
    status: CourierStatus
    consignment_id: Optional[str] = None
    tracking_code: Optional[str] = None
    created_at: str


class EntryUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: CourierStatus


class ReportSummaryModel(BaseModel):
    count: int
    total_cod: Union[int, float]


class ReportEntriesResponse(BaseModel):
    items: List[CourierEntryModel]
    summary: ReportSummaryModel
