"""Courier statistics API schemas."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from .steadfast import CredentialsModel


class StatisticsRequest(BaseModel):
    phone: str
    credentials: Optional[CredentialsModel] = None
    use_stored_credentials: bool = True


class CourierDetailModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: int
    cancel: int
    total: int


class CourierTotalsModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    success: int
    success_rate: int


class CourierSuccessRateModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: CourierTotalsModel
    string: str
    details: Dict[str, CourierDetailModel]


class CourierBreakdownModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    slug: str
    display_name: str
    total: int
    success: int
    cancel: int
    success_rate: int


class CombinedReportModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    combined: CourierTotalsModel
    aggregator: Optional[CourierSuccessRateModel] = None
    steadfast: Optional[CourierDetailModel] = None
    breakdown: List[CourierBreakdownModel]
    sources: Dict[str, bool]
    errors: List[str]


class StatisticsResponse(BaseModel):
    phone: str
    ticket: int
    superseded: bool
    report: Optional[CombinedReportModel] = None
