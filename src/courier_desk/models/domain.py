"""Domain models for parcel entries and courier delivery statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class CourierStatus(str, Enum):
    PENDING = "pending"
    IN_REVIEW = "in_review"
    DELIVERED = "delivered"
    PARTIAL_DELIVERED = "partial_delivered"
    CANCELLED = "cancelled"
    HOLD = "hold"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, value: object) -> "CourierStatus":
        """Map an upstream status string onto a known status, falling back to ``unknown``."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.UNKNOWN
        return cls.UNKNOWN


@dataclass(slots=True)
class CourierEntry:
    """A parcel order recorded after a successful submission."""

    id: str
    invoice: str
    recipient_name: str
    recipient_phone: str
    recipient_address: str
    cod_amount: float
    note: str
    status: CourierStatus
    created_at: str
    consignment_id: Optional[str] = None
    tracking_code: Optional[str] = None


@dataclass(slots=True)
class ReportFilters:
    date_from: str = ""
    date_to: str = ""
    status: str = "all"
    search_term: str = ""


@dataclass(slots=True)
class CourierDetail:
    success: int = 0
    cancel: int = 0
    total: int = 0


@dataclass(slots=True)
class CourierTotals:
    total: int = 0
    success: int = 0
    success_rate: int = 0


@dataclass(slots=True)
class CourierSuccessRate:
    """Normalized view of the aggregator feed."""

    total: CourierTotals
    string: str
    details: dict[str, CourierDetail]


@dataclass(slots=True)
class CourierBreakdownItem:
    slug: str
    display_name: str
    total: int
    success: int
    cancel: int
    success_rate: int


@dataclass(slots=True)
class CombinedReport:
    """Delivery history for one phone number across every available feed."""

    combined: CourierTotals
    aggregator: Optional[CourierSuccessRate] = None
    steadfast: Optional[CourierDetail] = None
    breakdown: list[CourierBreakdownItem] = field(default_factory=list)
    sources: dict[str, bool] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)


@dataclass(slots=True)
class SteadfastCredentials:
    api_key: str
    secret_key: str


@dataclass(slots=True)
class GoogleDriveTokens:
    access_token: str
    refresh_token: str
    expiry_date: int  # epoch milliseconds


@dataclass(slots=True)
class BackupMetadata:
    id: str
    name: str
    created_time: str
    size: str
