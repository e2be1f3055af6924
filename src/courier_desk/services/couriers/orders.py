"""Parcel order submission and the entries recorded from it."""

from __future__ import annotations

import logging
import random
import string
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from ...models.domain import CourierEntry, CourierStatus, SteadfastCredentials
from ..phone import digits_only, is_valid_phone, normalize_phone

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_uppercase


class OrderValidationError(ValueError):
    """The order was rejected before reaching the courier."""


class OrderRejectedError(RuntimeError):
    """The courier answered with a non-200 status."""

    def __init__(self, message: str, errors: Any = None, status: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors
        self.status = status


class OrderClient(Protocol):
    def create_order(self, order: dict[str, Any]) -> dict: ...


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_invoice_id() -> str:
    """Short unique invoice id like ``INV-LZ3K9QX1ABC``."""
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(random.choices(_BASE36, k=3))
    return f"INV-{timestamp}{suffix}"


def generate_entry_id() -> str:
    return str(uuid.uuid4())


def prepare_order(credentials: Optional[SteadfastCredentials], order: dict[str, Any]) -> dict[str, Any]:
    """Validate an order and return the payload to send upstream."""
    if credentials is None or not credentials.api_key or not credentials.secret_key:
        raise OrderValidationError("API credentials are required")

    if not order.get("recipient_name") or not order.get("recipient_phone") or not order.get("recipient_address"):
        raise OrderValidationError("Recipient name, phone, and address are required")

    phone = digits_only(normalize_phone(str(order["recipient_phone"])))
    if not is_valid_phone(phone):
        raise OrderValidationError("Invalid Bangladesh phone number format")

    try:
        cod_amount = float(order.get("cod_amount") or 0)
    except (TypeError, ValueError) as exc:
        raise OrderValidationError("COD amount must be a number") from exc
    if cod_amount < 0:
        raise OrderValidationError("COD amount cannot be negative")

    return {
        "invoice": str(order.get("invoice") or "").strip() or generate_invoice_id(),
        "recipient_name": str(order["recipient_name"]).strip(),
        "recipient_phone": phone,
        "recipient_address": str(order["recipient_address"]).strip(),
        "cod_amount": int(cod_amount) if cod_amount.is_integer() else cod_amount,
        "note": str(order.get("note") or "").strip(),
    }


def submit_order(client: OrderClient, credentials: Optional[SteadfastCredentials], order: dict[str, Any]) -> tuple[dict, dict]:
    """Submit ``order`` and return ``(upstream_payload, sent_order)``.

    The upstream payload is returned verbatim when its ``status`` is 200;
    anything else raises :class:`OrderRejectedError` carrying the upstream
    message and errors.
    """
    payload = prepare_order(credentials, order)
    result = client.create_order(payload)
    if isinstance(result, dict) and result.get("status") == 200:
        return result, payload

    body = result if isinstance(result, dict) else {}
    logger.warning(f"Steadfast rejected invoice {payload['invoice']}: {body.get('message')}")
    raise OrderRejectedError(
        body.get("message") or "Failed to create parcel",
        errors=body.get("errors"),
        status=body.get("status"),
    )


def entry_from_submission(result: dict, order: dict[str, Any], now: Optional[datetime] = None) -> CourierEntry:
    """Build the locally recorded entry for a successful submission."""
    consignment = result.get("consignment") if isinstance(result.get("consignment"), dict) else {}
    consignment_id = consignment.get("consignment_id")
    created_at = (now or datetime.now(timezone.utc)).isoformat()
    return CourierEntry(
        id=generate_entry_id(),
        invoice=order["invoice"],
        recipient_name=order["recipient_name"],
        recipient_phone=order["recipient_phone"],
        recipient_address=order["recipient_address"],
        cod_amount=order["cod_amount"],
        note=order.get("note") or "",
        status=CourierStatus.PENDING,
        created_at=created_at,
        consignment_id=str(consignment_id) if consignment_id is not None else None,
        tracking_code=consignment.get("tracking_code"),
    )
