"""Steadfast order and lookup endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from ...models.domain import CourierStatus, SteadfastCredentials
from ...persistence.store import EntryStore, entry_to_dict
from ...schemas.steadfast import CredentialsModel, FraudCheckRequest, OrderRequest
from ...services.couriers.orders import (
    OrderRejectedError,
    OrderValidationError,
    entry_from_submission,
    submit_order,
)
from ...services.couriers.steadfast_client import SteadfastAPIError, SteadfastClient
from ..dependencies import get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/steadfast", tags=["steadfast"])


def _error(message: str, status_code: int, **extra) -> JSONResponse:
    return JSONResponse({"error": message, **extra}, status_code=status_code)


def _stored_credentials(store: EntryStore) -> SteadfastCredentials:
    credentials = store.credentials
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Steadfast credentials are not configured")
    return credentials


@router.post("", status_code=status.HTTP_200_OK)
def create_parcel(payload: OrderRequest, store: EntryStore = Depends(get_store)) -> JSONResponse:
    """Submit a parcel order; the upstream payload is returned verbatim on success."""
    credentials = payload.credentials.to_domain() if payload.credentials else store.credentials
    if credentials is None or not credentials.api_key or not credentials.secret_key:
        return _error("API credentials are required", status.HTTP_400_BAD_REQUEST)

    try:
        client = SteadfastClient(credentials)
        result, sent_order = submit_order(client, credentials, payload.courier_data.model_dump())
    except OrderValidationError as exc:
        return _error(str(exc), status.HTTP_400_BAD_REQUEST)
    except OrderRejectedError as exc:
        return _error(exc.message, status.HTTP_400_BAD_REQUEST, errors=exc.errors, status=exc.status)
    except SteadfastAPIError as exc:
        logger.error(f"Steadfast API error: {exc}")
        return _error(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    except Exception as exc:
        logger.exception(f"Steadfast API error: {exc}")
        return _error(str(exc) or "Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)

    if payload.record:
        entry = store.add_entry(entry_from_submission(result, sent_order))
        logger.info(f"Recorded entry {entry.id} for invoice {entry.invoice}")
    return JSONResponse(result, status_code=status.HTTP_200_OK)


@router.post("/validate", status_code=status.HTTP_200_OK)
def validate_credentials(payload: CredentialsModel) -> JSONResponse:
    if not payload.api_key or not payload.secret_key:
        return JSONResponse(
            {"valid": False, "message": "API Key and Secret Key are required"},
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    result = SteadfastClient(payload.to_domain()).validate_credentials()
    return JSONResponse(result, status_code=status.HTTP_200_OK)


@router.post("/fraud-check", status_code=status.HTTP_200_OK)
def fraud_check(payload: FraudCheckRequest) -> JSONResponse:
    if not payload.phone:
        return _error("Phone number is required", status.HTTP_400_BAD_REQUEST)
    if not payload.api_key or not payload.secret_key:
        return _error("Steadfast credentials are required", status.HTTP_400_BAD_REQUEST)

    client = SteadfastClient(SteadfastCredentials(api_key=payload.api_key, secret_key=payload.secret_key))
    try:
        data = client.fraud_check(payload.phone)
    except SteadfastAPIError as exc:
        return _error(str(exc), exc.status_code or status.HTTP_502_BAD_GATEWAY)
    except Exception as exc:
        logger.exception(f"Steadfast fraud check error: {exc}")
        return _error("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(data, status_code=status.HTTP_200_OK)


@router.get("/balance", status_code=status.HTTP_200_OK)
def get_balance(store: EntryStore = Depends(get_store)) -> dict:
    client = SteadfastClient(_stored_credentials(store))
    try:
        return client.get_balance()
    except Exception as exc:
        logger.exception(f"Steadfast balance error: {exc}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to fetch balance: {exc}") from exc


def _sync_status(store: EntryStore, result: dict, *, consignment_id: str | None = None, invoice: str | None = None) -> dict | None:
    delivery_status = result.get("delivery_status")
    if not delivery_status:
        return None
    for entry in store.entries:
        if (consignment_id and entry.consignment_id == consignment_id) or (invoice and entry.invoice == invoice):
            updated = store.update_entry(entry.id, status=CourierStatus.coerce(delivery_status))
            return entry_to_dict(updated) if updated else None
    return None


@router.get("/status/invoice/{invoice}", status_code=status.HTTP_200_OK)
def status_by_invoice(
    invoice: str,
    sync: bool = Query(default=False, description="Update the stored entry with the returned status"),
    store: EntryStore = Depends(get_store),
) -> dict:
    client = SteadfastClient(_stored_credentials(store))
    try:
        result = client.status_by_invoice(invoice)
    except Exception as exc:
        logger.exception(f"Steadfast status lookup failed for invoice {invoice}: {exc}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to fetch status: {exc}") from exc
    response = {"upstream": result}
    if sync:
        response["entry"] = _sync_status(store, result, invoice=invoice)
    return response


@router.get("/status/{consignment_id}", status_code=status.HTTP_200_OK)
def status_by_consignment(
    consignment_id: str,
    sync: bool = Query(default=False, description="Update the stored entry with the returned status"),
    store: EntryStore = Depends(get_store),
) -> dict:
    client = SteadfastClient(_stored_credentials(store))
    try:
        result = client.status_by_consignment(consignment_id)
    except Exception as exc:
        logger.exception(f"Steadfast status lookup failed for consignment {consignment_id}: {exc}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to fetch status: {exc}") from exc
    response = {"upstream": result}
    if sync:
        response["entry"] = _sync_status(store, result, consignment_id=consignment_id)
    return response
