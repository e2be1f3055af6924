"""HTTP client for the Steadfast courier API."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ...config import settings
from ...models.domain import SteadfastCredentials

logger = logging.getLogger(__name__)


class SteadfastAPIError(RuntimeError):
    """Raised when Steadfast answers with something other than a usable JSON payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _non_json_error(status_code: int) -> SteadfastAPIError:
    if status_code == 500:
        message = (
            "Steadfast server error. This could be due to: 1) Duplicate invoice ID "
            "2) Server maintenance. Try with a different invoice."
        )
    elif status_code in (401, 403):
        message = "Invalid API credentials. Please check your Api-Key and Secret-Key."
    elif status_code == 404:
        message = "Steadfast API endpoint not found. The API may have changed."
    else:
        message = f"Steadfast API error (HTTP {status_code}): Server returned an invalid response"
    return SteadfastAPIError(message, status_code)


class SteadfastClient:
    def __init__(
        self,
        credentials: SteadfastCredentials,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not credentials.api_key or not credentials.secret_key:
            raise ValueError("Steadfast credentials are required.")
        self.credentials = credentials
        self.base_url = (base_url or settings.steadfast_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.http_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.http_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Api-Key": self.credentials.api_key,
            "Secret-Key": self.credentials.secret_key,
            "Content-Type": "application/json",
        }

    def _get(self, path: str) -> httpx.Response:
        """GET with retries on transport failures. HTTP error statuses are returned, not retried."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    return client.get(url, headers=self._headers())
                except (httpx.TimeoutException, httpx.NetworkError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Steadfast GET {path} failed after {attempt} attempts: {exc}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Steadfast GET {path} failed, retrying in {wait_time:.1f}s ({attempt}/{self.max_retries})")
                    time.sleep(wait_time)
        finally:
            client.close()

    def create_order(self, order: dict[str, Any]) -> dict:
        """Submit a parcel order. Not retried, a retry could create a duplicate parcel."""
        url = f"{self.base_url}/create_order"
        payload = {
            "invoice": order.get("invoice"),
            "recipient_name": order.get("recipient_name"),
            "recipient_phone": order.get("recipient_phone"),
            "recipient_address": order.get("recipient_address"),
            "cod_amount": order.get("cod_amount"),
            "note": order.get("note"),
        }
        logger.info(f"Creating Steadfast parcel for invoice {payload['invoice']}")
        with self._get_client() as client:
            response = client.post(url, json=payload, headers=self._headers())

        logger.info(f"Steadfast create_order responded with HTTP {response.status_code}")
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            logger.error(f"Steadfast returned non-JSON response: {response.text[:500]}")
            raise _non_json_error(response.status_code)
        return response.json()

    def status_by_consignment(self, consignment_id: str) -> dict:
        return self._get(f"status_by_cid/{consignment_id}").json()

    def status_by_invoice(self, invoice: str) -> dict:
        return self._get(f"status_by_invoice/{invoice}").json()

    def get_balance(self) -> dict:
        return self._get("get_balance").json()

    def validate_credentials(self) -> dict:
        """Check the credentials against the balance endpoint. Never raises."""
        try:
            response = self._get("get_balance")
        except httpx.HTTPError as exc:
            logger.error(f"Steadfast validation error: {exc}")
            return {
                "valid": False,
                "message": "Could not connect to Steadfast API. Please check your internet connection.",
            }

        if response.status_code in (401, 403):
            return {
                "valid": False,
                "message": "Invalid API credentials. Please check your Api-Key and Secret-Key.",
            }
        if response.status_code != 200:
            return {"valid": False, "message": f"Steadfast API returned error: HTTP {response.status_code}"}

        try:
            data = response.json()
        except ValueError:
            return {"valid": False, "message": "Unexpected API response. Please verify your credentials."}

        if not isinstance(data, dict):
            return {"valid": False, "message": "Unexpected API response. Please verify your credentials."}
        if data.get("status") == 200 or "current_balance" in data:
            return {"valid": True, "balance": data.get("current_balance")}

        error_message = data.get("message") or data.get("error") or data.get("errors")
        if error_message:
            return {"valid": False, "message": str(error_message)}
        return {"valid": False, "message": "Unexpected API response. Please verify your credentials."}

    def fraud_check(self, phone: str) -> dict:
        """Delivery history for ``phone`` as recorded by Steadfast."""
        response = self._get(f"fraud_check/{phone}")
        if not response.is_success:
            raise SteadfastAPIError("Failed to fetch Steadfast data", response.status_code)
        return response.json()
