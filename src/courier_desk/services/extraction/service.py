"""Free-text order extraction through an OpenAI chat model with structured output."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from openai import OpenAI

from ...config import settings
from ..couriers.orders import generate_invoice_id
from ..phone import normalize_phone

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 5000

SYSTEM_PROMPT = """You are a courier data extraction engine.

Extract:
- invoice
- recipient_name
- recipient_phone
- recipient_address
- cod_amount
- note

Rules:
- Phone must be valid Bangladesh format (e.g., 01XXXXXXXXX or +8801XXXXXXXXX).
- COD must be numeric only (no currency symbols).
- If invoice missing, generate a short unique id like "INV-XXXXX".
- Never hallucinate phone numbers - if not found, use empty string.
- Address should be as complete as possible.
- Return JSON only, no additional text."""

EXTRACTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "invoice": {"type": "string", "description": "Invoice number or order ID"},
        "recipient_name": {"type": "string", "description": "Full name of the recipient"},
        "recipient_phone": {"type": "string", "description": "Phone number in Bangladesh format"},
        "recipient_address": {"type": "string", "description": "Complete delivery address"},
        "cod_amount": {"type": "number", "description": "Cash on delivery amount (numeric only)"},
        "note": {"type": "string", "description": "Additional delivery notes or instructions"},
    },
    "required": ["invoice", "recipient_name", "recipient_phone", "recipient_address", "cod_amount", "note"],
    "additionalProperties": False,
}


class ExtractionInputError(ValueError):
    pass


class ExtractionConfigError(RuntimeError):
    pass


class ExtractionError(RuntimeError):
    pass


def validate_raw_text(raw_text: Any) -> None:
    if not raw_text or not isinstance(raw_text, str):
        raise ExtractionInputError("Raw text is required")
    if len(raw_text) > MAX_TEXT_LENGTH:
        raise ExtractionInputError(f"Text is too long. Maximum {MAX_TEXT_LENGTH} characters.")


def clean_extraction(extracted: dict[str, Any]) -> dict[str, Any]:
    """Fill gaps and normalize the model's answer into submittable order fields."""
    try:
        cod_amount = float(extracted.get("cod_amount") or 0)
    except (TypeError, ValueError):
        cod_amount = 0.0
    cod_amount = max(0.0, cod_amount)
    return {
        "invoice": str(extracted.get("invoice") or "").strip() or generate_invoice_id(),
        "recipient_name": str(extracted.get("recipient_name") or "").strip(),
        "recipient_phone": normalize_phone(str(extracted.get("recipient_phone") or "")),
        "recipient_address": str(extracted.get("recipient_address") or "").strip(),
        "cod_amount": int(cod_amount) if cod_amount.is_integer() else cod_amount,
        "note": str(extracted.get("note") or "").strip(),
    }


class ExtractionService:
    def __init__(self, client: Optional[Any] = None, model: str | None = None) -> None:
        self.model = model or settings.openai_model
        if client is not None:
            self.client = client
            return
        if not settings.openai_api_key:
            raise ExtractionConfigError(
                "OpenAI API key not configured. Please set COURIER_OPENAI_API_KEY."
            )
        self.client = OpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)

    def extract(self, raw_text: Any) -> dict[str, Any]:
        validate_raw_text(raw_text)

        logger.info(f"Extracting courier data from {len(raw_text)} characters of text")
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": f"Extract courier data from the following text:\n\n{raw_text}"},
                ],
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": "courier_data", "strict": True, "schema": EXTRACTION_SCHEMA},
                },
                temperature=0.1,
                max_tokens=500,
            )
        except Exception as exc:
            logger.error(f"AI extraction request failed: {exc}")
            raise ExtractionError(str(exc)) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ExtractionError("No response from AI")
        try:
            extracted = json.loads(content)
        except json.JSONDecodeError as exc:
            raise ExtractionError("AI returned malformed JSON") from exc
        if not isinstance(extracted, dict):
            raise ExtractionError("AI returned an unexpected payload")
        return clean_extraction(extracted)


def extract_courier_data(raw_text: Any) -> dict[str, Any]:
    validate_raw_text(raw_text)
    return ExtractionService().extract(raw_text)
