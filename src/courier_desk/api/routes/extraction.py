"""AI extraction endpoint."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ...services.extraction import (
    ExtractionConfigError,
    ExtractionInputError,
    extract_courier_data,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["extraction"])


class ExtractRequest(BaseModel):
    raw_text: Any = Field(default=None, alias="rawText")


@router.post("/ai-extract", status_code=status.HTTP_200_OK)
def ai_extract(payload: ExtractRequest) -> JSONResponse:
    try:
        extracted = extract_courier_data(payload.raw_text)
    except ExtractionInputError as exc:
        return JSONResponse({"error": str(exc)}, status_code=status.HTTP_400_BAD_REQUEST)
    except ExtractionConfigError as exc:
        return JSONResponse({"error": str(exc)}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    except Exception as exc:
        logger.exception(f"AI extraction error: {exc}")
        return JSONResponse(
            {"error": str(exc) or "Failed to extract data"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return JSONResponse(extracted, status_code=status.HTTP_200_OK)
