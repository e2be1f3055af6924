"""AI order extraction."""

from .service import (
    ExtractionConfigError,
    ExtractionError,
    ExtractionInputError,
    ExtractionService,
    extract_courier_data,
)

__all__ = [
    "ExtractionConfigError",
    "ExtractionError",
    "ExtractionInputError",
    "ExtractionService",
    "extract_courier_data",
]
