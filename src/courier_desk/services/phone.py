"""Bangladesh mobile number normalization.

Normalization is best-effort and never raises; validity is a separate check so
callers decide whether to reject a number.
"""

from __future__ import annotations

import re

_STRIP_PATTERN = re.compile(r"[^\d+]")
_NON_DIGIT_PATTERN = re.compile(r"\D")
_VALID_PATTERN = re.compile(r"01[3-9]\d{8}")


def normalize_phone(raw: str) -> str:
    """Return ``raw`` in national format.

    >>> normalize_phone("+880 1712-345678")
    '01712345678'
    >>> normalize_phone("8801712345678")
    '01712345678'
    """
    cleaned = _STRIP_PATTERN.sub("", raw or "")
    if cleaned.startswith("+880"):
        cleaned = "0" + cleaned[4:]
    elif cleaned.startswith("880"):
        cleaned = "0" + cleaned[3:]
    return cleaned


def is_valid_phone(value: str) -> bool:
    """True for an 11 digit mobile number such as ``01712345678``."""
    return bool(_VALID_PATTERN.fullmatch(value or ""))


def digits_only(raw: str) -> str:
    return _NON_DIGIT_PATTERN.sub("", raw or "")
