"""Courier API clients and order submission."""

from .hoorin_client import HoorinClient
from .orders import OrderRejectedError, OrderValidationError, entry_from_submission, submit_order
from .steadfast_client import SteadfastAPIError, SteadfastClient

__all__ = [
    "HoorinClient",
    "SteadfastClient",
    "SteadfastAPIError",
    "OrderRejectedError",
    "OrderValidationError",
    "entry_from_submission",
    "submit_order",
]
