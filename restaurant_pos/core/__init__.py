"""
Core module initialization.
Exports configuration, logging and error types.
"""

from restaurant_pos.core.config import get_settings, setup_logging, Settings, EnvironmentMode
from restaurant_pos.core.exceptions import (
    OrderServiceError,
    InvalidInputError,
    InsufficientStockError,
    InvalidTransitionError,
    MalformedPayloadError,
    NotFoundError,
    TransactionFailureError,
    UnexpectedError,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "OrderServiceError",
    "InvalidInputError",
    "InsufficientStockError",
    "InvalidTransitionError",
    "MalformedPayloadError",
    "NotFoundError",
    "TransactionFailureError",
    "UnexpectedError",
]
