"""
Custom exceptions for order placement and the kitchen workflow.

Each error knows the HTTP status it maps to; the FastAPI exception handler
in ``restaurant_pos.main`` does the rest.
"""

from typing import Optional


class OrderServiceError(Exception):
    """Base exception for order service errors."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInputError(OrderServiceError):
    """Malformed identifiers, missing fields, out-of-range or unknown values."""

    status_code = 400


class InsufficientStockError(InvalidInputError):
    """Raised when a line item cannot be reserved against current stock."""

    def __init__(self, item_name: str, available: int, message: Optional[str] = None):
        self.item_name = item_name
        self.available = available
        if message is None:
            message = f"Insufficient stock for item: {item_name}. Available: {available}."
        super().__init__(message)


class InvalidTransitionError(InvalidInputError):
    """Raised when a status write skips or reverses the kitchen workflow."""

    def __init__(self, current: str, requested: str, message: Optional[str] = None):
        self.current = current
        self.requested = requested
        if message is None:
            message = f"Cannot move order from '{current}' to '{requested}'."
        super().__init__(message)


class MalformedPayloadError(InvalidInputError):
    """Raised when the request body is not valid JSON."""

    def __init__(self, message: str = "Invalid JSON payload."):
        super().__init__(message)


class NotFoundError(OrderServiceError):
    """Raised when a referenced order does not exist."""

    status_code = 404


class TransactionFailureError(OrderServiceError):
    """Raised when the order transaction cannot commit."""

    status_code = 500


class UnexpectedError(OrderServiceError):
    """Anything else that escaped a route, wrapped with a user-facing message."""

    status_code = 500
