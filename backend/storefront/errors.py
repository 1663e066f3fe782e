"""
Stable error kinds surfaced by the cart, checkout and order services.

Every failure the core reports is one of these; the HTTP layer renders
`kind` verbatim so API consumers can branch on it.
"""
from typing import Any, Dict, Optional


class StoreError(Exception):
    kind = "StoreError"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidArgument(StoreError):
    kind = "InvalidArgument"
    status_code = 400


class NotFound(StoreError):
    kind = "NotFound"
    status_code = 404


class InsufficientStock(StoreError):
    kind = "InsufficientStock"
    status_code = 409

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            f"insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}",
            {"product_id": product_id, "requested": requested, "available": available},
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class EmptyCart(StoreError):
    kind = "EmptyCart"
    status_code = 409

    def __init__(self, message: str = "cart is empty"):
        super().__init__(message)


class TransactionFailed(StoreError):
    kind = "TransactionFailed"
    status_code = 503


class CartConflict(Exception):
    """A cart changed underneath a checkout attempt. Retried, never surfaced."""
