"""
Typed marketplace errors.

Every error carries a stable ``code`` (part of the public API envelope), an
HTTP status and optional structured ``details``. Services raise these; the API
exception handler renders them.
"""

from typing import Any, Optional


class MarketplaceError(Exception):
    """Base class for marketplace domain exceptions."""

    status_code = 500
    default_code = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Any = None, code: Optional[str] = None):
        self.message = message or self.default_message
        self.details = details
        self.code = code or self.default_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        data = {"code": self.code, "message": self.message}
        if self.details is not None:
            data["details"] = self.details
        return data


# Validation (400)


class ValidationFailed(MarketplaceError):
    status_code = 400
    default_code = "VALIDATION_ERROR"
    default_message = "Invalid request data"


class EmptyCart(ValidationFailed):
    default_code = "EMPTY_CART"
    default_message = "Cannot create orders from an empty cart"


class InvalidTransition(ValidationFailed):
    default_code = "INVALID_TRANSITION"

    def __init__(self, current: str, requested: str, message: Optional[str] = None):
        super().__init__(
            message or f"Cannot transition order from '{current}' to '{requested}'",
            details={"current_status": current, "requested_status": requested},
        )


class OrderNotDelivered(ValidationFailed):
    default_code = "ORDER_NOT_DELIVERED"
    default_message = "Only delivered orders can be rated"


# Authorization (403)


class Forbidden(MarketplaceError):
    status_code = 403
    default_code = "AUTHORIZATION_ERROR"
    default_message = "You do not have permission to perform this action"


# Not found (404)


class NotFound(MarketplaceError):
    status_code = 404
    default_code = "NOT_FOUND"
    resource = "Resource"

    def __init__(self, identifier=None, message: Optional[str] = None):
        if message is None:
            message = f"{self.resource} '{identifier}' not found" if identifier else f"{self.resource} not found"
        super().__init__(message, details={"id": str(identifier)} if identifier else None)


class OrderNotFound(NotFound):
    default_code = "ORDER_NOT_FOUND"
    resource = "Order"


class ProductNotFound(NotFound):
    default_code = "PRODUCT_NOT_FOUND"
    resource = "Product"


class BusinessNotFound(NotFound):
    default_code = "BUSINESS_NOT_FOUND"
    resource = "Business"


class ConsumerNotFound(NotFound):
    default_code = "CONSUMER_NOT_FOUND"
    resource = "Consumer"


# Conflict (409): well-formed requests that current state cannot honour.
# Clients must not blindly retry these.


class ConflictError(MarketplaceError):
    status_code = 409
    default_code = "CONFLICT"


class InsufficientStock(ConflictError):
    default_code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id=None, requested: int = 0, available: Optional[int] = None, message=None, details=None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        if details is None:
            details = {"product_id": str(product_id), "requested": requested, "available": available}
        super().__init__(
            message or f"Insufficient stock for product {product_id}. Available: {available}, Requested: {requested}",
            details=details,
        )


class OrderAlreadyFinalized(ConflictError):
    default_code = "ORDER_ALREADY_FINALIZED"

    def __init__(self, order_id, status: str):
        super().__init__(
            f"Order {order_id} is already {status} and cannot change status",
            details={"order_id": str(order_id), "current_status": status},
        )


class DuplicateRating(ConflictError):
    default_code = "DUPLICATE_RATING"

    def __init__(self, order_id, direction: str):
        super().__init__(
            f"Order {order_id} already has a {direction} rating",
            details={"order_id": str(order_id), "direction": direction},
        )


# Integration (502) and internal (500)


class IntegrationError(MarketplaceError):
    status_code = 502
    default_code = "INTEGRATION_ERROR"
    default_message = "External service unavailable"

    def __init__(self, service: str, message: Optional[str] = None, details: Any = None):
        self.service = service
        super().__init__(f"{service}: {message or self.default_message}", details=details)


class StorageError(MarketplaceError):
    status_code = 500
    default_code = "INTERNAL_ERROR"
    default_message = "Database operation failed"
