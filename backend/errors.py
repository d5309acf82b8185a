"""Typed failures raised by the order engine.

Every failure path of the order services raises one of these; the cart never
raises. ``main.py`` maps them onto HTTP responses via ``ERROR_STATUS_CODES``.
"""


class StoreError(Exception):
    """Base exception for all storefront errors."""

    pass


class ValidationError(StoreError):
    """Raised when input is malformed or incomplete. Nothing is persisted."""

    def __init__(self, message: str, errors: dict | None = None):
        self.errors = errors or {}
        super().__init__(message)


class NotFound(StoreError):
    """Raised when a referenced entity doesn't exist."""

    def __init__(self, resource: str, key):
        self.resource = resource
        self.key = key
        super().__init__(f"{resource} not found: {key}")


class InvalidTransition(StoreError):
    """Raised when an order status change is not allowed from its current status."""

    def __init__(self, order_id, current: str, target: str):
        self.order_id = order_id
        self.current = current
        self.target = target
        super().__init__(f"Order {order_id} cannot move from {current} to {target}")


class DuplicateIdentifier(StoreError):
    """Raised when a generated order number is already taken."""

    def __init__(self, order_number: str):
        self.order_number = order_number
        super().__init__(f"Order number already exists: {order_number}")


class OrderCreationFailed(StoreError):
    """Raised when no unique order number could be assigned."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not assign a unique order number after {attempts} attempts")


class StorageError(StoreError):
    """Raised when the database rejects or fails an operation."""

    pass


ERROR_STATUS_CODES = {
    ValidationError: 400,
    NotFound: 404,
    InvalidTransition: 409,
    DuplicateIdentifier: 409,
    OrderCreationFailed: 503,
    StorageError: 503,
}
