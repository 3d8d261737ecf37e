"""
Error types for the QR Inventory service.

Every error carries the HTTP status it maps to and a client-safe message.
A single exception handler in ``main`` renders them as ``{"message": ...}``.
"""
from typing import Optional


class InventoryError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500
    message = "Server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ItemNotFoundError(InventoryError):
    """No item exists with the requested code."""

    status_code = 404
    message = "Item not found"


class DuplicateCodeError(InventoryError):
    """The store rejected an insert because the code is already taken."""

    status_code = 409
    message = "Code already exists"

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Code '{code}' already exists")


class CodeResolutionExhaustedError(InventoryError):
    """No unique code could be found within the allowed number of attempts."""

    status_code = 500

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not assign a unique code after {attempts} attempts")


class StoreUnavailableError(InventoryError):
    """The database could not be reached or timed out."""

    status_code = 503
    message = "Service temporarily unavailable"
