"""Exception types raised by the reconciliation engine."""

from typing import Optional


class ShiprocketError(Exception):
    """Base class for all reconciliation errors."""


class AuthError(ShiprocketError):
    """Credential exchange with Shiprocket was rejected.

    Fatal to the whole run; never retried.
    """


class TransientAPIError(ShiprocketError):
    """Non-2xx response or transport failure from an upstream endpoint."""

    def __init__(self, message: str, status_code: Optional[int] = None, path: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.path = path


class NotFoundError(TransientAPIError):
    """404 from an upstream endpoint."""


class DuplicateChargeError(ShiprocketError):
    """A shipping charge record already exists for the order number."""

    def __init__(self, order_number: str):
        super().__init__(f"Shipping charge already recorded for {order_number}")
        self.order_number = order_number
