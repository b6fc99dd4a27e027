"""Core module - Logging, exceptions and token management."""

from shiprocket_recon.core.exceptions import (
    AuthError,
    DuplicateChargeError,
    NotFoundError,
    ShiprocketError,
    TransientAPIError,
)
from shiprocket_recon.core.logger import setup_logger
from shiprocket_recon.core.token_manager import AuthToken, TokenManager

__all__ = [
    "setup_logger",
    "AuthToken",
    "TokenManager",
    "ShiprocketError",
    "AuthError",
    "TransientAPIError",
    "NotFoundError",
    "DuplicateChargeError",
]
