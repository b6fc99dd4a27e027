"""Database module."""

from .base import Base, get_engine, get_session_factory, init_db
from .models import ShippingCharge
from .repository import ShippingChargeRepository

__all__ = [
    "Base",
    "get_engine",
    "get_session_factory",
    "init_db",
    "ShippingCharge",
    "ShippingChargeRepository",
]
