"""Shiprocket API client."""

from shiprocket_recon.api.client import ShiprocketAPIClient

__all__ = ["ShiprocketAPIClient"]
