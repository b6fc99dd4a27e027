"""Configuration module."""

from shiprocket_recon.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
