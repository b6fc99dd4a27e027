"""Configuration management using Pydantic Settings.

Loads configuration from environment variables with .env file support.
"""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration."""

    # Shiprocket API Configuration
    shiprocket_email: Optional[str] = None
    shiprocket_password: Optional[str] = None
    shiprocket_base_url: str = "https://apiv2.shiprocket.in/v1/external"
    http_timeout_seconds: float = 30.0
    token_lifetime_seconds: int = 10 * 24 * 60 * 60

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    environment: str = "development"

    # Storage Configuration
    database_url: str = "sqlite+aiosqlite:///./shipping_charges.db"

    # Dashboard Configuration
    dashboard_api_key: Optional[str] = None

    # GlitchTip Error Monitoring
    glitchtip_dsn: Optional[str] = None

    # Order listing (channel_order_id filter upstream is unreliable, so we scan)
    orders_page_size: int = 50
    order_scan_max_pages: int = 10
    bulk_index_max_orders: int = 1000

    # Wallet ledger
    ledger_page_size: int = 100
    ledger_max_pages: int = 20
    ledger_search_max_pages: int = 1

    # Batch reconciliation
    batch_concurrency: int = 5
    order_timeout_seconds: float = 60.0

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Create a global settings instance
settings = Settings()
