"""Reconciliation service FastAPI application."""

import logging

from fastapi import FastAPI

from shiprocket_recon.api.client import ShiprocketAPIClient
from shiprocket_recon.config.settings import Settings, settings as default_settings
from shiprocket_recon.core.logger import setup_logger
from shiprocket_recon.db import ShippingChargeRepository, get_engine, get_session_factory, init_db
from shiprocket_recon.server.routes import router, set_repository, set_shipping_charge_service
from shiprocket_recon.services.ledger_matcher import LedgerMatcher
from shiprocket_recon.services.order_indexer import OrderIndexer
from shiprocket_recon.services.reconciliation_service import ReconciliationBatchRunner
from shiprocket_recon.services.shipping_charge_service import ShippingChargeService

logger = setup_logger(__name__)


def build_service(api_client: ShiprocketAPIClient, repository, config: Settings) -> ShippingChargeService:
    """Wire indexer, ledger matcher and batch runner around a client and repository."""
    order_indexer = OrderIndexer(
        api_client,
        page_size=config.orders_page_size,
        scan_max_pages=config.order_scan_max_pages,
    )
    ledger_matcher = LedgerMatcher(
        api_client,
        page_size=config.ledger_page_size,
        max_pages=config.ledger_max_pages,
        search_max_pages=config.ledger_search_max_pages,
    )
    batch_runner = ReconciliationBatchRunner(
        order_indexer,
        ledger_matcher,
        repository,
        batch_size=config.batch_concurrency,
        max_index_orders=config.bulk_index_max_orders,
        order_timeout_seconds=config.order_timeout_seconds,
    )
    return ShippingChargeService(repository, batch_runner, ledger_matcher)


def _init_error_monitoring(config: Settings) -> None:
    if not config.glitchtip_dsn:
        return
    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.logging import LoggingIntegration

        sentry_sdk.init(
            dsn=config.glitchtip_dsn,
            environment=config.environment,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                LoggingIntegration(
                    level=None,  # Capture all log levels as breadcrumbs
                    event_level=logging.ERROR,
                ),
            ],
            traces_sample_rate=0.1,
            profiles_sample_rate=0.0,
            send_default_pii=False,
        )
        logger.info("GlitchTip error monitoring initialized")
    except Exception as e:
        logger.error(f"Failed to initialize GlitchTip: {e}")


def create_app(config: Settings = default_settings) -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Shiprocket Shipping Charge Reconciliation",
        description="Reconciles Shiprocket logistics costs per sales order",
        version="1.0.0",
    )
    # Read by request dependencies such as verify_api_key
    app.state.settings = config

    _init_error_monitoring(config)

    @app.on_event("startup")
    async def startup():
        """Initialize database, Shiprocket client and services on startup."""
        try:
            logger.info("=" * 60)
            logger.info("Starting Shiprocket reconciliation service...")
            logger.info("=" * 60)

            engine = get_engine(config.database_url)
            await init_db(engine)
            app.state.engine = engine
            repository = ShippingChargeRepository(get_session_factory(engine))
            logger.info("✓ Database initialized")

            if not config.shiprocket_email or not config.shiprocket_password:
                logger.warning("SHIPROCKET_EMAIL / SHIPROCKET_PASSWORD not set; fetches will fail")

            api_client = ShiprocketAPIClient(
                email=config.shiprocket_email,
                password=config.shiprocket_password,
                base_url=config.shiprocket_base_url,
                timeout=config.http_timeout_seconds,
                token_lifetime_seconds=config.token_lifetime_seconds,
            )
            app.state.api_client = api_client
            logger.info("✓ Shiprocket API client initialized")

            set_repository(repository)
            set_shipping_charge_service(build_service(api_client, repository, config))
            logger.info("✓ Shipping charge service initialized")

        except Exception as e:
            logger.error(f"Failed to start service: {e}", exc_info=True)
            raise

    @app.on_event("shutdown")
    async def shutdown():
        """Close the HTTP client and database engine."""
        logger.info("Shutting down Shiprocket reconciliation service...")
        set_shipping_charge_service(None)
        set_repository(None)

        if getattr(app.state, "api_client", None) is not None:
            await app.state.api_client.close()
        if getattr(app.state, "engine", None) is not None:
            await app.state.engine.dispose()

        logger.info("Shutdown completed")

    app.include_router(router)

    return app


# Create app instance
app = create_app()
