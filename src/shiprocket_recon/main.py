"""Shiprocket reconciliation service - Main Entry Point."""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)


def run():
    """Run the reconciliation service."""
    from shiprocket_recon.config.settings import Settings

    config = Settings()
    uvicorn.run(
        "shiprocket_recon.server.app:app",
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,  # Structured logging instead
    )


if __name__ == "__main__":
    run()
