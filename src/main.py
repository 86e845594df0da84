"""
Papertrade - Main application entry point.

Serves the simulated trading API: accounts, market orders, portfolios,
transaction history and the leaderboard.
"""

import sys

import uvicorn
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from papertrade.config.logging import get_logger
from papertrade.config.settings import get_required_env_vars, get_settings
from papertrade.utils.config import initialize_application, validate_environment


def main() -> None:
    """Main application entry point."""
    # Initialize application (logging, config, data directory)
    initialize_application()

    logger = get_logger(__name__)
    logger.info("Starting Papertrade application")

    settings = get_settings()

    if not validate_environment():
        logger.error("Environment validation failed")
        print(
            "Please set the required environment variables before running the application."
        )
        print(f"Required variables: {', '.join(get_required_env_vars())}")
        sys.exit(1)

    logger.info(
        "Starting API server",
        host=settings.endpoint_host,
        port=settings.endpoint_port,
        commission=str(settings.commission_per_trade),
    )

    try:
        uvicorn.run(
            "papertrade.webapi.app:create_app",
            factory=True,
            host=settings.endpoint_host,
            port=settings.endpoint_port,
            reload=settings.api_reload,
            log_level=settings.api_log_level.lower(),
        )
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
        print("\nShutting down...")


if __name__ == "__main__":
    main()
