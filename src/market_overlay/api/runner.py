#!/usr/bin/env python3
"""FastAPI server runner."""

import argparse

import structlog
import uvicorn

from market_overlay.api.app import create_app
from market_overlay.config.loader import load_config
from market_overlay.logging.setup import setup_logging

logger = structlog.get_logger()


def main(config_path: str | None = None) -> None:
    """Load config, set up logging and run the overlay server with its pollers."""
    if config_path is None:
        parser = argparse.ArgumentParser(description="Market overlay server")
        parser.add_argument("--config", default="config.yaml", help="Path to config file")
        config_path = parser.parse_args().config

    config = load_config(config_path)
    setup_logging(level=config.logging.level, log_format=config.logging.format)

    logger.info("Starting overlay server", host=config.server.host, port=config.server.port)

    try:
        uvicorn.run(
            create_app(config),
            host=config.server.host,
            port=config.server.port,
            log_config=None  # Use our structlog setup
        )
    except Exception as e:
        logger.error("Failed to start server", error=str(e))
        raise


if __name__ == "__main__":
    main()
