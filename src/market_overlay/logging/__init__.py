"""Structured logging."""

from market_overlay.logging.setup import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
