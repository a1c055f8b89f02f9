"""Configuration system."""

from market_overlay.config.loader import load_config
from market_overlay.config.schema import AppConfig, parse_duration

__all__ = ["AppConfig", "load_config", "parse_duration"]
