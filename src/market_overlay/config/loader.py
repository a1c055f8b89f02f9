"""Config loader — reads YAML, applies OVERLAY_* and provider key env var overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from market_overlay.config.schema import AppConfig


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from a YAML file, then apply env var overrides.

    If *path* is None or the file doesn't exist, returns defaults.

    Environment variable overrides:
        OVERLAY_LOG_LEVEL   -> logging.level
        OVERLAY_LOG_FORMAT  -> logging.format
        OVERLAY_HOST        -> server.host
        OVERLAY_PORT        -> server.port
        COINGECKO_API_KEY   -> coingecko.api_key
        OPENSEA_API_KEY     -> opensea.api_key
    """
    data: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p) as f:
                data = yaml.safe_load(f) or {}

    # Apply env var overrides
    log_level = os.environ.get("OVERLAY_LOG_LEVEL")
    if log_level:
        data.setdefault("logging", {})["level"] = log_level

    log_format = os.environ.get("OVERLAY_LOG_FORMAT")
    if log_format:
        data.setdefault("logging", {})["format"] = log_format

    host = os.environ.get("OVERLAY_HOST")
    if host:
        data.setdefault("server", {})["host"] = host

    port = os.environ.get("OVERLAY_PORT")
    if port:
        data.setdefault("server", {})["port"] = int(port)

    # A section created here still needs its base_url.
    cg_key = os.environ.get("COINGECKO_API_KEY")
    if cg_key:
        section = data.setdefault("coingecko", {})
        section.setdefault("base_url", "https://api.coingecko.com/api/v3")
        section["api_key"] = cg_key

    os_key = os.environ.get("OPENSEA_API_KEY")
    if os_key:
        section = data.setdefault("opensea", {})
        section.setdefault("base_url", "https://api.opensea.io/api/v2")
        section["api_key"] = os_key

    return AppConfig.model_validate(data)
