"""Tests for configuration loading."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from market_overlay.config import AppConfig, load_config, parse_duration

EXAMPLE_CONFIG = Path(__file__).resolve().parent.parent / "config.yaml.example"


class TestParseDuration:
    def test_units(self):
        assert parse_duration("30s") == timedelta(seconds=30)
        assert parse_duration("5m") == timedelta(minutes=5)
        assert parse_duration("4h") == timedelta(hours=4)
        assert parse_duration("7d") == timedelta(days=7)

    def test_case_and_whitespace(self):
        assert parse_duration(" 24H ") == timedelta(hours=24)

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_duration("soon")
        with pytest.raises(ValueError):
            parse_duration("1w")


class TestAppConfig:
    def test_defaults(self):
        cfg = AppConfig()
        assert cfg.coingecko.base_url == "https://api.coingecko.com/api/v3"
        assert cfg.coingecko.api_key is None
        assert cfg.opensea.base_url == "https://api.opensea.io/api/v2"
        assert cfg.metrics.asset_id == "gunz"
        assert cfg.metrics.windows == ["1h", "4h", "24h"]
        assert cfg.metrics.live_buffer_capacity == 24
        assert cfg.sales.collection == "off-the-grid"
        assert cfg.sales.all_time_high is None
        assert cfg.logging.level == "INFO"
        assert cfg.logging.format == "json"

    def test_invalid_window_rejected(self):
        with pytest.raises(ValidationError):
            AppConfig(metrics={"windows": ["1h", "forever"]})

    def test_invalid_session_window_rejected(self):
        with pytest.raises(ValidationError):
            AppConfig(sales={"session_window": "yesterday"})


class TestLoadConfig:
    def test_load_example_config(self):
        cfg = load_config(EXAMPLE_CONFIG)
        assert cfg.metrics.asset_id == "gunz"
        assert cfg.metrics.poll_interval_s == 300
        assert cfg.sales.poll_interval_s == 15
        assert cfg.sales.all_time_high is not None
        assert cfg.sales.all_time_high.amount == 250000.0
        assert [c.symbol for c in cfg.coins.coins] == ["BTC", "ETH", "SOL", "AVAX"]

    def test_load_nonexistent_file_returns_defaults(self):
        cfg = load_config("/tmp/nonexistent_overlay_config_12345.yaml")
        assert cfg.metrics.asset_id == "gunz"
        assert cfg.opensea.api_key is None

    def test_load_none_returns_defaults(self):
        cfg = load_config(None)
        assert cfg.sales.collection == "off-the-grid"

    def test_env_override_log_level(self, monkeypatch):
        monkeypatch.setenv("OVERLAY_LOG_LEVEL", "DEBUG")
        cfg = load_config(None)
        assert cfg.logging.level == "DEBUG"

    def test_env_override_log_format(self, monkeypatch):
        monkeypatch.setenv("OVERLAY_LOG_FORMAT", "console")
        cfg = load_config(None)
        assert cfg.logging.format == "console"

    def test_env_override_server(self, monkeypatch):
        monkeypatch.setenv("OVERLAY_HOST", "127.0.0.1")
        monkeypatch.setenv("OVERLAY_PORT", "9001")
        cfg = load_config(None)
        assert cfg.server.host == "127.0.0.1"
        assert cfg.server.port == 9001

    def test_env_api_keys_without_file(self, monkeypatch):
        monkeypatch.setenv("OPENSEA_API_KEY", "os-key")
        monkeypatch.setenv("COINGECKO_API_KEY", "cg-key")
        cfg = load_config(None)
        assert cfg.opensea.api_key == "os-key"
        assert cfg.opensea.base_url == "https://api.opensea.io/api/v2"
        assert cfg.coingecko.api_key == "cg-key"

    def test_env_overrides_yaml_values(self, monkeypatch):
        monkeypatch.setenv("OPENSEA_API_KEY", "override")
        cfg = load_config(EXAMPLE_CONFIG)
        assert cfg.opensea.api_key == "override"
        # Non-overridden values preserved
        assert cfg.opensea.timeout_s == 15
        assert cfg.sales.collection == "off-the-grid"

    def test_load_minimal_yaml(self, tmp_path):
        p = tmp_path / "minimal.yaml"
        p.write_text("sales:\n  collection: my-drop\n")
        cfg = load_config(p)
        assert cfg.sales.collection == "my-drop"
        # Defaults still apply for unspecified sections
        assert cfg.metrics.asset_id == "gunz"
        assert cfg.sales.poll_interval_s == 15
