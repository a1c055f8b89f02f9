"""Overlay runtime — owns clients, caches and pollers, and schedules the ticks."""

from market_overlay.orchestrator.runner import OverlayRuntime, resolve_timezone, run_periodic

__all__ = ["OverlayRuntime", "resolve_timezone", "run_periodic"]
