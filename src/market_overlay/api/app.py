"""FastAPI application for the stream overlay."""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response

from market_overlay.config.loader import load_config
from market_overlay.config.schema import AppConfig
from market_overlay.errors import MissingApiKey, UpstreamUnavailable
from market_overlay.orchestrator import OverlayRuntime
from market_overlay.views import (
    render_coin_list_html,
    render_metrics_html,
    render_overlay_page,
    render_sales_html,
)

logger = structlog.get_logger("api")


def _passthrough(provider: str, resp: httpx.Response) -> Response:
    """Upstream JSON verbatim on success, upstream status verbatim on error."""
    if resp.is_success:
        return Response(content=resp.content, status_code=200, media_type="application/json")
    logger.warning("proxy_upstream_error", provider=provider, status=resp.status_code)
    return JSONResponse(
        status_code=resp.status_code,
        content={"error": f"{provider} API error", "status": resp.status_code, "detail": resp.text},
    )


def _bad_gateway(provider: str, exc: UpstreamUnavailable) -> JSONResponse:
    logger.warning("proxy_network_error", provider=provider, error=str(exc))
    return JSONResponse(status_code=502, content={"error": "Bad gateway", "detail": exc.detail})


def create_app(
    config: AppConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    start_pollers: bool = True,
) -> FastAPI:
    """Build the app around one OverlayRuntime.

    Pollers start and stop with the application lifespan; the proxies work
    whether or not they run.
    """
    config = config or AppConfig()
    runtime = OverlayRuntime(config, transport=transport)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if start_pollers:
            await runtime.start()
        try:
            yield
        finally:
            await runtime.stop()

    app = FastAPI(
        title="Market Overlay",
        description="Live token metrics and NFT sales feed for stream overlays",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.runtime = runtime
    app.state.config = config

    # Browser sources load the overlay from arbitrary origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "pollers": [p.status() for p, _ in runtime.schedule()],
        }

    # ═══════════════════════════════════════════════════════════════
    # Pass-through proxies
    # ═══════════════════════════════════════════════════════════════

    @app.get("/api/market-chart")
    async def market_chart_proxy(
        id: Optional[str] = None,
        vs_currency: str = "usd",
        days: Optional[str] = None,
        interval: Optional[str] = None,
    ):
        """CoinGecko market chart, with the API key attached when configured."""
        try:
            resp = await runtime.coingecko.fetch_market_chart(
                id or config.metrics.asset_id,
                vs_currency=vs_currency,
                days=days or config.metrics.lookback_days,
                interval=interval,
            )
        except UpstreamUnavailable as exc:
            return _bad_gateway("CoinGecko", exc)
        return _passthrough("CoinGecko", resp)

    @app.get("/api/opensea-sales")
    async def opensea_sales_proxy(
        collection: Optional[str] = None,
        limit: Optional[str] = None,
    ):
        """OpenSea sale events for a collection. Fails closed without an API key."""
        if not runtime.opensea.api_key:
            logger.error("proxy_misconfigured", provider="OpenSea")
            return JSONResponse(status_code=500, content={"error": "Server misconfigured: no API key"})
        if not collection:
            return JSONResponse(status_code=400, content={"error": "Missing collection parameter"})
        try:
            resp = await runtime.opensea.fetch_sale_events(collection, limit)
        except MissingApiKey:
            return JSONResponse(status_code=500, content={"error": "Server misconfigured: no API key"})
        except UpstreamUnavailable as exc:
            return _bad_gateway("OpenSea", exc)
        return _passthrough("OpenSea", resp)

    # ═══════════════════════════════════════════════════════════════
    # Overlay state
    # ═══════════════════════════════════════════════════════════════

    @app.get("/api/overlay/metrics")
    async def overlay_metrics():
        return {
            "status": runtime.metrics.status(),
            "snapshot": runtime.metrics.snapshot.model_dump(mode="json"),
            "live_samples": list(runtime.buffer.snapshot()),
            "view": runtime.metrics.view.model_dump(),
        }

    @app.get("/api/overlay/sales")
    async def overlay_sales():
        return {
            "status": runtime.sales.status(),
            "view": runtime.sales.view.model_dump(),
        }

    @app.get("/api/overlay/coins")
    async def overlay_coins():
        return {
            "status": runtime.coins.status(),
            "view": runtime.coins.view.model_dump(),
        }

    @app.get("/overlay/metrics", response_class=HTMLResponse)
    async def overlay_metrics_html():
        return render_metrics_html(runtime.metrics.view, runtime.metrics.error)

    @app.get("/overlay/sales", response_class=HTMLResponse)
    async def overlay_sales_html():
        return render_sales_html(runtime.sales.view, runtime.sales.error)

    @app.get("/overlay/coins", response_class=HTMLResponse)
    async def overlay_coins_html():
        return render_coin_list_html(runtime.coins.view, runtime.coins.error)

    @app.get("/overlay", response_class=HTMLResponse)
    async def overlay_page(request: Request):
        """Full overlay; ``?widgets=metrics,sales`` picks which fragments to include."""
        requested = request.query_params.get("widgets", "metrics,sales,coins")
        renderers = {
            "metrics": lambda: render_metrics_html(runtime.metrics.view, runtime.metrics.error),
            "sales": lambda: render_sales_html(runtime.sales.view, runtime.sales.error),
            "coins": lambda: render_coin_list_html(runtime.coins.view, runtime.coins.error),
        }
        fragments = [
            renderers[name]() for name in (w.strip() for w in requested.split(",")) if name in renderers
        ]
        return render_overlay_page(fragments, refresh_s=config.display.refresh_s)

    return app


def app_factory() -> FastAPI:
    """Entry point for `uvicorn --factory market_overlay.api.app:app_factory`.

    Reads the config named by ``OVERLAY_CONFIG`` (default ``config.yaml``) only
    when called, so importing this module never builds a runtime.
    """
    return create_app(load_config(os.environ.get("OVERLAY_CONFIG", "config.yaml")))
