#!/usr/bin/env python3
"""
Edge chat router
Serves the chat frontend, streams Workers AI chat completions and proxies
OpenAI-compatible API calls to Groq.
"""

from contextlib import asynccontextmanager
from typing import Optional

import httpx
import prometheus_client
import uvicorn

from fastapi import FastAPI

from edge_router.features.dispatch.endpoints import router as dispatch_router
from edge_router.services.assets import AssetFetcher, StaticAssets
from edge_router.services.inference import InferenceBackend, WorkersAIClient
from edge_router.shared.config import AppConfig, load_config, logger, setup_logging
from edge_router.shared.middleware import log_request_completion


def build_http_client(config: AppConfig) -> httpx.AsyncClient:
    """Shared outbound client, routed through the request proxy when enabled."""
    client_kwargs = {"timeout": config.server.http_timeout}
    if config.request_proxy.enabled and config.request_proxy.url:
        client_kwargs["proxy"] = config.request_proxy.url
        logger.info("Using proxy for httpx client: %s", config.request_proxy.url)
    return httpx.AsyncClient(**client_kwargs)


def create_app(
    config: AppConfig,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    inference: Optional[InferenceBackend] = None,
    assets: Optional[AssetFetcher] = None,
) -> FastAPI:
    """
    Builds the application. Any capability left as None is created from config
    during the lifespan; clients created here are also closed here.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifespan resources."""
        owns_client = http_client is None
        client = build_http_client(config) if owns_client else http_client

        app.state.config = config
        app.state.http_client = client
        app.state.inference = inference or WorkersAIClient(
            http_client=client,
            account_id=config.workers_ai.account_id,
            api_token=config.workers_ai.api_token,
            base_url=config.workers_ai.base_url,
            gateway=config.workers_ai.gateway,
        )
        app.state.assets = assets or StaticAssets(
            config.assets.directory, html=config.assets.html
        )

        logger.info("Application startup complete")
        yield
        if owns_client:
            await client.aclose()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Edge Chat Router",
        description="Streams chat completions and proxies OpenAI-compatible requests",
        version="1.0.0",
        lifespan=lifespan,
        # The catch-all router owns every path, including /docs.
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.middleware("http")(log_request_completion)
    app.include_router(dispatch_router)
    return app


def app_factory() -> FastAPI:
    """Entry point for `uvicorn --factory edge_router.main:app_factory`."""
    config = load_config()
    setup_logging(config)
    return create_app(config)


def main() -> None:
    config = load_config()
    setup_logging(config)

    if not config.proxy.api_key:
        logger.warning("No GROQ_API_KEY configured; proxied requests keep the caller's authorization.")
    if not config.workers_ai.account_id or not config.workers_ai.api_token:
        logger.warning("Workers AI credentials missing; /api/chat will fail until they are set.")

    if config.server.metrics_port:
        prometheus_client.start_http_server(config.server.metrics_port)
        logger.warning("Metrics: http://%s:%s/metrics", config.server.host, config.server.metrics_port)

    logger.warning("Starting edge chat router on %s:%s", config.server.host, config.server.port)

    log_config = uvicorn.config.LOGGING_CONFIG
    log_config["loggers"]["uvicorn.access"]["level"] = config.server.http_log_level.upper()

    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_config=log_config,
        timeout_graceful_shutdown=30,
        server_header=False,
    )


if __name__ == "__main__":
    main()
