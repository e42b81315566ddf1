"""FastAPI application factory."""

from collections.abc import Mapping
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import RELAY_METHODS, handle_relay
from core.config import Config, load_config
from core.protocols import DispatchOverride, RelayLogger
from services.relay import Relay
from services.upstream import UpstreamClient
from ui.console import ConsoleLogger


def create_app(
    config: Config | None = None,
    logger: RelayLogger | None = None,
    overrides: Mapping[str, DispatchOverride] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    if config is None:
        config = load_config()
    if logger is None:
        logger = ConsoleLogger(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.upstream.max_connections,
            max_keepalive_connections=config.upstream.max_keepalive_connections,
        )
        client = httpx.AsyncClient(
            timeout=config.upstream.timeout,
            limits=limits,
            transport=transport,
        )
        upstream = UpstreamClient(client, max_redirects=config.upstream.max_redirects)
        app.state.relay = Relay(config, upstream, logger, overrides=overrides)
        try:
            yield
        finally:
            await upstream.aclose()

    app = FastAPI(title="Salesforce AJAX Proxy", version="0.1.0", lifespan=lifespan)
    path = config.proxy.path.rstrip("/")

    @app.api_route(path or "/", methods=RELAY_METHODS)
    async def relay_root(request: Request):
        return await handle_relay(request)

    @app.api_route(f"{path}/{{rest:path}}", methods=RELAY_METHODS)
    async def relay_path(request: Request):
        return await handle_relay(request)

    return app
