from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.types import Receive, Scope, Send

from ..api.routes import proxy, stations
from ..api.routes.proxy import PROXY_PATH
from ..ingest import config
from ..ingest.opendata_client import build_client
from ..ingest.orchestrator import FetchOrchestrator
from ..ingest.poller import StationFeed
from ..ingest.sources import server_sources


class AppCORSMiddleware(CORSMiddleware):
    """CORS for every route except the proxy, which sets its own headers."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"] == PROXY_PATH:
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)


def create_app(
    transport: httpx.AsyncBaseTransport | None = None,
    feed: StationFeed | None = None,
) -> FastAPI:
    http_client = build_client(config.http_timeout(), transport=transport)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await http_client.aclose()

    app = FastAPI(title="Villo Live API", lifespan=lifespan)
    app.add_middleware(
        AppCORSMiddleware,
        allow_origins=config.cors_origins(),
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
    app.state.http_client = http_client
    app.state.proxy_upstream_url = config.proxy_upstream_url()
    app.state.feed = feed or StationFeed(FetchOrchestrator(server_sources(), client=http_client))
    app.include_router(proxy.router)
    app.include_router(stations.router)

    @app.get("/")
    def root() -> dict[str, str]:
        return {"status": "ok", "service": "villo-live"}

    return app


app = create_app()
