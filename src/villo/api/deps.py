from __future__ import annotations

import httpx
from fastapi import Request

from ..ingest.poller import StationFeed


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_feed(request: Request) -> StationFeed:
    return request.app.state.feed
