from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...ingest.errors import NetworkError, SourceError
from ...ingest.opendata_client import fetch_json
from ...utils.time import proxy_timestamp
from ..deps import get_http_client
from ..schemas.proxy import (
    ProxyFailureResponse,
    ProxyHealthResponse,
    ProxyInvalidActionResponse,
    ProxyStationsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

PROXY_PATH = "/api"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST",
    "Access-Control-Allow-Headers": "Content-Type",
}


@router.options(PROXY_PATH)
def preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@router.get(PROXY_PATH)
async def proxy(
    request: Request,
    action: str | None = None,
    client: httpx.AsyncClient = Depends(get_http_client),
) -> JSONResponse:
    if action is None:
        return _json(
            400,
            ProxyInvalidActionResponse(error="No action specified or invalid request method"),
        )
    if action == "health":
        return _json(200, ProxyHealthResponse(timestamp=proxy_timestamp()))
    if action != "getStations":
        return _json(400, ProxyInvalidActionResponse(error="Invalid action specified"))

    upstream_url: str = request.app.state.proxy_upstream_url
    try:
        data = await fetch_json(client, upstream_url)
    except NetworkError as exc:
        logger.warning("Upstream request failed: %s", exc)
        return _json(500, ProxyFailureResponse(error=f"Network error: {exc}"))
    except SourceError as exc:
        logger.warning("Upstream returned unusable data: %s", exc)
        return _json(500, ProxyFailureResponse(error=str(exc)))

    results = data.get("results") if isinstance(data, dict) else None
    total = len(results) if isinstance(results, list) else 0
    return _json(
        200,
        ProxyStationsResponse(data=data, timestamp=proxy_timestamp(), total_results=total),
    )


def _json(status_code: int, body: BaseModel) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=CORS_HEADERS)
