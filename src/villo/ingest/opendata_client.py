from __future__ import annotations

from typing import Any

import httpx

from .errors import HttpStatusError, NetworkError, ParseError

USER_AGENT = "VilloApp/1.0"


def build_client(timeout: float, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
        transport=transport,
    )


async def fetch_json(client: httpx.AsyncClient, url: str, timeout: float | None = None) -> Any:
    try:
        if timeout is None:
            response = await client.get(url)
        else:
            response = await client.get(url, timeout=timeout)
    except httpx.TimeoutException as exc:
        raise NetworkError(f"Request to {url} timed out") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise NetworkError(f"Request to {url} failed: {exc}") from exc

    if not response.is_success:
        raise HttpStatusError(response.status_code, url)

    try:
        return response.json()
    except ValueError as exc:
        raise ParseError(f"JSON parsing error: {exc}") from exc
