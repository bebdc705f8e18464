from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from villo.ingest.errors import FetchError, HttpStatusError, NetworkError, ParseError
from villo.ingest.orchestrator import FetchOrchestrator
from villo.ingest.sources import Source, proxy_source, relay_source, unwrap_proxy_envelope

PAYLOAD = {"results": [{"id": "1"}]}

PRIMARY = Source(name="direct", url="https://primary.test/records")
PROXY = proxy_source("https://proxy.test/api?action=getStations")
RELAY = Source(name="relay", url="https://relay.test/raw")

Handler = Callable[[httpx.Request], Any]


def _fetch(handler: Handler, sources: list[Source], calls: list[str] | None = None) -> Any:
    async def run() -> Any:
        transport = httpx.MockTransport(_recording(handler, calls))
        async with httpx.AsyncClient(transport=transport) as client:
            orchestrator = FetchOrchestrator(sources, client=client, timeout=1, retry_delay=0)
            return await orchestrator.fetch()

    return asyncio.run(run())


def _recording(handler: Handler, calls: list[str] | None) -> Handler:
    def wrapped(request: httpx.Request) -> Any:
        if calls is not None:
            calls.append(request.url.host)
        return handler(request)

    return wrapped


def test_falls_back_to_next_source_after_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "primary.test":
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(200, json=PAYLOAD)

    assert _fetch(handler, [PRIMARY, RELAY]) == PAYLOAD


def test_falls_back_when_source_url_is_invalid() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "primary.test":
            raise httpx.InvalidURL("Invalid URL")
        return httpx.Response(200, json=PAYLOAD)

    assert _fetch(handler, [PRIMARY, RELAY]) == PAYLOAD


def test_stops_at_first_successful_source() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=PAYLOAD)

    _fetch(handler, [PRIMARY, PROXY, RELAY], calls)

    assert calls == ["primary.test"]


def test_proxy_envelope_is_unwrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "proxy.test":
            return httpx.Response(200, json={"success": True, "data": PAYLOAD, "total_results": 1})
        return httpx.Response(502)

    assert _fetch(handler, [PRIMARY, PROXY]) == PAYLOAD


def test_proxy_failure_envelope_falls_through() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "proxy.test":
            return httpx.Response(200, json={"success": False, "error": "upstream down"})
        return httpx.Response(200, json=PAYLOAD)

    assert _fetch(handler, [PROXY, RELAY], calls) == PAYLOAD
    assert calls == ["proxy.test", "relay.test"]


def test_retries_whole_list_once_then_fails_with_last_cause() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "primary.test":
            return httpx.Response(503)
        return httpx.Response(200, text="<html>not json</html>")

    with pytest.raises(FetchError) as excinfo:
        _fetch(handler, [PRIMARY, RELAY], calls)

    assert calls == ["primary.test", "relay.test", "primary.test", "relay.test"]
    assert isinstance(excinfo.value.cause, ParseError)
    assert excinfo.value.__cause__ is excinfo.value.cause


def test_retry_pass_can_succeed() -> None:
    attempts = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["count"] += 1
        if attempts["count"] == 1:
            return httpx.Response(500)
        return httpx.Response(200, json=PAYLOAD)

    assert _fetch(handler, [PRIMARY]) == PAYLOAD
    assert attempts["count"] == 2


def test_http_status_error_is_reported() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    with pytest.raises(FetchError) as excinfo:
        _fetch(handler, [PRIMARY])

    assert isinstance(excinfo.value.cause, HttpStatusError)
    assert excinfo.value.cause.status_code == 404


def test_slow_source_is_bounded_by_timeout() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "primary.test":
            await asyncio.sleep(5)
        return httpx.Response(200, json=PAYLOAD)

    async def run() -> Any:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            orchestrator = FetchOrchestrator(
                [PRIMARY, RELAY], client=client, timeout=0.05, retry_delay=0
            )
            return await orchestrator.fetch()

    assert asyncio.run(run()) == PAYLOAD


def test_concurrent_fetches_share_one_cycle() -> None:
    calls: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.host)
        await asyncio.sleep(0.01)
        return httpx.Response(200, json=PAYLOAD)

    async def run() -> tuple[Any, Any, bool, bool]:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            orchestrator = FetchOrchestrator([PRIMARY], client=client, timeout=1, retry_delay=0)
            first_call = asyncio.ensure_future(orchestrator.fetch())
            await asyncio.sleep(0)
            loading = orchestrator.is_loading
            second = await orchestrator.fetch()
            first = await first_call
            return first, second, loading, orchestrator.is_loading

    first, second, loading, still_loading = asyncio.run(run())

    assert calls == ["primary.test"]
    assert first == second == PAYLOAD
    assert loading
    assert not still_loading


def test_concurrent_fetches_share_the_failure() -> None:
    calls: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.host)
        await asyncio.sleep(0.01)
        raise httpx.ConnectError("refused", request=request)

    async def run() -> list[Any]:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            orchestrator = FetchOrchestrator([PRIMARY], client=client, timeout=1, retry_delay=0)
            return await asyncio.gather(
                orchestrator.fetch(), orchestrator.fetch(), return_exceptions=True
            )

    results = asyncio.run(run())

    assert len(calls) == 2
    assert all(isinstance(result, FetchError) for result in results)
    assert results[0] is results[1]
    assert isinstance(results[0].cause, NetworkError)


def test_new_cycle_starts_after_previous_completes() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=PAYLOAD)

    async def run() -> None:
        transport = httpx.MockTransport(_recording(handler, calls))
        async with httpx.AsyncClient(transport=transport) as client:
            orchestrator = FetchOrchestrator([PRIMARY], client=client, timeout=1, retry_delay=0)
            await orchestrator.fetch()
            await orchestrator.fetch()

    asyncio.run(run())

    assert calls == ["primary.test", "primary.test"]


def test_orchestrator_requires_sources() -> None:
    with pytest.raises(ValueError):
        FetchOrchestrator([], timeout=1, retry_delay=0)


def test_unwrap_proxy_envelope_rejects_raw_payload() -> None:
    with pytest.raises(ParseError):
        unwrap_proxy_envelope(PAYLOAD)


def test_relay_source_embeds_encoded_target() -> None:
    source = relay_source("https://primary.test/records?limit=100", "https://relay.test/raw?url={url}")

    assert source.url == "https://relay.test/raw?url=https%3A%2F%2Fprimary.test%2Frecords%3Flimit%3D100"
