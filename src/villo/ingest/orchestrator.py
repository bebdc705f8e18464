"""Fetch the raw station payload from the first source that answers.

Sources are tried strictly in order. When the whole list fails, the
orchestrator waits ``retry_delay`` seconds and walks the list once more
before giving up with :class:`FetchError`. Only one cycle runs at a time:
callers arriving while a cycle is in flight share its result.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import httpx

from . import config
from .errors import FetchError, NetworkError, SourceError
from .opendata_client import build_client, fetch_json
from .sources import Source

logger = logging.getLogger(__name__)


class FetchOrchestrator:
    def __init__(
        self,
        sources: Sequence[Source],
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        retry_delay: float | None = None,
        retries: int = 1,
    ) -> None:
        if not sources:
            raise ValueError("FetchOrchestrator needs at least one source")
        self._sources = list(sources)
        self._client = client
        self._timeout = config.http_timeout() if timeout is None else timeout
        self._retry_delay = config.retry_delay() if retry_delay is None else retry_delay
        self._retries = retries
        self._inflight: asyncio.Future[Any] | None = None

    @property
    def is_loading(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def fetch(self) -> Any:
        if not self.is_loading:
            self._inflight = asyncio.ensure_future(self._run_cycle())
        else:
            logger.debug("Fetch already in flight, joining it")
        # a cancelled caller must not cancel the shared cycle
        return await asyncio.shield(self._inflight)

    async def _run_cycle(self) -> Any:
        if self._client is not None:
            return await self._attempt_all(self._client)
        async with build_client(self._timeout) as client:
            return await self._attempt_all(client)

    async def _attempt_all(self, client: httpx.AsyncClient) -> Any:
        last_error: SourceError | None = None
        for attempt in range(self._retries + 1):
            if attempt:
                logger.info(
                    "All %d sources failed, retrying in %.1fs", len(self._sources), self._retry_delay
                )
                await asyncio.sleep(self._retry_delay)
            for source in self._sources:
                try:
                    payload = await self._fetch_source(client, source)
                except SourceError as exc:
                    logger.warning("Source %s failed: %s", source.name, exc)
                    last_error = exc
                    continue
                logger.info("Fetched station payload from %s", source.name)
                return payload

        logger.error("Station fetch failed after %d attempts: %s", self._retries + 1, last_error)
        raise FetchError(f"All sources failed: {last_error}", cause=last_error) from last_error

    async def _fetch_source(self, client: httpx.AsyncClient, source: Source) -> Any:
        try:
            body = await asyncio.wait_for(fetch_json(client, source.url, self._timeout), self._timeout)
        except asyncio.TimeoutError as exc:
            raise NetworkError(f"Request to {source.url} timed out") from exc
        return source.extract(body)
