from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..utils.geo import BoundingBox
from ..utils.time import utc_now
from . import config
from .errors import NoDataError, SchemaError, VilloError
from .models import Station
from .monitoring import FeedStatus, compute_status
from .normalizer import normalize_stations
from .orchestrator import FetchOrchestrator
from .parser import SchemaVariant, station_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchOutcome:
    ok: bool
    count: int = 0
    error: str | None = None


OutcomeHandler = Callable[[FetchOutcome], None]


class FeedState:
    """Stations and favorites shared with the presentation layer."""

    def __init__(self, favorites: Iterable[str] = ()) -> None:
        self.stations: tuple[Station, ...] = ()
        self.favorites: set[str] = set(favorites)
        self.last_refresh: datetime | None = None
        self.last_error: str | None = None

    def install(self, stations: Sequence[Station], refreshed_at: datetime) -> None:
        self.stations = tuple(stations)
        self.last_refresh = refreshed_at
        self.last_error = None

    def find(self, station_id: str) -> Station | None:
        for station in self.stations:
            if station.id == station_id:
                return station
        return None

    def is_favorite(self, station_id: str) -> bool:
        return station_id in self.favorites

    def toggle_favorite(self, station_id: str) -> bool:
        if self.find(station_id) is None:
            raise KeyError(station_id)
        if station_id in self.favorites:
            self.favorites.discard(station_id)
            return False
        self.favorites.add(station_id)
        return True


def load_stations(
    payload: Any, locale: str, area: BoundingBox, now: datetime | None = None
) -> list[Station]:
    variant, rows = station_rows(payload)
    if variant is SchemaVariant.UNRECOGNIZED:
        raise SchemaError("Unrecognized payload shape")
    if not rows:
        raise SchemaError(f"Payload has an empty '{variant.value}' list")
    stations = normalize_stations(payload, locale, area=area, now=now)
    if not stations:
        raise NoDataError(f"None of the {len(rows)} records had a usable location")
    return stations


class StationFeed:
    def __init__(
        self,
        orchestrator: FetchOrchestrator,
        state: FeedState | None = None,
        locale: str | None = None,
        area: BoundingBox | None = None,
        max_age: float | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.state = state or FeedState()
        self.locale = locale or config.default_locale()
        self.area = area or config.service_area()
        self.max_age = config.max_age() if max_age is None else max_age

    @property
    def is_loading(self) -> bool:
        return self.orchestrator.is_loading

    def status(self, now: datetime | None = None) -> FeedStatus:
        return compute_status(now or utc_now(), self.state.last_refresh, self.max_age)

    async def refresh(self) -> FetchOutcome:
        try:
            payload = await self.orchestrator.fetch()
            stations = load_stations(payload, self.locale, self.area)
        except VilloError as exc:
            self.state.last_error = str(exc)
            logger.error("Station refresh failed: %s", exc)
            return FetchOutcome(ok=False, error=str(exc))

        self.state.install(stations, utc_now())
        logger.info("Loaded %d stations", len(stations))
        return FetchOutcome(ok=True, count=len(stations))

    async def ensure_fresh(self, now: datetime | None = None) -> FetchOutcome | None:
        if self.state.stations and not self.status(now).is_stale:
            return None
        return await self.refresh()


def log_outcome(outcome: FetchOutcome) -> None:
    if outcome.ok:
        logger.info("Data refreshed: %d stations", outcome.count)
    else:
        logger.warning("Error loading data: %s", outcome.error)


async def run_polling(
    feed: StationFeed,
    handler: OutcomeHandler = log_outcome,
    interval_seconds: float | None = None,
    iterations: int | None = None,
) -> None:
    if interval_seconds is None:
        interval_seconds = config.poll_interval()

    completed = 0
    while iterations is None or completed < iterations:
        started_at = time.monotonic()
        try:
            outcome = await feed.refresh()
        except Exception as exc:  # noqa: BLE001
            logger.exception("Station refresh crashed")
            outcome = FetchOutcome(ok=False, error=f"Unexpected error: {exc}")
        try:
            handler(outcome)
        except Exception:  # noqa: BLE001
            logger.exception("Outcome handler failed")
        completed += 1
        if iterations is not None and completed >= iterations:
            break

        elapsed = time.monotonic() - started_at
        await asyncio.sleep(max(0.0, interval_seconds - elapsed))
