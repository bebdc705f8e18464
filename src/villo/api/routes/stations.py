from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from ...core.filters import (
    Availability,
    SortField,
    build_rows,
    compute_stats,
    filter_rows,
    sort_rows,
)
from ...ingest.config import SUPPORTED_LOCALES
from ...ingest.poller import StationFeed
from ..deps import get_feed
from ..schemas.stations import FavoriteResponse, FeedStatsOut, StationOut, StationsResponse


router = APIRouter()


@router.get("/stations", response_model=StationsResponse)
async def list_stations(
    locale: str | None = None,
    search: str | None = None,
    availability: Availability | None = None,
    favorite: list[str] = Query(default=[]),
    favorites_only: bool = False,
    sort: SortField = SortField.NAME,
    direction: Literal["asc", "desc"] = "asc",
    lat: float | None = None,
    lon: float | None = None,
    feed: StationFeed = Depends(get_feed),
) -> StationsResponse:
    locale = locale or feed.locale
    if locale not in SUPPORTED_LOCALES:
        raise HTTPException(status_code=422, detail=f"Unsupported locale: {locale}")

    await feed.ensure_fresh()
    state = feed.state
    if not state.stations:
        raise HTTPException(
            status_code=503, detail=state.last_error or "Station data is not available yet"
        )

    origin = (lat, lon) if lat is not None and lon is not None else None
    rows = build_rows(state.stations, locale, state.favorites | set(favorite), origin)
    rows = filter_rows(rows, search, availability, favorites_only)
    rows = sort_rows(rows, sort, descending=direction == "desc")
    stats = compute_stats(state.stations)
    return StationsResponse(
        stations=[StationOut.from_row(row) for row in rows],
        total=len(rows),
        stats=FeedStatsOut(
            total_stations=stats.total_stations,
            total_bikes=stats.total_bikes,
            total_slots=stats.total_slots,
        ),
        last_refresh=state.last_refresh,
        stale=feed.status().is_stale,
        error=state.last_error,
    )


@router.post("/stations/{station_id}/favorite", response_model=FavoriteResponse)
def toggle_favorite(station_id: str, feed: StationFeed = Depends(get_feed)) -> FavoriteResponse:
    try:
        is_favorite = feed.state.toggle_favorite(station_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown station: {station_id}") from None
    return FavoriteResponse(id=station_id, is_favorite=is_favorite)
