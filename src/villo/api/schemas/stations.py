from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from ...core.filters import StationRow, availability_level


class StationOut(BaseModel):
    id: str
    name: str
    address: str
    name_by_locale: dict[str, str]
    address_by_locale: dict[str, str]
    bikes_available: int
    slots_available: int
    capacity: int
    latitude: float
    longitude: float
    status: str
    last_update: str
    availability_level: str
    is_favorite: bool = False
    distance_km: float | None = None

    @classmethod
    def from_row(cls, row: StationRow) -> StationOut:
        station = row.station
        return cls(
            id=station.id,
            name=row.name,
            address=row.address,
            name_by_locale=station.name_by_locale,
            address_by_locale=station.address_by_locale,
            bikes_available=station.bikes_available,
            slots_available=station.slots_available,
            capacity=station.capacity,
            latitude=station.latitude,
            longitude=station.longitude,
            status=station.status,
            last_update=station.last_update,
            availability_level=availability_level(station),
            is_favorite=row.is_favorite,
            distance_km=row.distance_km,
        )


class FeedStatsOut(BaseModel):
    total_stations: int
    total_bikes: int
    total_slots: int


class StationsResponse(BaseModel):
    stations: list[StationOut]
    total: int
    stats: FeedStatsOut
    last_refresh: datetime | None = None
    stale: bool
    error: str | None = None


class FavoriteResponse(BaseModel):
    id: str
    is_favorite: bool
