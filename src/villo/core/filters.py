from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from ..ingest.models import Station
from ..utils.geo import distance_km


class Availability(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class SortField(str, Enum):
    NAME = "name"
    ADDRESS = "address"
    BIKES = "bikes"
    SLOTS = "slots"
    CAPACITY = "capacity"
    DISTANCE = "distance"


@dataclass(frozen=True)
class StationRow:
    station: Station
    name: str
    address: str
    is_favorite: bool
    distance_km: float | None


@dataclass(frozen=True)
class FeedStats:
    total_stations: int
    total_bikes: int
    total_slots: int


def build_rows(
    stations: Iterable[Station],
    locale: str,
    favorites: Collection[str] = (),
    origin: tuple[float, float] | None = None,
) -> list[StationRow]:
    rows = []
    for station in stations:
        distance = None
        if origin is not None:
            distance = distance_km(origin[0], origin[1], station.latitude, station.longitude)
        rows.append(
            StationRow(
                station=station,
                name=station.name(locale),
                address=station.address(locale),
                is_favorite=station.id in favorites,
                distance_km=distance,
            )
        )
    return rows


def matches_availability(bikes: int, level: Availability) -> bool:
    if level is Availability.HIGH:
        return bikes > 10
    if level is Availability.MEDIUM:
        return 5 <= bikes <= 10
    if level is Availability.LOW:
        return 0 < bikes < 5
    return bikes == 0


def filter_rows(
    rows: Iterable[StationRow],
    search: str | None = None,
    availability: Availability | None = None,
    favorites_only: bool = False,
) -> list[StationRow]:
    term = (search or "").strip().lower()
    filtered = []
    for row in rows:
        if term and term not in row.name.lower() and term not in row.address.lower():
            continue
        if availability is not None and not matches_availability(
            row.station.bikes_available, availability
        ):
            continue
        if favorites_only and not row.is_favorite:
            continue
        filtered.append(row)
    return filtered


def sort_rows(
    rows: Sequence[StationRow], field: SortField = SortField.NAME, descending: bool = False
) -> list[StationRow]:
    if field is SortField.DISTANCE:
        # rows without a distance stay at the end in either direction
        known = [row for row in rows if row.distance_km is not None]
        unknown = [row for row in rows if row.distance_km is None]
        known.sort(key=lambda row: row.distance_km or 0.0, reverse=descending)
        return known + unknown
    return sorted(rows, key=lambda row: _sort_key(row, field), reverse=descending)


def _sort_key(row: StationRow, field: SortField) -> str | int:
    if field is SortField.NAME:
        return row.name.lower()
    if field is SortField.ADDRESS:
        return row.address.lower()
    if field is SortField.BIKES:
        return row.station.bikes_available
    if field is SortField.SLOTS:
        return row.station.slots_available
    return row.station.capacity


def availability_level(station: Station) -> str:
    if station.capacity <= 0:
        return "low"
    percentage = station.bikes_available / station.capacity * 100
    if percentage > 60:
        return "good"
    if percentage > 30:
        return "medium"
    return "low"


def compute_stats(stations: Sequence[Station]) -> FeedStats:
    return FeedStats(
        total_stations=len(stations),
        total_bikes=sum(station.bikes_available for station in stations),
        total_slots=sum(station.slots_available for station in stations),
    )
