from __future__ import annotations

from villo.core.filters import (
    Availability,
    SortField,
    availability_level,
    build_rows,
    compute_stats,
    filter_rows,
    sort_rows,
)
from villo.ingest.models import Station


def _station(station_id: str, name: str, bikes: int, capacity: int = 20, **kwargs: float) -> Station:
    return Station(
        id=station_id,
        name_by_locale={"nl": name, "fr": name, "en": name},
        address_by_locale={"nl": f"{name}straat", "fr": f"Rue {name}", "en": f"{name} street"},
        bikes_available=bikes,
        slots_available=capacity - bikes,
        capacity=capacity,
        latitude=kwargs.get("latitude", 50.85),
        longitude=kwargs.get("longitude", 4.35),
        status="OPEN",
        last_update="2024-05-01T12:00:00Z",
    )


STATIONS = [
    _station("1", "Bourse", 12),
    _station("2", "Arts-Loi", 7),
    _station("3", "Flagey", 2),
    _station("4", "Montgomery", 0),
]


def test_availability_buckets() -> None:
    rows = build_rows(STATIONS, "nl")

    def ids(level: Availability) -> list[str]:
        return [row.station.id for row in filter_rows(rows, availability=level)]

    assert ids(Availability.HIGH) == ["1"]
    assert ids(Availability.MEDIUM) == ["2"]
    assert ids(Availability.LOW) == ["3"]
    assert ids(Availability.NONE) == ["4"]


def test_search_matches_name_or_address_case_insensitively() -> None:
    rows = build_rows(STATIONS, "fr")

    assert [row.station.id for row in filter_rows(rows, search="FLAG")] == ["3"]
    assert [row.station.id for row in filter_rows(rows, search="rue mont")] == ["4"]


def test_favorites_only() -> None:
    rows = build_rows(STATIONS, "nl", favorites={"2", "4"})

    filtered = filter_rows(rows, favorites_only=True)

    assert [row.station.id for row in filtered] == ["2", "4"]


def test_sort_by_name_and_bikes() -> None:
    rows = build_rows(STATIONS, "nl")

    by_name = sort_rows(rows, SortField.NAME)
    by_bikes = sort_rows(rows, SortField.BIKES, descending=True)

    assert [row.name for row in by_name] == ["Arts-Loi", "Bourse", "Flagey", "Montgomery"]
    assert [row.station.bikes_available for row in by_bikes] == [12, 7, 2, 0]


def test_sort_by_distance_from_origin() -> None:
    stations = [
        _station("far", "Far", 1, latitude=50.90, longitude=4.40),
        _station("near", "Near", 1, latitude=50.851, longitude=4.351),
    ]
    rows = build_rows(stations, "nl", origin=(50.85, 4.35))

    ordered = sort_rows(rows, SortField.DISTANCE)

    assert [row.station.id for row in ordered] == ["near", "far"]
    assert ordered[0].distance_km is not None and ordered[0].distance_km < 1


def test_sort_by_distance_without_origin_keeps_order() -> None:
    rows = build_rows(STATIONS, "nl")

    ordered = sort_rows(rows, SortField.DISTANCE, descending=True)

    assert [row.station.id for row in ordered] == ["1", "2", "3", "4"]


def test_availability_level() -> None:
    assert availability_level(_station("a", "A", 15, capacity=20)) == "good"
    assert availability_level(_station("b", "B", 8, capacity=20)) == "medium"
    assert availability_level(_station("c", "C", 2, capacity=20)) == "low"
    assert availability_level(_station("d", "D", 0, capacity=0)) == "low"


def test_compute_stats() -> None:
    stats = compute_stats(STATIONS)

    assert stats.total_stations == 4
    assert stats.total_bikes == 21
    assert stats.total_slots == 59
