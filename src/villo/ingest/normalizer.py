"""Turn raw open-data payloads into canonical :class:`Station` records.

Two upstream shapes are understood. The explore v2.1 API returns
``{"results": [...]}`` with canonical field names; the older v1 API returns
``{"records": [{"fields": {...}}]}`` with locale-flavoured names such as
``nom`` or ``adresse``. Each shape has its own :class:`FieldTable` listing,
per canonical field, the source names to try in order.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..utils.geo import BRUSSELS_AREA, BoundingBox, in_service_area
from ..utils.time import isoformat_utc, utc_now
from .config import SUPPORTED_LOCALES
from .models import Station
from .parser import SchemaVariant, station_rows
from .validators import coerce_coordinate, coerce_count, coerce_text, first_present

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "OPEN"

NAME_PLACEHOLDERS = {"nl": "Onbekend station", "fr": "Station inconnue", "en": "Unknown station"}
ADDRESS_PLACEHOLDERS = {"nl": "Geen adres", "fr": "Pas d'adresse", "en": "No address"}

Chain = tuple[str, ...]


@dataclass(frozen=True)
class FieldTable:
    ids: Chain
    names: dict[str, Chain]
    addresses: dict[str, Chain]
    bikes: Chain
    slots: Chain
    capacity: Chain
    status: Chain
    last_update: Chain
    latitude: Chain
    longitude: Chain
    geo_point: Chain


_IDS: Chain = ("id", "number", "station_id")
_LATITUDE: Chain = ("latitude", "lat")
_LONGITUDE: Chain = ("longitude", "lon", "lng")

RESULTS_FIELDS = FieldTable(
    ids=_IDS,
    names={
        "nl": ("name_nl", "name"),
        "fr": ("name_fr", "name"),
        "en": ("name_en", "name"),
    },
    addresses={
        "nl": ("address_nl", "address"),
        "fr": ("address_fr", "address"),
        "en": ("address_en", "address"),
    },
    bikes=("available_bikes",),
    slots=("available_bike_stands",),
    capacity=("bike_stands",),
    status=("status",),
    last_update=("last_update",),
    latitude=_LATITUDE,
    longitude=_LONGITUDE,
    geo_point=("geo_point_2d", "position"),
)

LEGACY_FIELDS = FieldTable(
    ids=_IDS,
    names={
        "nl": ("name_nl", "naam", "naam_nl", "name"),
        "fr": ("name_fr", "nom", "nom_fr", "name"),
        "en": ("name_en", "name"),
    },
    addresses={
        "nl": ("address_nl", "adres", "adres_nl", "address"),
        "fr": ("address_fr", "adresse", "adresse_fr", "address"),
        "en": ("address_en", "address"),
    },
    bikes=("available_bikes", "available_bike"),
    slots=("available_bike_stands", "available_bike_stand"),
    capacity=("bike_stands", "bike_stand"),
    status=("status", "etat"),
    last_update=("last_update", "lastupdate", "last_updated"),
    latitude=_LATITUDE,
    longitude=_LONGITUDE,
    geo_point=("position", "geo_point_2d", "geo_point", "geopoint"),
)

FIELD_TABLES = {
    SchemaVariant.RESULTS: RESULTS_FIELDS,
    SchemaVariant.LEGACY: LEGACY_FIELDS,
}


def normalize_stations(
    payload: Any,
    locale: str = "nl",
    area: BoundingBox = BRUSSELS_AREA,
    now: datetime | None = None,
) -> list[Station]:
    if locale not in SUPPORTED_LOCALES:
        raise ValueError(f"Unsupported locale {locale!r}, expected one of {SUPPORTED_LOCALES}")

    variant, rows = station_rows(payload)
    table = FIELD_TABLES.get(variant)
    if table is None:
        logger.debug("Unrecognized payload shape, no stations extracted")
        return []

    normalized_at = isoformat_utc(now or utc_now())
    stations: list[Station] = []
    seen_ids: set[str] = set()
    for row in rows:
        station = build_station(row, table, locale, normalized_at)
        if not in_service_area(station.latitude, station.longitude, area):
            logger.debug(
                "Dropping station %s at (%s, %s): outside service area",
                station.id,
                station.latitude,
                station.longitude,
            )
            continue
        if station.id in seen_ids:
            logger.warning("Dropping duplicate station id %s", station.id)
            continue
        seen_ids.add(station.id)
        stations.append(station)
    return stations


def build_station(
    row: Mapping[str, Any], table: FieldTable, locale: str, normalized_at: str
) -> Station:
    latitude, longitude = extract_coordinates(row, table)
    return Station(
        id=station_id(row, table),
        name_by_locale=_localized(row, table.names, locale, NAME_PLACEHOLDERS),
        address_by_locale=_localized(row, table.addresses, locale, ADDRESS_PLACEHOLDERS),
        bikes_available=coerce_count(first_present(row, table.bikes)),
        slots_available=coerce_count(first_present(row, table.slots)),
        capacity=coerce_count(first_present(row, table.capacity)),
        latitude=latitude,
        longitude=longitude,
        status=coerce_text(first_present(row, table.status)) or DEFAULT_STATUS,
        last_update=coerce_text(first_present(row, table.last_update)) or normalized_at,
    )


def station_id(row: Mapping[str, Any], table: FieldTable) -> str:
    # Generated ids are unique per batch but change on every fetch.
    return coerce_text(first_present(row, table.ids)) or f"gen-{uuid.uuid4().hex}"


def extract_coordinates(row: Mapping[str, Any], table: FieldTable) -> tuple[float, float]:
    latitude = _first_coordinate(row, table.latitude)
    longitude = _first_coordinate(row, table.longitude)
    if latitude is not None and longitude is not None:
        return latitude, longitude

    for name in table.geo_point:
        point = _geo_point(row.get(name))
        if point is not None:
            return point
    return 0.0, 0.0


def _first_coordinate(row: Mapping[str, Any], names: Chain) -> float | None:
    for name in names:
        value = coerce_coordinate(row.get(name))
        if value is not None:
            return value
    return None


def _geo_point(value: Any) -> tuple[float, float] | None:
    if isinstance(value, Mapping):
        latitude = _first_coordinate(value, _LATITUDE)
        longitude = _first_coordinate(value, _LONGITUDE)
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        latitude = coerce_coordinate(value[0])
        longitude = coerce_coordinate(value[1])
    else:
        return None
    if latitude is None or longitude is None:
        return None
    return latitude, longitude


def _localized(
    row: Mapping[str, Any],
    chains: dict[str, Chain],
    requested: str,
    placeholders: dict[str, str],
) -> dict[str, str]:
    values: dict[str, str] = {}
    for locale in SUPPORTED_LOCALES:
        order = dict.fromkeys((locale, requested, *SUPPORTED_LOCALES))
        value = None
        for candidate in order:
            value = coerce_text(first_present(row, chains[candidate]))
            if value:
                break
        values[locale] = value or placeholders[locale]
    return values
