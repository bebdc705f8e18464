from __future__ import annotations

from enum import Enum
from typing import Any


class SchemaVariant(str, Enum):
    RESULTS = "results"
    LEGACY = "records"
    UNRECOGNIZED = "unrecognized"


def detect_schema(payload: Any) -> SchemaVariant:
    if not isinstance(payload, dict):
        return SchemaVariant.UNRECOGNIZED
    if isinstance(payload.get("results"), list):
        return SchemaVariant.RESULTS
    if isinstance(payload.get("records"), list):
        return SchemaVariant.LEGACY
    return SchemaVariant.UNRECOGNIZED


def results_data(payload: dict[str, Any]) -> list[dict[str, Any]]:
    return [row for row in payload.get("results", []) if isinstance(row, dict)]


def records_data(payload: dict[str, Any]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for record in payload.get("records", []):
        if not isinstance(record, dict):
            continue
        fields = record.get("fields")
        rows.append(fields if isinstance(fields, dict) else record)
    return rows


def station_rows(payload: Any) -> tuple[SchemaVariant, list[dict[str, Any]]]:
    variant = detect_schema(payload)
    if variant is SchemaVariant.RESULTS:
        return variant, results_data(payload)
    if variant is SchemaVariant.LEGACY:
        return variant, records_data(payload)
    return variant, []
