from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def isoformat_utc(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def proxy_timestamp(value: datetime | None = None) -> str:
    """Wall-clock timestamp in the proxy envelope format, e.g. ``2024-01-01 12:00:00``."""
    if value is None:
        value = datetime.now()
    return value.strftime("%Y-%m-%d %H:%M:%S")
