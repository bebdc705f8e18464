from __future__ import annotations

import os

from ..utils.geo import BoundingBox

SUPPORTED_LOCALES: tuple[str, ...] = ("nl", "fr", "en")


def _get_env(name: str, default: str | None = None) -> str:
    value = os.getenv(name, default)
    if value is None:
        raise ValueError(f"Missing required environment variable: {name}")
    return value


def _get_float(name: str, default: str) -> float:
    raw = _get_env(name, default)
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def primary_url() -> str:
    return _get_env(
        "VILLO_PRIMARY_URL",
        "https://opendata.brussels.be/api/explore/v2.1/catalog/datasets/"
        "disponibilite-en-temps-reel-des-velos-villo-rbc/records?limit=100",
    )


def proxy_url() -> str:
    return _get_env("VILLO_PROXY_URL", "http://localhost:8000/api?action=getStations")


def relay_url() -> str:
    return _get_env("VILLO_RELAY_URL", "https://api.allorigins.win/raw?url={url}")


def proxy_upstream_url() -> str:
    return _get_env(
        "VILLO_PROXY_UPSTREAM_URL",
        "https://bruxellesdata.opendatasoft.com/api/explore/v2.1/catalog/datasets/"
        "stations-villo-bruxelles-rbc/records?limit=343",
    )


def http_timeout() -> float:
    return _get_float("VILLO_HTTP_TIMEOUT", "30")


def retry_delay() -> float:
    return _get_float("VILLO_RETRY_DELAY", "2")


def poll_interval() -> float:
    return _get_float("VILLO_POLL_INTERVAL", "300")


def max_age() -> float:
    return _get_float("VILLO_MAX_AGE", "60")


def default_locale() -> str:
    locale = _get_env("VILLO_LOCALE", "nl")
    if locale not in SUPPORTED_LOCALES:
        raise ValueError(f"VILLO_LOCALE must be one of {SUPPORTED_LOCALES}, got {locale!r}")
    return locale


def service_area() -> BoundingBox:
    raw = _get_env("VILLO_BBOX", "50.5,4.05,51.1,4.65")
    parts = [part.strip() for part in raw.split(",")]
    if len(parts) != 4:
        raise ValueError(f"VILLO_BBOX must be 'min_lat,min_lon,max_lat,max_lon', got {raw!r}")
    try:
        min_lat, min_lon, max_lat, max_lon = (float(part) for part in parts)
    except ValueError as exc:
        raise ValueError(f"VILLO_BBOX must contain numbers, got {raw!r}") from exc
    return BoundingBox(min_lat=min_lat, min_lon=min_lon, max_lat=max_lat, max_lon=max_lon)


def log_level() -> str:
    return _get_env("VILLO_LOG_LEVEL", "INFO").upper()


def cors_origins() -> list[str]:
    raw = _get_env("VILLO_CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
