from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from . import config
from .errors import ParseError

Unwrap = Callable[[Any], Any]


@dataclass(frozen=True)
class Source:
    name: str
    url: str
    unwrap: Unwrap | None = None

    def extract(self, body: Any) -> Any:
        if self.unwrap is None:
            return body
        return self.unwrap(body)


def unwrap_proxy_envelope(body: Any) -> Any:
    if not isinstance(body, dict) or "success" not in body:
        raise ParseError("Proxy response is not an envelope")
    if not body.get("success"):
        raise ParseError(f"Proxy reported failure: {body.get('error') or 'unknown error'}")
    return body.get("data")


def direct_source(url: str | None = None) -> Source:
    return Source(name="direct", url=url or config.primary_url())


def proxy_source(url: str | None = None) -> Source:
    return Source(name="proxy", url=url or config.proxy_url(), unwrap=unwrap_proxy_envelope)


def relay_source(target: str | None = None, template: str | None = None) -> Source:
    target = target or config.primary_url()
    template = template or config.relay_url()
    return Source(name="relay", url=template.format(url=quote(target, safe="")))


def default_sources() -> list[Source]:
    return [direct_source(), proxy_source(), relay_source()]


def server_sources() -> list[Source]:
    """Sources usable from inside the API process, which must not call its own proxy."""
    return [direct_source(), relay_source()]
