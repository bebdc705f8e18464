from __future__ import annotations

from typing import Any

from pydantic import BaseModel

AVAILABLE_ACTIONS = ["getStations", "health"]


class ProxyStationsResponse(BaseModel):
    success: bool = True
    error: str | None = None
    data: Any = None
    timestamp: str
    total_results: int


class ProxyFailureResponse(BaseModel):
    success: bool = False
    error: str
    data: Any = None


class ProxyHealthResponse(BaseModel):
    success: bool = True
    message: str = "API is running"
    timestamp: str


class ProxyInvalidActionResponse(BaseModel):
    success: bool = False
    error: str
    available_actions: list[str] = AVAILABLE_ACTIONS
