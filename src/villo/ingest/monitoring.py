from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class FeedStatus:
    age_seconds: float | None
    is_stale: bool


def compute_status(
    now: datetime, refreshed_at: datetime | None, stale_after: float = 60
) -> FeedStatus:
    if refreshed_at is None:
        return FeedStatus(age_seconds=None, is_stale=True)
    age_seconds = (now - refreshed_at).total_seconds()
    return FeedStatus(age_seconds=age_seconds, is_stale=age_seconds > stale_after)
