from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Station:
    id: str
    name_by_locale: dict[str, str]
    address_by_locale: dict[str, str]
    bikes_available: int
    slots_available: int
    capacity: int
    latitude: float
    longitude: float
    status: str
    last_update: str

    def name(self, locale: str) -> str:
        return self.name_by_locale.get(locale) or next(iter(self.name_by_locale.values()))

    def address(self, locale: str) -> str:
        return self.address_by_locale.get(locale) or next(
            iter(self.address_by_locale.values())
        )
