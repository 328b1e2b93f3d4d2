from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


@dataclass(frozen=True, slots=True)
class VehiclePosition:
    """One vehicle as reported by a single poll cycle, enriched with route data."""

    entity_id: str
    lat: float
    lon: float
    bearing: float
    route_id: str
    route_short_name: str
    route_color: str
    timestamp: datetime
    trip_id: str | None = None
    direction_id: int | None = None
    headsign: str | None = None
    agency_id: str | None = None
    vehicle_id: str | None = None


@dataclass(frozen=True, slots=True)
class Snapshot:
    """A fully consistent batch of vehicle positions captured at one instant."""

    positions: tuple[VehiclePosition, ...]
    timestamp: datetime

    @staticmethod
    def empty() -> "Snapshot":
        return Snapshot(positions=(), timestamp=EPOCH)

    def __len__(self) -> int:
        return len(self.positions)

    def by_entity_id(self) -> dict[str, VehiclePosition]:
        return {p.entity_id: p for p in self.positions}


@dataclass(frozen=True, slots=True)
class AnimationFrame:
    entity_id: str
    lat: float
    lon: float
    bearing: float
