from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class DecodedVehicle:
    """A vehicle entity as it appears in the feed, before reference joining."""

    entity_id: str
    lat: float
    lon: float
    bearing: float | None = None
    route_id: str | None = None
    trip_id: str | None = None
    direction_id: int | None = None
    vehicle_id: str | None = None
    timestamp: datetime | None = None


@dataclass(frozen=True, slots=True)
class DecodedFeed:
    vehicles: tuple[DecodedVehicle, ...]
    timestamp: datetime | None = None


class IVehicleFeedDecoder(ABC):
    """Port for turning a raw realtime payload into decoded vehicles."""

    @abstractmethod
    def decode(self, content: bytes) -> DecodedFeed:
        """Decode the payload; raise FeedDecodeError if it is not a feed message."""
