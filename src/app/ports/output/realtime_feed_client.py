from __future__ import annotations

from abc import ABC, abstractmethod


class IRealtimeFeedClient(ABC):
    """Port for fetching the raw GTFS-Realtime VehiclePositions payload."""

    @abstractmethod
    async def fetch_feed(self) -> bytes:
        """Return the raw payload; raise FeedFetchError on any transport failure."""
