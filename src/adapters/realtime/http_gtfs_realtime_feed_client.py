from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

from src.app.ports.output import IRealtimeFeedClient
from src.domain.exceptions import FeedFetchError

NTA_VEHICLES_URL = "https://api.nationaltransport.ie/gtfsr/v2/Vehicles"


@dataclass(slots=True)
class HttpGtfsRealtimeFeedClient(IRealtimeFeedClient):
    """Fetches the GTFS-Realtime VehiclePositions feed over HTTP.

    Env vars:
      - NTA_API_KEY: static key sent in the `x-api-key` header
      - GTFS_RT_VEHICLE_POSITIONS_URL: feed URL (default: NTA Vehicles endpoint)
      - GTFS_RT_TIMEOUT_S: request timeout (default 10)

    Notes:
      - Every failure (network, timeout, non-2xx) surfaces as FeedFetchError.
      - `transport` lets tests plug in an httpx.MockTransport.
    """

    url: str | None = None
    api_key: str | None = None
    timeout_s: float = 10.0
    api_key_header: str = "x-api-key"
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.url is None:
            self.url = os.getenv("GTFS_RT_VEHICLE_POSITIONS_URL") or NTA_VEHICLES_URL
        if self.api_key is None:
            self.api_key = os.getenv("NTA_API_KEY")
        if os.getenv("GTFS_RT_TIMEOUT_S"):
            self.timeout_s = float(os.environ["GTFS_RT_TIMEOUT_S"])

    def _headers(self) -> dict[str, str]:
        headers = {"Cache-Control": "no-cache"}
        if self.api_key:
            headers[self.api_key_header] = self.api_key
        return headers

    async def fetch_feed(self) -> bytes:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self.transport
            ) as client:
                resp = await client.get(str(self.url), headers=self._headers())
                resp.raise_for_status()
                return resp.content
        except httpx.HTTPStatusError as exc:
            raise FeedFetchError(
                f"Feed responded {exc.response.status_code} "
                f"{exc.response.reason_phrase}"
            ) from exc
        except httpx.HTTPError as exc:
            raise FeedFetchError(f"Feed request failed: {exc!r}") from exc
