from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from src.app.ports.output import (
    DecodedFeed,
    DecodedVehicle,
    IRealtimeFeedClient,
    IVehicleFeedDecoder,
)
from src.domain.exceptions import FeedError, UnknownReferenceError
from src.domain.models.gtfs import ReferenceIndex
from src.domain.models.realtime import Snapshot, VehiclePosition

from .snapshot_cache import SnapshotCache

logger = logging.getLogger(__name__)

UNKNOWN_ROUTE_ID = "Unknown"


class PollerState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    DECODING = "decoding"
    JOINING = "joining"
    PUBLISHED = "published"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _direction_headsign(direction_id: int | None) -> str | None:
    if direction_id is None:
        return None
    return "Inbound" if direction_id == 0 else "Outbound"


def join_vehicle(
    vehicle: DecodedVehicle, index: ReferenceIndex, *, now: datetime
) -> VehiclePosition:
    """Enrich one decoded vehicle with route and trip reference data.

    Unknown route ids pass through raw with the default colour.
    """

    route_id = vehicle.route_id or UNKNOWN_ROUTE_ID
    try:
        route = index.resolve_route(route_id)
        short_name = route.short_name
        agency_id = route.agency_id
    except UnknownReferenceError:
        logger.debug("Unresolved route_id %r for entity %s", route_id, vehicle.entity_id)
        short_name = route_id
        agency_id = None

    trip = index.trip_by_id(vehicle.trip_id) if vehicle.trip_id else None
    direction_id = vehicle.direction_id
    if direction_id is None and trip is not None:
        direction_id = trip.direction_id
    headsign = (trip.headsign if trip else None) or _direction_headsign(direction_id)

    return VehiclePosition(
        entity_id=vehicle.entity_id,
        lat=vehicle.lat,
        lon=vehicle.lon,
        bearing=(vehicle.bearing or 0.0) % 360.0,
        route_id=route_id,
        route_short_name=short_name,
        route_color=index.route_display_color(route_id),
        timestamp=vehicle.timestamp or now,
        trip_id=vehicle.trip_id,
        direction_id=direction_id,
        headsign=headsign,
        agency_id=agency_id,
        vehicle_id=vehicle.vehicle_id,
    )


def join_feed(decoded: DecodedFeed, index: ReferenceIndex, *, now: datetime) -> Snapshot:
    """Join a decoded feed into a snapshot captured no later than `now`."""

    timestamp = decoded.timestamp or now
    if timestamp > now:
        logger.warning(
            "Feed header timestamp %s is ahead of the ingestion clock; using %s",
            timestamp.isoformat(),
            now.isoformat(),
        )
        timestamp = now

    return Snapshot(
        positions=tuple(join_vehicle(v, index, now=now) for v in decoded.vehicles),
        timestamp=timestamp,
    )


@dataclass(slots=True)
class FeedPoller:
    """Periodically fetches, decodes and joins the realtime feed into the cache.

    Cycle: IDLE -> FETCHING -> DECODING -> JOINING -> PUBLISHED -> IDLE.
    A failed fetch or decode leaves the cache untouched; the next attempt is
    simply the next scheduled cycle.
    """

    feed_client: IRealtimeFeedClient
    decoder: IVehicleFeedDecoder
    reference_index: ReferenceIndex
    cache: SnapshotCache
    interval_s: float = 30.0
    clock: Callable[[], datetime] = _utcnow

    state: PollerState = field(default=PollerState.IDLE, init=False)
    cycles: int = field(default=0, init=False)
    failures: int = field(default=0, init=False)
    last_success_at: datetime | None = field(default=None, init=False)
    last_error: str | None = field(default=None, init=False)
    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_cycle(self) -> bool:
        """Run one poll cycle; return True if a snapshot was published."""

        self.cycles += 1
        try:
            self.state = PollerState.FETCHING
            content = await self.feed_client.fetch_feed()

            self.state = PollerState.DECODING
            decoded = self.decoder.decode(content)

            self.state = PollerState.JOINING
            snapshot = join_feed(decoded, self.reference_index, now=self.clock())

            snapshot = self.cache.publish(snapshot)
            self.state = PollerState.PUBLISHED
        except FeedError as exc:
            self.failures += 1
            self.last_error = f"{type(exc).__name__}: {exc}"
            logger.warning(
                "Feed poll failed, keeping snapshot from %s: %s",
                self.cache.current().timestamp.isoformat(),
                self.last_error,
            )
            return False
        finally:
            self.state = PollerState.IDLE

        self.last_success_at = self.clock()
        self.last_error = None
        logger.info("Fetched %d vehicle positions", len(snapshot))
        return True

    async def _run_forever(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            try:
                await self.run_cycle()
            except Exception:
                logger.exception("Unexpected error in feed poll cycle")
            elapsed = loop.time() - started
            await asyncio.sleep(max(0.0, self.interval_s - elapsed))

    def start(self) -> None:
        """Schedule polling on the running event loop; the first cycle runs now."""

        if self.running:
            return
        logger.info("Starting feed polling every %s seconds", self.interval_s)
        self._task = asyncio.create_task(self._run_forever(), name="feed-poller")

    async def stop(self) -> None:
        """Stop scheduling cycles; an in-flight request is cancelled, not awaited."""

        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        self.state = PollerState.IDLE
        logger.info("Stopped feed polling")
