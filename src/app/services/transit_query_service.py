from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import TYPE_CHECKING, Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.domain.algorithms.gtfs_time import seconds_since_midnight
from src.domain.exceptions import NotFoundError
from src.domain.models import (
    BoundingBox,
    ReferenceIndex,
    RouteDetails,
    RouteStop,
    StopInfo,
    StopSchedule,
    VehiclePosition,
)

from .schedule_service import ScheduleService
from .snapshot_cache import SnapshotCache

if TYPE_CHECKING:
    from .feed_poller import FeedPoller

logger = logging.getLogger(__name__)

# Greater Dublin area.
DEFAULT_STOPS_BBOX = BoundingBox(min_lat=53.2, min_lon=-6.5, max_lat=53.5, max_lon=-6.0)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ServiceStatus:
    reference_loaded: bool
    route_count: int
    stop_count: int
    feed_configured: bool
    poller_state: str | None
    snapshot_timestamp: datetime | None
    snapshot_age_s: float | None
    vehicle_count: int
    last_poll_error: str | None = None


@dataclass(slots=True)
class TransitQueryService:
    """Query surface served to the API layer.

    Reads the reference index directly and the snapshot cache without
    blocking; never touches the poller's internals beyond its status.
    """

    reference_index: ReferenceIndex
    cache: SnapshotCache
    poller: "FeedPoller | None" = None
    stops_bbox: BoundingBox = DEFAULT_STOPS_BBOX
    timezone_name: str | None = None
    clock: Callable[[], datetime] = _utcnow

    def _schedule(self) -> ScheduleService:
        return ScheduleService(reference_index=self.reference_index)

    def _zone(self) -> tzinfo:
        name = self.timezone_name or self.reference_index.default_timezone()
        if not name:
            return timezone.utc
        try:
            return ZoneInfo(name)
        except ZoneInfoNotFoundError:
            logger.warning("Unknown timezone %r; using UTC for schedules", name)
            return timezone.utc

    def local_now(self) -> datetime:
        return self.clock().astimezone(self._zone())

    def list_live_positions(self) -> tuple[VehiclePosition, ...]:
        return self.cache.current().positions

    def list_stops(
        self, bbox: BoundingBox | None = None, limit: int = 1000
    ) -> tuple[StopInfo, ...]:
        box = bbox or self.stops_bbox
        out: list[StopInfo] = []
        for stop in self.reference_index.stops_by_id.values():
            if len(out) >= limit:
                break
            if box.contains(stop.lat, stop.lon):
                out.append(stop)
        return tuple(out)

    def get_stop_schedule(self, stop_id: str, limit: int = 20) -> StopSchedule:
        stop = self.reference_index.stop_by_id(stop_id)
        if stop is None:
            raise NotFoundError(f"Unknown stop_id: {stop_id}")

        now_s = seconds_since_midnight(self.local_now())
        rows = self._schedule().upcoming_departures(stop_id, now_s, limit)
        return StopSchedule(stop=stop, schedule=rows)

    def get_route_details(self, route_short_name: str) -> RouteDetails | None:
        index = self.reference_index
        matches = index.routes_by_short_name(route_short_name)
        if not matches:
            return None
        route = matches[0]
        color = index.route_display_color(route.route_id)

        trips = index.trips_for_route(route.route_id)
        if not trips:
            return RouteDetails(route=route, color=color, headsign=None)

        # Any trip with a timetable serves as the representative one.
        trip = next((t for t in trips if index.stop_times_for_trip(t.trip_id)), trips[0])

        stops: list[RouteStop] = []
        for st in index.stop_times_for_trip(trip.trip_id):
            stop = index.stop_by_id(st.stop_id)
            if stop is None:
                continue
            stops.append(
                RouteStop(
                    stop=stop,
                    stop_sequence=st.stop_sequence,
                    arrival_time=st.arrival_time,
                    departure_time=st.departure_time,
                )
            )

        return RouteDetails(
            route=route,
            color=color,
            headsign=trip.headsign,
            stops=tuple(stops),
            shape=index.shape_points(trip.shape_id),
        )

    def status(self) -> ServiceStatus:
        index = self.reference_index
        current = self.cache.current()

        snapshot_ts = None
        age_s = None
        if self.cache.has_published:
            snapshot_ts = current.timestamp
            age_s = max(0.0, (self.clock() - current.timestamp).total_seconds())

        return ServiceStatus(
            reference_loaded=index.loaded_at is not None,
            route_count=len(index.routes_by_id),
            stop_count=len(index.stops_by_id),
            feed_configured=self.poller is not None,
            poller_state=self.poller.state.value if self.poller else None,
            snapshot_timestamp=snapshot_ts,
            snapshot_age_s=age_s,
            vehicle_count=len(current),
            last_poll_error=self.poller.last_error if self.poller else None,
        )
