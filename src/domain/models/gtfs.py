from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime

from src.domain.algorithms.route_colors import RouteColorPolicy
from src.domain.exceptions import UnknownReferenceError

from .geo import GeoPoint
from .stop import StopInfo


@dataclass(frozen=True, slots=True)
class AgencyInfo:
    agency_id: str
    name: str
    url: str | None = None
    timezone: str | None = None


@dataclass(frozen=True, slots=True)
class RouteInfo:
    """Route metadata (subset of GTFS routes.txt).

    `color` is the raw feed value (hex without '#'); use
    `ReferenceIndex.route_display_color` for what a map should draw.
    """

    route_id: str
    short_name: str
    long_name: str | None = None
    color: str | None = None
    text_color: str | None = None
    agency_id: str | None = None
    route_type: str | None = None


@dataclass(frozen=True, slots=True)
class TripInfo:
    trip_id: str
    route_id: str
    headsign: str | None = None
    direction_id: int | None = None
    shape_id: str | None = None


@dataclass(frozen=True, slots=True)
class StopTime:
    """One scheduled call of a trip at a stop.

    Times are kept as the raw clock text and as seconds since service day
    midnight (GTFS time semantics; may exceed 24h).
    """

    trip_id: str
    stop_id: str
    stop_sequence: int
    arrival_time: str
    departure_time: str
    arrival_s: int
    departure_s: int


@dataclass(frozen=True, slots=True)
class ReferenceIndex:
    """In-memory, read-only view of the static network.

    Built once at startup by a GTFS repository; never mutated afterwards.
    """

    routes_by_id: Mapping[str, RouteInfo]
    agencies_by_id: Mapping[str, AgencyInfo]
    trips_by_id: Mapping[str, TripInfo]
    stops_by_id: Mapping[str, StopInfo]
    stop_times_by_stop: Mapping[str, tuple[StopTime, ...]]
    stop_times_by_trip: Mapping[str, tuple[StopTime, ...]]
    shapes_by_id: Mapping[str, tuple[GeoPoint, ...]]
    skipped_rows: Mapping[str, int] = field(default_factory=dict)
    color_policy: RouteColorPolicy = field(default_factory=RouteColorPolicy)
    loaded_at: datetime | None = None

    def route_by_id(self, route_id: str) -> RouteInfo | None:
        return self.routes_by_id.get(route_id)

    def agency_by_id(self, agency_id: str) -> AgencyInfo | None:
        return self.agencies_by_id.get(agency_id)

    def stop_by_id(self, stop_id: str) -> StopInfo | None:
        return self.stops_by_id.get(stop_id)

    def trip_by_id(self, trip_id: str) -> TripInfo | None:
        return self.trips_by_id.get(trip_id)

    def resolve_route(self, route_id: str) -> RouteInfo:
        route = self.routes_by_id.get(route_id)
        if route is None:
            raise UnknownReferenceError(f"Unknown route_id: {route_id}")
        return route

    def route_display_color(self, route_id: str) -> str:
        route = self.routes_by_id.get(route_id)
        if route is None:
            return self.color_policy.default_color
        return self.color_policy.resolve(route)

    def routes_by_short_name(self, short_name: str) -> tuple[RouteInfo, ...]:
        matches = [r for r in self.routes_by_id.values() if r.short_name == short_name]
        matches.sort(key=lambda r: r.route_id)
        return tuple(matches)

    def trips_for_route(self, route_id: str) -> tuple[TripInfo, ...]:
        return tuple(t for t in self.trips_by_id.values() if t.route_id == route_id)

    def stop_times_for_stop(self, stop_id: str) -> tuple[StopTime, ...]:
        return self.stop_times_by_stop.get(stop_id, ())

    def stop_times_for_trip(self, trip_id: str) -> tuple[StopTime, ...]:
        return self.stop_times_by_trip.get(trip_id, ())

    def shape_points(self, shape_id: str | None) -> tuple[GeoPoint, ...]:
        if not shape_id:
            return ()
        return self.shapes_by_id.get(shape_id, ())

    def default_timezone(self) -> str | None:
        for agency in self.agencies_by_id.values():
            if agency.timezone:
                return agency.timezone
        return None
