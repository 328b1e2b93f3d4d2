from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint
from .gtfs import RouteInfo
from .stop import StopInfo


@dataclass(frozen=True, slots=True)
class ScheduleRow:
    """An upcoming call at a stop, with route display attributes denormalized."""

    trip_id: str
    stop_id: str
    arrival_time: str
    departure_time: str
    stop_sequence: int
    route_id: str
    route_short_name: str
    route_color: str
    scheduled_time: str
    estimated_time: str
    headsign: str | None = None
    direction_id: int | None = None
    delay_seconds: int = 0


@dataclass(frozen=True, slots=True)
class StopSchedule:
    stop: StopInfo
    schedule: tuple[ScheduleRow, ...]


@dataclass(frozen=True, slots=True)
class RouteStop:
    stop: StopInfo
    stop_sequence: int
    arrival_time: str
    departure_time: str


@dataclass(frozen=True, slots=True)
class RouteDetails:
    """A route with one representative trip's stops and shape, for drawing."""

    route: RouteInfo
    color: str
    headsign: str | None
    stops: tuple[RouteStop, ...] = ()
    shape: tuple[GeoPoint, ...] = ()
