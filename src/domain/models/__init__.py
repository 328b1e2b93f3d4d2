from .geo import BoundingBox, GeoPoint
from .gtfs import AgencyInfo, ReferenceIndex, RouteInfo, StopTime, TripInfo
from .realtime import AnimationFrame, Snapshot, VehiclePosition
from .schedule import RouteDetails, RouteStop, ScheduleRow, StopSchedule
from .stop import StopInfo

__all__ = [
    "AgencyInfo",
    "AnimationFrame",
    "BoundingBox",
    "GeoPoint",
    "ReferenceIndex",
    "RouteDetails",
    "RouteInfo",
    "RouteStop",
    "ScheduleRow",
    "Snapshot",
    "StopInfo",
    "StopSchedule",
    "StopTime",
    "TripInfo",
    "VehiclePosition",
]
