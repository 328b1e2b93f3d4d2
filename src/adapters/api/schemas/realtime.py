from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class VehiclePositionSchema(BaseModel):
    id: str
    lat: float
    lon: float
    bearing: float
    route_id: str
    route_short_name: str
    route_color: str
    trip_id: str | None = None
    direction_id: int | None = None
    headsign: str | None = None
    agency_id: str | None = None
    vehicle_id: str | None = None
    timestamp: datetime


class HealthSchema(BaseModel):
    status: str
    timestamp: datetime
    gtfs_loaded: bool
    route_count: int
    stop_count: int
    feed_configured: bool
    poller_state: str | None = None
    last_update: datetime | None = None
    snapshot_age_s: float | None = None
    count: int
    last_error: str | None = None
