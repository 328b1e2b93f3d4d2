from __future__ import annotations

from pydantic import BaseModel, Field


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class StopSchema(BaseModel):
    stop_id: str
    stop_name: str
    stop_lat: float
    stop_lon: float


class ScheduleRowSchema(BaseModel):
    trip_id: str
    arrival_time: str
    departure_time: str
    stop_sequence: int
    trip_headsign: str | None = None
    direction_id: int | None = None
    route_id: str
    route_short_name: str
    route_color: str
    scheduled_time: str
    estimated_time: str
    delay_seconds: int = 0


class StopScheduleSchema(BaseModel):
    stop: StopSchema
    schedule: list[ScheduleRowSchema]


class RouteSchema(BaseModel):
    route_id: str
    route_short_name: str
    route_long_name: str | None = None
    route_color: str
    route_text_color: str | None = None
    agency_id: str | None = None
    trip_headsign: str | None = None


class RouteStopSchema(StopSchema):
    stop_sequence: int
    arrival_time: str
    departure_time: str


class RouteDetailsSchema(BaseModel):
    route: RouteSchema
    stops: list[RouteStopSchema]
    shape: list[GeoPointSchema]
