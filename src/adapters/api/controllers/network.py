from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from src.adapters.api.dependencies import get_query_service
from src.adapters.api.schemas.network import (
    GeoPointSchema,
    RouteDetailsSchema,
    RouteSchema,
    RouteStopSchema,
    ScheduleRowSchema,
    StopSchema,
    StopScheduleSchema,
)
from src.app.services.transit_query_service import TransitQueryService
from src.domain.models import BoundingBox, StopInfo

router = APIRouter(prefix="/api", tags=["network"])


def _stop_to_schema(stop: StopInfo) -> StopSchema:
    return StopSchema(
        stop_id=stop.stop_id,
        stop_name=stop.name,
        stop_lat=stop.lat,
        stop_lon=stop.lon,
    )


@router.get("/stops", response_model=list[StopSchema])
def list_stops(
    limit: int = Query(default=1000, ge=1, le=10000),
    min_lat: float | None = Query(default=None, ge=-90.0, le=90.0),
    min_lon: float | None = Query(default=None, ge=-180.0, le=180.0),
    max_lat: float | None = Query(default=None, ge=-90.0, le=90.0),
    max_lon: float | None = Query(default=None, ge=-180.0, le=180.0),
    service: TransitQueryService = Depends(get_query_service),
) -> list[StopSchema]:
    bounds = (min_lat, min_lon, max_lat, max_lon)
    bbox = None
    if all(b is not None for b in bounds):
        try:
            bbox = BoundingBox(
                min_lat=min_lat, min_lon=min_lon, max_lat=max_lat, max_lon=max_lon
            )
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
    elif any(b is not None for b in bounds):
        raise HTTPException(
            status_code=422,
            detail="min_lat, min_lon, max_lat and max_lon must be given together",
        )

    return [_stop_to_schema(s) for s in service.list_stops(bbox=bbox, limit=limit)]


@router.get("/schedule/{stop_id}", response_model=StopScheduleSchema)
def get_stop_schedule(
    stop_id: str,
    limit: int = Query(default=20, ge=1, le=500),
    service: TransitQueryService = Depends(get_query_service),
) -> StopScheduleSchema:
    result = service.get_stop_schedule(stop_id, limit=limit)
    return StopScheduleSchema(
        stop=_stop_to_schema(result.stop),
        schedule=[
            ScheduleRowSchema(
                trip_id=row.trip_id,
                arrival_time=row.arrival_time,
                departure_time=row.departure_time,
                stop_sequence=row.stop_sequence,
                trip_headsign=row.headsign,
                direction_id=row.direction_id,
                route_id=row.route_id,
                route_short_name=row.route_short_name,
                route_color=row.route_color,
                scheduled_time=row.scheduled_time,
                estimated_time=row.estimated_time,
                delay_seconds=row.delay_seconds,
            )
            for row in result.schedule
        ],
    )


@router.get("/routes/{route_short_name}", response_model=RouteDetailsSchema)
def get_route_details(
    route_short_name: str,
    service: TransitQueryService = Depends(get_query_service),
) -> RouteDetailsSchema:
    details = service.get_route_details(route_short_name)
    if details is None:
        raise HTTPException(status_code=404, detail="Route not found")

    route = details.route
    return RouteDetailsSchema(
        route=RouteSchema(
            route_id=route.route_id,
            route_short_name=route.short_name,
            route_long_name=route.long_name,
            route_color=details.color,
            route_text_color=route.text_color,
            agency_id=route.agency_id,
            trip_headsign=details.headsign,
        ),
        stops=[
            RouteStopSchema(
                stop_id=rs.stop.stop_id,
                stop_name=rs.stop.name,
                stop_lat=rs.stop.lat,
                stop_lon=rs.stop.lon,
                stop_sequence=rs.stop_sequence,
                arrival_time=rs.arrival_time,
                departure_time=rs.departure_time,
            )
            for rs in details.stops
        ],
        shape=[GeoPointSchema(lat=p.lat, lon=p.lon) for p in details.shape],
    )
