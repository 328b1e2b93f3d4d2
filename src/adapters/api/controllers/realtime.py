from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from src.adapters.api.dependencies import get_query_service
from src.adapters.api.schemas.realtime import HealthSchema, VehiclePositionSchema
from src.app.services.transit_query_service import TransitQueryService

router = APIRouter(prefix="/api", tags=["realtime"])


@router.get("/live-positions", response_model=list[VehiclePositionSchema])
def list_live_positions(
    service: TransitQueryService = Depends(get_query_service),
) -> list[VehiclePositionSchema]:
    return [
        VehiclePositionSchema(
            id=v.entity_id,
            lat=v.lat,
            lon=v.lon,
            bearing=v.bearing,
            route_id=v.route_id,
            route_short_name=v.route_short_name,
            route_color=v.route_color,
            trip_id=v.trip_id,
            direction_id=v.direction_id,
            headsign=v.headsign,
            agency_id=v.agency_id,
            vehicle_id=v.vehicle_id,
            timestamp=v.timestamp,
        )
        for v in service.list_live_positions()
    ]


@router.get("/health", response_model=HealthSchema)
def health(
    service: TransitQueryService = Depends(get_query_service),
) -> HealthSchema:
    status = service.status()
    return HealthSchema(
        status="ok",
        timestamp=datetime.now(timezone.utc),
        gtfs_loaded=status.reference_loaded,
        route_count=status.route_count,
        stop_count=status.stop_count,
        feed_configured=status.feed_configured,
        poller_state=status.poller_state,
        last_update=status.snapshot_timestamp,
        snapshot_age_s=status.snapshot_age_s,
        count=status.vehicle_count,
        last_error=status.last_poll_error,
    )
