from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from src.adapters.api.dependencies import get_query_service
from src.app.services.snapshot_cache import SnapshotCache
from src.app.services.transit_query_service import TransitQueryService
from src.domain.models import Snapshot, VehiclePosition
from src.main import app

NOW = datetime(2026, 1, 8, 7, 55, 0, tzinfo=timezone.utc)


@pytest.fixture
def query_service(reference_index):
    cache = SnapshotCache()
    cache.publish(
        Snapshot(
            positions=(
                VehiclePosition(
                    entity_id="V1",
                    lat=53.35,
                    lon=-6.26,
                    bearing=45.0,
                    route_id="R46A",
                    route_short_name="46A",
                    route_color="#FFD700",
                    timestamp=NOW,
                    trip_id="T1",
                    direction_id=0,
                ),
            ),
            timestamp=NOW,
        )
    )
    service = TransitQueryService(
        reference_index=reference_index, cache=cache, clock=lambda: NOW
    )
    app.dependency_overrides[get_query_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


async def _get(path: str, **kwargs) -> httpx.Response:
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get(path, **kwargs)


@pytest.mark.unit
@pytest.mark.anyio
async def test_live_positions(query_service) -> None:
    resp = await _get("/api/live-positions")

    assert resp.status_code == 200
    (bus,) = resp.json()
    assert bus["id"] == "V1"
    assert bus["route_short_name"] == "46A"
    assert bus["bearing"] == 45.0


@pytest.mark.unit
@pytest.mark.anyio
async def test_health(query_service) -> None:
    resp = await _get("/api/health")

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["status"] == "ok"
    assert payload["gtfs_loaded"] is True
    assert payload["feed_configured"] is False
    assert payload["count"] == 1
    assert payload["snapshot_age_s"] == 0.0


@pytest.mark.unit
@pytest.mark.anyio
async def test_stops_with_limit_and_bbox(query_service) -> None:
    resp = await _get("/api/stops", params={"limit": 2})
    assert resp.status_code == 200
    assert [s["stop_id"] for s in resp.json()] == ["S100", "S200"]

    resp = await _get(
        "/api/stops",
        params={"min_lat": 53.0, "min_lon": -9.5, "max_lat": 53.5, "max_lon": -8.5},
    )
    assert [s["stop_id"] for s in resp.json()] == ["S900"]


@pytest.mark.unit
@pytest.mark.anyio
async def test_stops_rejects_partial_bbox(query_service) -> None:
    resp = await _get("/api/stops", params={"min_lat": 53.0})

    assert resp.status_code == 422


@pytest.mark.unit
@pytest.mark.anyio
async def test_schedule(query_service) -> None:
    resp = await _get("/api/schedule/S100", params={"limit": 5})

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["stop"]["stop_name"] == "O'Connell Street, Upper"
    assert [r["trip_id"] for r in payload["schedule"]] == ["T1", "T2", "T3"]
    assert payload["schedule"][0]["route_color"] == "#FFD700"
    assert payload["schedule"][0]["delay_seconds"] == 0


@pytest.mark.unit
@pytest.mark.anyio
async def test_schedule_unknown_stop_is_404(query_service) -> None:
    resp = await _get("/api/schedule/NOPE")

    assert resp.status_code == 404
    assert "NOPE" in resp.json()["detail"]


@pytest.mark.unit
@pytest.mark.anyio
async def test_route_details(query_service) -> None:
    resp = await _get("/api/routes/46A")

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["route"]["route_color"] == "#FFD700"
    assert payload["route"]["trip_headsign"] == "Dun Laoghaire, Marine Rd"
    assert [s["stop_sequence"] for s in payload["stops"]] == [1, 2, 3]
    assert len(payload["shape"]) == 3


@pytest.mark.unit
@pytest.mark.anyio
async def test_route_details_unknown_is_404(query_service) -> None:
    resp = await _get("/api/routes/999")

    assert resp.status_code == 404
