from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest

from src.app.services.feed_poller import PollerState
from src.app.services.snapshot_cache import SnapshotCache
from src.app.services.transit_query_service import TransitQueryService
from src.domain.exceptions import NotFoundError
from src.domain.models import BoundingBox, Snapshot, VehiclePosition

# 07:55 in Dublin (GMT in January).
NOW = datetime(2026, 1, 8, 7, 55, 0, tzinfo=timezone.utc)


@dataclass
class FakePoller:
    state: PollerState = PollerState.IDLE
    last_error: str | None = None


def _service(index, cache: SnapshotCache | None = None, **kwargs) -> TransitQueryService:
    return TransitQueryService(
        reference_index=index,
        cache=cache or SnapshotCache(),
        clock=lambda: NOW,
        **kwargs,
    )


def _snapshot(ts: datetime) -> Snapshot:
    return Snapshot(
        positions=(
            VehiclePosition(
                entity_id="V1",
                lat=53.35,
                lon=-6.26,
                bearing=0.0,
                route_id="R46A",
                route_short_name="46A",
                route_color="#FFD700",
                timestamp=ts,
            ),
        ),
        timestamp=ts,
    )


def test_list_live_positions_reads_current_snapshot(reference_index) -> None:
    cache = SnapshotCache()
    svc = _service(reference_index, cache)
    assert svc.list_live_positions() == ()

    snap = _snapshot(NOW)
    cache.publish(snap)

    assert svc.list_live_positions() == snap.positions


def test_list_stops_uses_default_bbox_and_limit(reference_index) -> None:
    svc = _service(reference_index)

    stops = svc.list_stops()
    assert [s.stop_id for s in stops] == ["S100", "S200", "S300"]

    assert len(svc.list_stops(limit=2)) == 2


def test_list_stops_with_explicit_bbox(reference_index) -> None:
    svc = _service(reference_index)
    galway = BoundingBox(min_lat=53.0, min_lon=-9.5, max_lat=53.5, max_lon=-8.5)

    assert [s.stop_id for s in svc.list_stops(bbox=galway)] == ["S900"]


def test_get_stop_schedule_uses_local_clock(reference_index) -> None:
    svc = _service(reference_index)

    result = svc.get_stop_schedule("S100", limit=2)

    assert result.stop.stop_id == "S100"
    assert [r.trip_id for r in result.schedule] == ["T1", "T2"]


def test_get_stop_schedule_follows_summer_time(reference_index) -> None:
    # 07:05 UTC is 08:05 in Dublin during IST.
    svc = TransitQueryService(
        reference_index=reference_index,
        cache=SnapshotCache(),
        clock=lambda: datetime(2026, 7, 8, 7, 5, 0, tzinfo=timezone.utc),
    )

    result = svc.get_stop_schedule("S100")

    assert [r.trip_id for r in result.schedule] == ["T2", "T3"]


def test_get_stop_schedule_unknown_stop(reference_index) -> None:
    with pytest.raises(NotFoundError):
        _service(reference_index).get_stop_schedule("NOPE")


def test_get_route_details(reference_index) -> None:
    details = _service(reference_index).get_route_details("46A")

    assert details is not None
    assert details.route.route_id == "R46A"
    assert details.color == "#FFD700"
    assert details.headsign == "Dun Laoghaire, Marine Rd"
    assert [rs.stop.stop_id for rs in details.stops] == ["S100", "S200", "S300"]
    assert [rs.arrival_time for rs in details.stops] == ["08:00:00", "08:05:00", "08:20:00"]
    assert len(details.shape) == 3


def test_get_route_details_without_trips_or_unknown(reference_index) -> None:
    svc = _service(reference_index)

    details = svc.get_route_details("175")
    assert details is not None
    assert details.stops == ()
    assert details.shape == ()

    assert svc.get_route_details("999") is None


def test_status_before_and_after_publish(reference_index) -> None:
    cache = SnapshotCache()
    poller = FakePoller(last_error="FeedFetchError: Feed responded 503")
    svc = _service(reference_index, cache, poller=poller)

    before = svc.status()
    assert before.reference_loaded
    assert before.route_count == 4
    assert before.stop_count == 4
    assert before.feed_configured
    assert before.poller_state == "idle"
    assert before.snapshot_timestamp is None
    assert before.snapshot_age_s is None
    assert before.vehicle_count == 0
    assert before.last_poll_error == "FeedFetchError: Feed responded 503"

    cache.publish(_snapshot(NOW - timedelta(seconds=42)))
    after = svc.status()
    assert after.snapshot_age_s == pytest.approx(42.0)
    assert after.vehicle_count == 1


def test_status_without_poller(reference_index) -> None:
    status = _service(reference_index).status()

    assert not status.feed_configured
    assert status.poller_state is None
