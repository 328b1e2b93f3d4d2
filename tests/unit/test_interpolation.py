from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.domain.algorithms.interpolation import (
    interpolate_bearing,
    interpolate_frames,
    lerp,
    progress,
)
from src.domain.models.realtime import Snapshot, VehiclePosition

T0 = datetime(2026, 1, 8, 8, 0, 0, tzinfo=timezone.utc)


def _pos(entity_id: str, lat: float, lon: float, bearing: float) -> VehiclePosition:
    return VehiclePosition(
        entity_id=entity_id,
        lat=lat,
        lon=lon,
        bearing=bearing,
        route_id="R46A",
        route_short_name="46A",
        route_color="#FFD700",
        timestamp=T0,
    )


def _angular_distance(a: float, b: float) -> float:
    d = abs(a - b) % 360.0
    return min(d, 360.0 - d)


@pytest.mark.parametrize(("a", "b"), [(0.0, 1.0), (53.3498, 53.3512), (-6.26, -6.31), (7.0, 7.0)])
def test_lerp_is_exact_at_both_ends(a: float, b: float) -> None:
    assert lerp(a, b, 0.0) == a
    assert lerp(a, b, 1.0) == b


def test_lerp_midpoint() -> None:
    assert lerp(10.0, 20.0, 0.25) == pytest.approx(12.5)


def test_bearing_crosses_north_the_short_way() -> None:
    assert interpolate_bearing(350.0, 10.0, 0.5) == pytest.approx(0.0)
    assert interpolate_bearing(10.0, 350.0, 0.5) == pytest.approx(0.0)
    assert interpolate_bearing(350.0, 10.0, 0.25) == pytest.approx(355.0)


def test_bearing_without_wrap_is_linear() -> None:
    assert interpolate_bearing(90.0, 180.0, 0.5) == pytest.approx(135.0)
    assert interpolate_bearing(180.0, 90.0, 1.0) == pytest.approx(90.0)


def test_bearing_stays_in_range_and_never_takes_the_long_arc() -> None:
    bearings = [0.0, 1.0, 89.5, 179.0, 180.0, 181.0, 270.0, 340.0, 359.9]
    steps = [i / 10 for i in range(11)]
    for a in bearings:
        for b in bearings:
            for p in steps:
                value = interpolate_bearing(a, b, p)
                assert 0.0 <= value < 360.0
                assert _angular_distance(a, value) <= 180.0 * p + 1e-9


def test_progress_clamps_to_unit_interval() -> None:
    assert progress(-1.0, 30.0) == 0.0
    assert progress(15.0, 30.0) == 0.5
    assert progress(90.0, 30.0) == 1.0
    assert progress(1.0, 0.0) == 1.0


def test_interpolate_frames_matches_new_and_removed_entities() -> None:
    previous = Snapshot(
        positions=(_pos("a", 53.0, -6.0, 350.0), _pos("gone", 53.5, -6.5, 0.0)),
        timestamp=T0,
    )
    current = Snapshot(
        positions=(_pos("a", 54.0, -7.0, 10.0), _pos("new", 53.2, -6.2, 45.0)),
        timestamp=T0,
    )

    frames = {f.entity_id: f for f in interpolate_frames(previous, current, 0.5)}

    assert set(frames) == {"a", "new"}
    assert frames["a"].lat == pytest.approx(53.5)
    assert frames["a"].lon == pytest.approx(-6.5)
    assert frames["a"].bearing == pytest.approx(0.0)
    # New entities render at their current position regardless of progress.
    assert (frames["new"].lat, frames["new"].lon, frames["new"].bearing) == (53.2, -6.2, 45.0)


def test_identical_snapshots_yield_zero_motion() -> None:
    snap = Snapshot(positions=(_pos("a", 53.0, -6.0, 90.0),), timestamp=T0)

    (frame,) = interpolate_frames(snap, snap, 0.7)

    assert (frame.lat, frame.lon) == (53.0, -6.0)
    assert frame.bearing == pytest.approx(90.0)
