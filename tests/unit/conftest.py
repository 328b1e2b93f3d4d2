from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from src.adapters.persistence.local_gtfs_repository import LocalGtfsRepository
from src.domain.models.gtfs import ReferenceIndex

BASE_TABLES: dict[str, str] = {
    "agency": (
        "agency_id,agency_name,agency_url,agency_timezone\n"
        "978,Dublin Bus,https://www.dublinbus.ie,Europe/Dublin\n"
        "03,Go-Ahead Ireland,https://www.goaheadireland.ie,Europe/Dublin\n"
    ),
    "routes": (
        "route_id,agency_id,route_short_name,route_long_name,route_type,route_color,route_text_color\n"
        "R46A,978,46A,Phoenix Park - Dun Laoghaire,3,,\n"
        "RC1,978,C1,Adamstown - Sandymount,3,,\n"
        "R175,03,175,Citywest - UCD,3,,\n"
        "R145,978,145,Heuston - Ballywaltrim,3,137FEC,FFFFFF\n"
    ),
    "trips": (
        "route_id,service_id,trip_id,trip_headsign,direction_id,shape_id\n"
        'R46A,wk,T1,"Dun Laoghaire, Marine Rd",0,SH1\n'
        "R46A,wk,T2,Phoenix Park,1,SH1\n"
        "RC1,wk,T3,Sandymount,0,\n"
    ),
    "stops": (
        "stop_id,stop_code,stop_name,stop_lat,stop_lon\n"
        "S100,100,\"O'Connell Street, Upper\",53.3526,-6.2613\n"
        "S200,200,Westmoreland Street,53.3458,-6.2590\n"
        "S300,300,Donnybrook,53.3219,-6.2366\n"
        "S900,900,Galway Station,53.2740,-9.0490\n"
    ),
    "stop_times": (
        "trip_id,arrival_time,departure_time,stop_id,stop_sequence\n"
        "T1,08:00:00,08:00:00,S100,1\n"
        "T1,08:05:00,08:06:00,S200,2\n"
        "T1,08:20:00,08:20:00,S300,3\n"
        "T2,07:30:00,07:30:00,S300,1\n"
        "T2,07:50:00,07:50:00,S200,2\n"
        "T2,08:10:00,08:10:00,S100,3\n"
        "T3,23:55:00,23:55:00,S200,1\n"
        "T3,24:10:00,24:10:00,S100,2\n"
    ),
    "shapes": (
        "shape_id,shape_pt_lat,shape_pt_lon,shape_pt_sequence\n"
        "SH1,53.3526,-6.2613,1\n"
        "SH1,53.3219,-6.2366,3\n"
        "SH1,53.3458,-6.2590,2\n"
    ),
}


@pytest.fixture
def make_gtfs_dir(tmp_path: Path) -> Callable[..., Path]:
    """Write the base GTFS tables, with per-test overrides (None drops a file)."""

    def _make(**overrides: str | None) -> Path:
        base = tmp_path / "gtfs"
        base.mkdir(exist_ok=True)
        tables = {**BASE_TABLES, **overrides}
        for name, text in tables.items():
            path = base / f"{name}.txt"
            if text is None:
                if path.exists():
                    path.unlink()
                continue
            path.write_text(text, encoding="utf-8")
        return base

    return _make


@pytest.fixture
def reference_index(make_gtfs_dir: Callable[..., Path]) -> ReferenceIndex:
    return LocalGtfsRepository(base_path=make_gtfs_dir()).load_index()


@pytest.fixture
def build_feed() -> Callable[..., bytes]:
    """Serialize a GTFS-Realtime FeedMessage from plain vehicle dicts."""

    from google.transit import gtfs_realtime_pb2

    def _build(vehicles: list[dict], *, header_ts: int | None = None) -> bytes:
        msg = gtfs_realtime_pb2.FeedMessage()
        msg.header.gtfs_realtime_version = "2.0"
        if header_ts is not None:
            msg.header.timestamp = header_ts

        for v in vehicles:
            ent = msg.entity.add()
            ent.id = v["id"]
            if v.get("trip_update_only"):
                ent.trip_update.trip.trip_id = v.get("trip_id", "T-x")
                continue

            vp = ent.vehicle
            if "lat" in v:
                vp.position.latitude = v["lat"]
                vp.position.longitude = v["lon"]
                if v.get("bearing") is not None:
                    vp.position.bearing = v["bearing"]
            if v.get("route_id"):
                vp.trip.route_id = v["route_id"]
            if v.get("trip_id"):
                vp.trip.trip_id = v["trip_id"]
            if v.get("direction_id") is not None:
                vp.trip.direction_id = v["direction_id"]
            if v.get("vehicle_id"):
                vp.vehicle.id = v["vehicle_id"]
            if v.get("timestamp"):
                vp.timestamp = v["timestamp"]

        return msg.SerializeToString()

    return _build


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
