from __future__ import annotations

import csv
import io
import logging
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Callable, TypeVar

from src.domain.algorithms.gtfs_time import parse_gtfs_time_to_seconds
from src.domain.algorithms.route_colors import RouteColorPolicy
from src.domain.exceptions import LoadError
from src.domain.models import (
    AgencyInfo,
    GeoPoint,
    ReferenceIndex,
    RouteInfo,
    StopInfo,
    StopTime,
    TripInfo,
)

logger = logging.getLogger(__name__)

REQUIRED_TABLES = ("agency", "routes", "trips", "stops", "stop_times")
OPTIONAL_TABLES = ("shapes",)

# Returns the text of `<name>.txt`, or None if the source has no such file.
TableReader = Callable[[str], "str | None"]

T = TypeVar("T")


class _MissingField(ValueError):
    pass


def read_table_rows(text: str) -> tuple[list[dict[str, str]], int]:
    """Parse a GTFS table into header-keyed rows.

    Fields may be wrapped in double quotes. Rows whose field count differs from
    the header are skipped and counted; blank lines are ignored.
    """

    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    try:
        header = next(reader, None)
    except csv.Error as exc:
        raise LoadError(f"Unreadable header row: {exc}") from exc
    if not header:
        return [], 0

    columns = [h.strip() for h in header]
    rows: list[dict[str, str]] = []
    skipped = 0
    while True:
        try:
            fields = next(reader)
        except StopIteration:
            break
        except csv.Error:
            skipped += 1
            continue

        if not fields or all(not f.strip() for f in fields):
            continue
        if len(fields) != len(columns):
            skipped += 1
            continue
        rows.append({c: f.strip() for c, f in zip(columns, fields)})

    return rows, skipped


def _required(row: dict[str, str], key: str) -> str:
    value = (row.get(key) or "").strip()
    if not value:
        raise _MissingField(key)
    return value


def _optional(row: dict[str, str], key: str) -> str | None:
    return (row.get(key) or "").strip() or None


def _optional_int(row: dict[str, str], key: str) -> int | None:
    raw = _optional(row, key)
    return int(raw) if raw is not None else None


def _agency(row: dict[str, str]) -> AgencyInfo:
    return AgencyInfo(
        agency_id=_optional(row, "agency_id") or "",
        name=_required(row, "agency_name"),
        url=_optional(row, "agency_url"),
        timezone=_optional(row, "agency_timezone"),
    )


def _route(row: dict[str, str]) -> RouteInfo:
    route_id = _required(row, "route_id")
    return RouteInfo(
        route_id=route_id,
        short_name=_optional(row, "route_short_name") or route_id,
        long_name=_optional(row, "route_long_name"),
        color=_optional(row, "route_color"),
        text_color=_optional(row, "route_text_color"),
        agency_id=_optional(row, "agency_id"),
        route_type=_optional(row, "route_type"),
    )


def _trip(row: dict[str, str]) -> TripInfo:
    return TripInfo(
        trip_id=_required(row, "trip_id"),
        route_id=_required(row, "route_id"),
        headsign=_optional(row, "trip_headsign"),
        direction_id=_optional_int(row, "direction_id"),
        shape_id=_optional(row, "shape_id"),
    )


def _stop(row: dict[str, str]) -> StopInfo:
    stop_id = _required(row, "stop_id")
    location = GeoPoint(
        lat=float(_required(row, "stop_lat")),
        lon=float(_required(row, "stop_lon")),
    )
    return StopInfo(
        stop_id=stop_id,
        name=_optional(row, "stop_name") or stop_id,
        lat=location.lat,
        lon=location.lon,
    )


def _stop_time(row: dict[str, str]) -> StopTime:
    # Non-timepoint rows may leave one of the two times blank.
    arrival = _optional(row, "arrival_time") or _required(row, "departure_time")
    departure = _optional(row, "departure_time") or arrival
    return StopTime(
        trip_id=_required(row, "trip_id"),
        stop_id=_required(row, "stop_id"),
        stop_sequence=int(_required(row, "stop_sequence")),
        arrival_time=arrival,
        departure_time=departure,
        arrival_s=parse_gtfs_time_to_seconds(arrival),
        departure_s=parse_gtfs_time_to_seconds(departure),
    )


def _shape_point(row: dict[str, str]) -> tuple[str, int, GeoPoint]:
    return (
        _required(row, "shape_id"),
        int(_required(row, "shape_pt_sequence")),
        GeoPoint(
            lat=float(_required(row, "shape_pt_lat")),
            lon=float(_required(row, "shape_pt_lon")),
        ),
    )


def build_reference_index(
    read_table: TableReader, *, color_policy: RouteColorPolicy | None = None
) -> ReferenceIndex:
    """Load every GTFS table through `read_table` and index it by identifier.

    Missing required tables raise LoadError. Malformed rows are skipped and
    counted per table. Duplicate identifiers keep the last row seen.
    """

    texts: dict[str, str] = {}
    for name in REQUIRED_TABLES:
        text = read_table(name)
        if text is None:
            raise LoadError(f"Missing required GTFS file: {name}.txt")
        texts[name] = text
    for name in OPTIONAL_TABLES:
        text = read_table(name)
        if text is not None:
            texts[name] = text

    skipped_rows: dict[str, int] = {}

    def parse(name: str, parse_row: Callable[[dict[str, str]], T]) -> list[T]:
        rows, skipped = read_table_rows(texts.get(name, ""))
        out: list[T] = []
        for row in rows:
            try:
                out.append(parse_row(row))
            except ValueError:
                skipped += 1
        skipped_rows[name] = skipped
        if skipped:
            logger.warning("Skipped %d malformed rows in %s.txt", skipped, name)
        return out

    agencies_by_id = {a.agency_id: a for a in parse("agency", _agency)}
    routes_by_id = {r.route_id: r for r in parse("routes", _route)}
    trips_by_id = {t.trip_id: t for t in parse("trips", _trip)}
    stops_by_id = {s.stop_id: s for s in parse("stops", _stop)}

    stop_times_by_key = {
        (st.trip_id, st.stop_sequence): st for st in parse("stop_times", _stop_time)
    }

    by_stop: dict[str, list[StopTime]] = {}
    by_trip: dict[str, list[StopTime]] = {}
    for st in stop_times_by_key.values():
        by_stop.setdefault(st.stop_id, []).append(st)
        by_trip.setdefault(st.trip_id, []).append(st)
    for entries in by_stop.values():
        entries.sort(key=lambda s: (s.arrival_s, s.departure_s, s.trip_id))
    for entries in by_trip.values():
        entries.sort(key=lambda s: s.stop_sequence)

    shape_tmp: dict[str, dict[int, GeoPoint]] = {}
    for shape_id, seq, point in parse("shapes", _shape_point):
        shape_tmp.setdefault(shape_id, {})[seq] = point
    shapes_by_id = {
        shape_id: tuple(pts[seq] for seq in sorted(pts))
        for shape_id, pts in shape_tmp.items()
    }

    logger.info(
        "Loaded %d routes, %d agencies, %d trips, %d stops, %d stop times, %d shapes",
        len(routes_by_id),
        len(agencies_by_id),
        len(trips_by_id),
        len(stops_by_id),
        len(stop_times_by_key),
        len(shapes_by_id),
    )

    # Callers get read-only views of the loaded tables.
    return ReferenceIndex(
        routes_by_id=MappingProxyType(routes_by_id),
        agencies_by_id=MappingProxyType(agencies_by_id),
        trips_by_id=MappingProxyType(trips_by_id),
        stops_by_id=MappingProxyType(stops_by_id),
        stop_times_by_stop=MappingProxyType({k: tuple(v) for k, v in by_stop.items()}),
        stop_times_by_trip=MappingProxyType({k: tuple(v) for k, v in by_trip.items()}),
        shapes_by_id=MappingProxyType(shapes_by_id),
        skipped_rows=MappingProxyType(skipped_rows),
        color_policy=color_policy or RouteColorPolicy(),
        loaded_at=datetime.now(timezone.utc),
    )
