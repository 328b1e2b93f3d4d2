from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from src.domain.algorithms.gtfs_time import (
    format_gtfs_time,
    parse_gtfs_time_to_seconds,
)
from src.domain.exceptions import NotFoundError
from src.domain.models.gtfs import ReferenceIndex
from src.domain.models.schedule import ScheduleRow

# Realtime delay per (trip_id, stop_id), in seconds.
DelayMap = Mapping[tuple[str, str], int]

DAY_S = 24 * 3600


def _cursor_seconds(now: str | int) -> int:
    if isinstance(now, int):
        return now
    return parse_gtfs_time_to_seconds(now)


def _seconds_after_cursor(arrival_s: int, cursor_s: int) -> int | None:
    """Arrival on the cursor's timeline, or None if it has already passed.

    A same-day cursor also sees the previous service day, whose late trips
    are stamped 24:00:00 or later.
    """

    if cursor_s < DAY_S <= arrival_s and arrival_s - DAY_S >= cursor_s:
        return arrival_s - DAY_S
    if arrival_s >= cursor_s:
        return arrival_s
    return None


@dataclass(slots=True)
class ScheduleService:
    """Answers "upcoming departures at stop X" from the static timetable.

    Times are compared as seconds since service day midnight, so trips past
    midnight (e.g. 25:10:00) sort after 23:59:00. Shortly after midnight the
    previous service day's late calls (24:10:00 at 00:05) come first.
    """

    reference_index: ReferenceIndex

    def upcoming_departures(
        self,
        stop_id: str,
        now: str | int,
        limit: int = 20,
        *,
        delays: DelayMap | None = None,
    ) -> tuple[ScheduleRow, ...]:
        index = self.reference_index
        if index.stop_by_id(stop_id) is None:
            raise NotFoundError(f"Unknown stop_id: {stop_id}")
        if limit <= 0:
            return ()

        cursor_s = _cursor_seconds(now)

        candidates: list[tuple[int, int, int, ScheduleRow]] = []
        for st in index.stop_times_for_stop(stop_id):
            arrival_s = _seconds_after_cursor(st.arrival_s, cursor_s)
            if arrival_s is None:
                continue

            trip = index.trip_by_id(st.trip_id)
            if trip is None:
                continue

            route = index.route_by_id(trip.route_id)
            delay_s = int(delays.get((st.trip_id, stop_id), 0)) if delays else 0
            estimated_s = max(0, arrival_s + delay_s)

            row = ScheduleRow(
                trip_id=st.trip_id,
                stop_id=stop_id,
                arrival_time=st.arrival_time,
                departure_time=st.departure_time,
                stop_sequence=st.stop_sequence,
                route_id=trip.route_id,
                route_short_name=route.short_name if route else trip.route_id,
                route_color=index.route_display_color(trip.route_id),
                scheduled_time=st.arrival_time,
                estimated_time=(
                    format_gtfs_time(max(0, st.arrival_s + delay_s))
                    if delay_s
                    else st.arrival_time
                ),
                headsign=trip.headsign,
                direction_id=trip.direction_id,
                delay_seconds=delay_s,
            )
            candidates.append((estimated_s, arrival_s, st.departure_s, row))

        # Delays are merged before sorting, so rows come back in estimated order.
        candidates.sort(key=lambda c: (c[0], c[1], c[2], c[3].trip_id))
        return tuple(row for *_, row in candidates[:limit])
