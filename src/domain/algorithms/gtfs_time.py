from __future__ import annotations

from datetime import datetime


def parse_gtfs_time_to_seconds(raw: str) -> int:
    """Parse HH:MM:SS (or HH:MM) into seconds since service day midnight.

    GTFS hours may exceed 24 for trips running past midnight.
    """

    parts = raw.strip().split(":")
    if len(parts) == 2:
        parts.append("0")
    if len(parts) != 3:
        raise ValueError(f"Invalid GTFS time: {raw!r}")
    hh, mm, ss = (int(p) for p in parts)
    if hh < 0 or not (0 <= mm < 60) or not (0 <= ss < 60):
        raise ValueError(f"Invalid GTFS time: {raw!r}")
    return hh * 3600 + mm * 60 + ss


def format_gtfs_time(seconds: int) -> str:
    hh, rem = divmod(int(seconds), 3600)
    mm, ss = divmod(rem, 60)
    return f"{hh:02d}:{mm:02d}:{ss:02d}"


def seconds_since_midnight(dt: datetime) -> int:
    # Treat provided datetime as local service time.
    return dt.hour * 3600 + dt.minute * 60 + dt.second
