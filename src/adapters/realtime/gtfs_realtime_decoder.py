from __future__ import annotations

import gzip
import logging
import zlib
from dataclasses import dataclass
from datetime import datetime, timezone

from google.protobuf.message import DecodeError
from google.transit import gtfs_realtime_pb2

from src.app.ports.output import DecodedFeed, DecodedVehicle, IVehicleFeedDecoder
from src.domain.exceptions import FeedDecodeError

logger = logging.getLogger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"


def _epoch_to_datetime(value: int) -> datetime | None:
    # Out-of-range values (e.g. milliseconds) read as absent.
    if value <= 0:
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        logger.debug("Ignoring out-of-range feed timestamp %d", value)
        return None


@dataclass(slots=True)
class GtfsRealtimeDecoder(IVehicleFeedDecoder):
    """Decodes a GTFS-Realtime FeedMessage into vehicle records.

    Entities without a vehicle position are dropped. Gzip-compressed payloads
    are inflated first.
    """

    def decode(self, content: bytes) -> DecodedFeed:
        if content[:2] == _GZIP_MAGIC:
            try:
                content = gzip.decompress(content)
            except (OSError, EOFError, zlib.error) as exc:
                raise FeedDecodeError(f"Invalid gzip payload: {exc}") from exc

        feed = gtfs_realtime_pb2.FeedMessage()
        try:
            feed.ParseFromString(content)
        except (DecodeError, ValueError) as exc:
            raise FeedDecodeError(f"Invalid GTFS-Realtime payload: {exc}") from exc

        header_ts = None
        if feed.HasField("header") and feed.header.HasField("timestamp"):
            header_ts = _epoch_to_datetime(int(feed.header.timestamp))

        out: list[DecodedVehicle] = []
        for ent in feed.entity:
            if not ent.HasField("vehicle"):
                continue

            v = ent.vehicle
            if not v.HasField("position"):
                continue

            vehicle_id = None
            if v.HasField("vehicle"):
                vehicle_id = v.vehicle.id or None

            entity_id = ent.id or vehicle_id
            if not entity_id:
                logger.debug("Dropping vehicle entity without an identifier")
                continue

            pos = v.position

            trip_id = None
            route_id = None
            direction_id = None
            if v.HasField("trip"):
                trip_id = v.trip.trip_id or None
                route_id = v.trip.route_id or None
                if v.trip.HasField("direction_id"):
                    direction_id = int(v.trip.direction_id)

            out.append(
                DecodedVehicle(
                    entity_id=entity_id,
                    lat=float(pos.latitude),
                    lon=float(pos.longitude),
                    bearing=float(pos.bearing) if pos.HasField("bearing") else None,
                    route_id=route_id,
                    trip_id=trip_id,
                    direction_id=direction_id,
                    vehicle_id=vehicle_id,
                    timestamp=(
                        _epoch_to_datetime(int(v.timestamp))
                        if v.HasField("timestamp")
                        else None
                    ),
                )
            )

        return DecodedFeed(vehicles=tuple(out), timestamp=header_ts)
