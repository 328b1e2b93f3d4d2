from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not (-90.0 <= self.lat <= 90.0):
            raise ValueError(f"Invalid latitude: {self.lat}")
        if not (-180.0 <= self.lon <= 180.0):
            raise ValueError(f"Invalid longitude: {self.lon}")


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Inclusive lat/lon rectangle used to limit stops served to a map."""

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    def __post_init__(self) -> None:
        if self.min_lat > self.max_lat or self.min_lon > self.max_lon:
            raise ValueError(
                f"Invalid bounding box: ({self.min_lat}, {self.min_lon}) "
                f"> ({self.max_lat}, {self.max_lon})"
            )

    def contains(self, lat: float, lon: float) -> bool:
        return (
            self.min_lat <= lat <= self.max_lat and self.min_lon <= lon <= self.max_lon
        )

    @staticmethod
    def parse(raw: str) -> "BoundingBox":
        """Parse 'min_lat,min_lon,max_lat,max_lon'."""

        parts = [p.strip() for p in raw.split(",")]
        if len(parts) != 4:
            raise ValueError(f"Bounding box needs 4 comma-separated values: {raw!r}")
        min_lat, min_lon, max_lat, max_lon = (float(p) for p in parts)
        return BoundingBox(
            min_lat=min_lat, min_lon=min_lon, max_lat=max_lat, max_lon=max_lon
        )
