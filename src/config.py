from __future__ import annotations

import os
from dataclasses import dataclass

from src.adapters.aws import env_bool
from src.app.services.transit_query_service import DEFAULT_STOPS_BBOX
from src.domain.models.geo import BoundingBox

_PLACEHOLDER_KEYS = {"", "your_nta_api_key_here"}


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Process-level settings; adapter-specific settings are read by each adapter."""

    nta_api_key: str | None
    poll_interval_s: float
    gtfs_s3_bucket: str | None
    stops_bbox: BoundingBox
    timezone_name: str | None
    reveal_errors: bool
    log_level: str

    @property
    def feed_configured(self) -> bool:
        return (self.nta_api_key or "").strip() not in _PLACEHOLDER_KEYS

    @staticmethod
    def from_env() -> "AppConfig":
        bbox_raw = (os.getenv("STOPS_BBOX") or "").strip()
        return AppConfig(
            nta_api_key=os.getenv("NTA_API_KEY"),
            poll_interval_s=float(os.getenv("FEED_POLL_INTERVAL_S") or 30.0),
            gtfs_s3_bucket=(os.getenv("GTFS_S3_BUCKET") or "").strip() or None,
            stops_bbox=BoundingBox.parse(bbox_raw) if bbox_raw else DEFAULT_STOPS_BBOX,
            timezone_name=(os.getenv("TRANSIT_TIMEZONE") or "").strip() or None,
            reveal_errors=env_bool("TRANSIT_REVEAL_ERRORS", False),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
        )
