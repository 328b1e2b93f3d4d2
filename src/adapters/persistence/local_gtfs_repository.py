from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from src.app.ports.output import IGtfsRepository
from src.domain.exceptions import LoadError
from src.domain.models.gtfs import ReferenceIndex

from .gtfs_tables import build_reference_index


@dataclass(slots=True)
class LocalGtfsRepository(IGtfsRepository):
    """Loads the reference index from a directory of GTFS .txt files.

    Env vars:
      - GTFS_PATH: directory containing agency.txt, routes.txt, trips.txt,
        stops.txt, stop_times.txt and (optionally) shapes.txt
    """

    base_path: str | Path | None = None

    def _base(self) -> Path:
        value = self.base_path or os.getenv("GTFS_PATH") or "data/gtfs"
        return Path(value)

    def _read_table(self, name: str) -> str | None:
        path = self._base() / f"{name}.txt"
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise LoadError(f"Cannot read {path}: {exc}") from exc

    def load_index(self) -> ReferenceIndex:
        base = self._base()
        if not base.is_dir():
            raise LoadError(f"GTFS directory not found: {base}")
        return build_reference_index(self._read_table)
