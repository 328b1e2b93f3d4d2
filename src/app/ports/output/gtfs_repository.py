from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.gtfs import ReferenceIndex


class IGtfsRepository(ABC):
    """Port for loading static GTFS data into a reference index."""

    @abstractmethod
    def load_index(self) -> ReferenceIndex:
        """Load all reference tables; raise LoadError if a required one is missing."""
