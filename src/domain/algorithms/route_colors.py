from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.domain.models.gtfs import RouteInfo


@dataclass(frozen=True, slots=True)
class RouteColorPolicy:
    """Resolves the colour a map should draw for a route.

    Resolution order:
      1) explicit route_color from routes.txt
      2) short-name prefix (spine C/G and orbital N routes)
      3) agency override (Dublin Bus)
      4) global default
    """

    accent_prefixes: tuple[str, ...] = ("C", "G", "N")
    accent_color: str = "#00D06E"
    override_agency_id: str = "978"
    override_agency_color: str = "#FFD700"
    default_color: str = "#007bff"

    def resolve(self, route: "RouteInfo") -> str:
        if route.color:
            return normalize_hex_color(route.color)

        short_name = route.short_name or ""
        if short_name.startswith(self.accent_prefixes):
            return self.accent_color

        if route.agency_id == self.override_agency_id:
            return self.override_agency_color

        return self.default_color


def normalize_hex_color(raw: str) -> str:
    # GTFS stores colours without the leading '#'.
    value = raw.strip()
    return value if value.startswith("#") else f"#{value}"
