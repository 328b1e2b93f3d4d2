from __future__ import annotations

from fastapi import Request

from src.app.services.transit_query_service import TransitQueryService


def get_query_service(request: Request) -> TransitQueryService:
    # Built by the application lifespan once reference data has loaded.
    service = getattr(request.app.state, "query_service", None)
    if service is None:
        raise RuntimeError("Transit services are not initialised")
    return service
