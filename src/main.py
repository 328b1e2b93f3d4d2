from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.network import router as network_router
from src.adapters.api.controllers.realtime import router as realtime_router
from src.adapters.persistence import LocalGtfsRepository, S3GtfsRepository
from src.adapters.realtime.gtfs_realtime_decoder import GtfsRealtimeDecoder
from src.adapters.realtime.http_gtfs_realtime_feed_client import (
    HttpGtfsRealtimeFeedClient,
)
from src.app.ports.output import IGtfsRepository, IRealtimeFeedClient
from src.app.services.feed_poller import FeedPoller
from src.app.services.snapshot_cache import SnapshotCache
from src.app.services.transit_query_service import TransitQueryService
from src.config import AppConfig
from src.domain.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def _gtfs_repository(config: AppConfig) -> IGtfsRepository:
    if config.gtfs_s3_bucket:
        return S3GtfsRepository(bucket=config.gtfs_s3_bucket)
    return LocalGtfsRepository()


def create_app(
    config: AppConfig | None = None,
    *,
    gtfs_repository: IGtfsRepository | None = None,
    feed_client: IRealtimeFeedClient | None = None,
) -> FastAPI:
    """Build the API. Reference data loads and polling starts in the lifespan."""

    cfg = config or AppConfig.from_env()
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # LoadError propagates and aborts startup.
        index = (gtfs_repository or _gtfs_repository(cfg)).load_index()
        cache = SnapshotCache()

        poller: FeedPoller | None = None
        client = feed_client
        if client is None and cfg.feed_configured:
            client = HttpGtfsRealtimeFeedClient(api_key=cfg.nta_api_key)
        if client is not None:
            poller = FeedPoller(
                feed_client=client,
                decoder=GtfsRealtimeDecoder(),
                reference_index=index,
                cache=cache,
                interval_s=cfg.poll_interval_s,
            )
            poller.start()
        else:
            logger.warning("NTA_API_KEY not configured; live positions stay empty")

        app.state.query_service = TransitQueryService(
            reference_index=index,
            cache=cache,
            poller=poller,
            stops_bbox=cfg.stops_bbox,
            timezone_name=cfg.timezone_name,
        )
        try:
            yield
        finally:
            if poller is not None:
                await poller.stop()

    app = FastAPI(title="Dublin Live Transit", lifespan=lifespan)
    app.include_router(realtime_router)
    app.include_router(network_router)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Ensure API errors are JSON so the map client can display them."""

        logging.getLogger("uvicorn.error").exception(
            "Unhandled exception", extra={"path": str(request.url.path)}
        )

        if cfg.reveal_errors or isinstance(
            exc, (FileNotFoundError, RuntimeError, ValueError)
        ):
            detail = str(exc) or exc.__class__.__name__
        else:
            detail = "Internal Server Error"

        return JSONResponse(status_code=500, content={"detail": detail})

    return app


app = create_app()
