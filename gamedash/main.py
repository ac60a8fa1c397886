# gamedash/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool

from .catalog import CatalogAggregator, dashboard_router
from .config import Settings
from .gateway import gateway_router


logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    aggregator: Optional[CatalogAggregator] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    aggregator = aggregator or CatalogAggregator.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.api_key:
            logger.warning("RAWG_API_KEY is not set; upstream requests will be rejected")
        if settings.autoload:
            await run_in_threadpool(aggregator.load_first_page)
        yield

    app = FastAPI(
        title="gamedash",
        description=(
            "Trending games dashboard: RAWG catalogue aggregation, favourites "
            "and a relay gateway for the browser page."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.aggregator = aggregator

    # The gateway's static catch-all must stay last.
    app.include_router(dashboard_router)
    app.include_router(gateway_router)
    return app
