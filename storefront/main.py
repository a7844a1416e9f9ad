# main.py
from __future__ import annotations

import json
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse

# Import logging utilities early so that the logger configuration is
# applied before any other modules emit log messages.
from storefront.logging_config import logger

from storefront.core.config import Settings, get_settings
from storefront.core.errors import CacheFetchError, ProductNotFoundError
from storefront.routes.cache import router as cache_router
from storefront.routes.products import router as products_router
from storefront.routes.search import router as search_router
from storefront.services.catalog_service import Catalog, load_catalog
from storefront.services.cleanup import CleanupTask
from storefront.services.product_cache import ProductCache
from storefront.services.search_service import InvertedIndexSearch
from storefront.utils.cache import TemporalCache
from storefront.utils.storage import DurableStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if app.state.catalog is None:
        app.state.catalog = load_catalog(settings.catalog_path)

    # one cache per process, shared by every route
    cache = TemporalCache.from_settings(settings, store=app.state.store)
    app.state.cache = cache
    app.state.product_cache = ProductCache(cache)
    app.state.search = InvertedIndexSearch(app.state.catalog)

    cleanup = CleanupTask(cache, settings.cache_cleanup_interval)
    cleanup.start()
    logger.info(json.dumps({"event": "startup", "products": len(app.state.catalog), "cache_size": len(cache)}))
    try:
        yield
    finally:
        await cleanup.stop()
        cache.close()
        logger.info(json.dumps({"event": "shutdown", "cache_size": len(cache)}))


def create_app(
    settings: Optional[Settings] = None,
    catalog: Optional[Catalog] = None,
    store: Optional[DurableStore] = None,
) -> FastAPI:
    """Build the application.

    ``catalog`` and ``store`` override what the lifespan would otherwise
    load from ``settings`` (the catalog file and the file-backed store).
    """
    app = FastAPI(default_response_class=ORJSONResponse, lifespan=lifespan)
    app.state.settings = settings or get_settings()
    app.state.catalog = catalog
    app.state.store = store

    app.include_router(products_router)
    app.include_router(search_router)
    app.include_router(cache_router)

    @app.exception_handler(ProductNotFoundError)
    async def product_not_found(request: Request, exc: ProductNotFoundError):
        return ORJSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(CacheFetchError)
    async def cache_fetch_failed(request: Request, exc: CacheFetchError):
        if isinstance(exc.__cause__, ProductNotFoundError):
            return ORJSONResponse(status_code=404, content={"detail": str(exc.__cause__)})
        return ORJSONResponse(status_code=502, content={"detail": str(exc)})

    # -----------------------------------------------------------------
    # Request logging middleware
    # -----------------------------------------------------------------
    @app.middleware("http")  # type: ignore[misc]
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000
        logger.info(json.dumps({
            "event": "http_request",
            "path": request.url.path,
            "method": request.method,
            "status": response.status_code,
            "duration_ms": round(duration_ms, 2),
        }))
        return response

    return app


app = create_app()
