"""FastAPI application serving the LOLDrivers catalog."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..__version__ import __version__
from ..config import CatalogConfig
from ..core.drivers_cache import DriversCache
from ..core.filters import filter_registry
from ..core.ttl_cache import TTLCache
from ..errors import SourceUnavailableError

logger = logging.getLogger(__name__)

CACHE_HEADERS = {
    "api_short": "public, max-age=300, stale-while-revalidate=3600",
    "api_long": "public, max-age=3600, stale-while-revalidate=86400",
    "no_cache": "no-cache, no-store, must-revalidate",
}

# Query parameters that request an ordering instead of a filter
ORDERING_PARAMS = {"newest-first": "newestFirst", "oldest-first": "oldestFirst"}


class HealthStatus(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Catalog version")
    timestamp: datetime = Field(..., description="Current timestamp")
    cache: dict[str, Any] = Field(default_factory=dict, description="Dataset cache state")


def kebab_to_camel(name: str) -> str:
    """Map a query parameter such as ``memory-manipulator`` to ``memoryManipulator``."""
    head, *rest = name.split("-")
    return head + "".join(part.capitalize() for part in rest)


def parse_filters(params: dict[str, str]) -> dict[str, Any]:
    """Build the filter mapping from query parameters.

    Boolean filters are enabled by the value ``true``. When both ``signed`` and
    ``unsigned`` are requested, ``signed`` wins.

    Args:
        params: Query parameters

    Returns:
        Filter name to value mapping
    """
    filters: dict[str, Any] = {}
    for param, value in params.items():
        name = ORDERING_PARAMS.get(param) or kebab_to_camel(param)
        if name == "architecture":
            if value:
                filters[name] = value
        elif (name in filter_registry or name in ORDERING_PARAMS.values()) and value == "true":
            filters[name] = True

    if filters.get("signed") and filters.get("unsigned"):
        del filters["unsigned"]
    return filters


def page_limit(limit: int, config: CatalogConfig) -> int | None:
    """Resolve the requested page size; zero or negative means no limit."""
    if limit <= 0:
        return None
    return min(config.max_page_size, max(1, limit))


def error_response(error: str, exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "message": str(exc)},
        headers={"Cache-Control": CACHE_HEADERS["no_cache"]},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(f"Starting LOLDrivers catalog API v{__version__} (dataset: {app.state.drivers_cache.data_path})")
    yield
    logger.info("Shutting down LOLDrivers catalog API")


def create_app(config: CatalogConfig | None = None, cache: DriversCache | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Service configuration (read from the environment if None)
        cache: Shared dataset cache (built from config if None)

    Returns:
        Configured application
    """
    config = config or (cache.config if cache else CatalogConfig.from_env())
    app = FastAPI(
        title="LOLDrivers Catalog API",
        description="Searchable catalog of known vulnerable and malicious Windows drivers",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.drivers_cache = cache or DriversCache(config)
    app.state.responses = TTLCache(
        config.response_cache_ttl,
        app.state.drivers_cache.clock,
        max_size=config.response_cache_size,
        name="responses",
    )

    register_routes(app)
    return app


def register_routes(app: FastAPI) -> None:
    """Attach the catalog endpoints to an application."""

    @app.get("/", tags=["General"])
    async def root():
        """Root endpoint."""
        return {
            "name": "LOLDrivers Catalog API",
            "version": __version__,
            "description": "Searchable catalog of known vulnerable Windows drivers",
            "endpoints": {
                "health": "/health",
                "docs": "/docs",
                "drivers": "/api/drivers",
                "stats": "/api/stats",
                "refresh": "/api/cache/refresh",
            },
            "filters": filter_registry.names(),
        }

    @app.get("/health", response_model=HealthStatus, tags=["General"])
    async def health_check(request: Request):
        """Health check endpoint."""
        return HealthStatus(
            status="healthy",
            version=__version__,
            timestamp=datetime.now(timezone.utc),
            cache=request.app.state.drivers_cache.cache_info(),
        )

    @app.get("/api/drivers", tags=["Drivers"])
    async def list_drivers(
        request: Request,
        page: int = Query(1, description="1-based page number"),
        limit: int = Query(50, description="Page size; 0 or less returns everything"),
        q: str = Query("", description="Free-text query"),
    ):
        """List, filter and search driver samples."""
        state = request.app.state
        key = str(request.url)
        cached = state.responses.get(key)
        if cached is not None:
            return JSONResponse(cached, headers={"Cache-Control": CACHE_HEADERS["api_short"], "X-Cache": "HIT"})

        filters = parse_filters(dict(request.query_params))
        page = max(1, page)
        actual_limit = page_limit(limit, state.config)

        try:
            if q or filters:
                result = await state.drivers_cache.search_drivers(q, filters, page, actual_limit)
            else:
                result = await state.drivers_cache.get_drivers(page, actual_limit)
        except SourceUnavailableError as e:
            logger.error(f"Drivers API error: {e}")
            return error_response("Dataset unavailable", e, status_code=503)

        response = {"success": True, **result.to_response()}
        state.responses.set(key, response)
        return JSONResponse(response, headers={"Cache-Control": CACHE_HEADERS["api_short"], "X-Cache": "MISS"})

    @app.get("/api/stats", tags=["Drivers"])
    async def get_stats(request: Request):
        """Dataset-wide statistics."""
        try:
            stats = await request.app.state.drivers_cache.get_statistics()
        except SourceUnavailableError as e:
            logger.error(f"Stats API error: {e}")
            return error_response("Dataset unavailable", e, status_code=503)

        return JSONResponse(
            {"success": True, "stats": stats.to_response()},
            headers={"Cache-Control": CACHE_HEADERS["api_long"]},
        )

    @app.api_route("/api/cache/refresh", methods=["GET", "POST"], tags=["Cache"])
    async def refresh_cache(request: Request):
        """Drop every cached result and reload the dataset."""
        state = request.app.state
        logger.info("Refreshing cache...")

        state.drivers_cache.clear_cache()
        state.responses.clear()
        try:
            drivers = await state.drivers_cache.load_drivers()
            await state.drivers_cache.get_statistics()
        except Exception as e:
            logger.error(f"Cache refresh error: {e}")
            return error_response("Cache refresh failed", e)

        logger.info("Cache refreshed successfully")
        return JSONResponse(
            {
                "success": True,
                "message": "Cache refreshed successfully",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "total": len(drivers),
            },
            headers={"Cache-Control": CACHE_HEADERS["no_cache"]},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc):
        """Handle general exceptions."""
        logger.error(f"API error on {request.url.path}: {exc}")
        return error_response("Internal server error", exc)


# Create app instance
app = create_app()


def get_app() -> FastAPI:
    """Get the FastAPI application instance."""
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("lolcatalog.api.app:app", host="0.0.0.0", port=8080, reload=True)
