"""FastAPI application routes, middleware, and metrics."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from structlog.contextvars import bind_contextvars, clear_contextvars

from city_insights.dashboard import DashboardState, get_dashboard
from city_insights.errors import CityInsightsError, CityNotFoundError, ExternalAPIError
from city_insights.health.health_check import is_backend_available, is_redis_available
from city_insights.logging_config import logger
from city_insights.models.city import City
from city_insights.models.favorite import (
    FavoriteActionResponse,
    FavoriteEntry,
    FavoriteRequest,
)
from city_insights.models.health import HealthResponse
from city_insights.models.record import AggregatedCityRecord, SavedRecord
from city_insights.models.statistics import Statistics
from city_insights.redis_store.store import favorites_store


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if get_dashboard.cache_info().currsize:
        await get_dashboard().aclose()


app = FastAPI(title="City Insights", lifespan=lifespan)

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "path", "status_code"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request duration in seconds", ["path"]
)


@app.middleware("http")
async def request_logging(request: Request, call_next):
    """Log request details, attach a request ID, and record metrics.

    Args:
        request: Incoming HTTP request.
        call_next: FastAPI handler for the next middleware/app.

    Returns:
        The response produced by the downstream handler.
    """
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    bind_contextvars(request_id=request_id)
    start = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response
    finally:
        duration_s = time.perf_counter() - start
        status_code = getattr(response, "status_code", 500)
        logger.info(
            "HTTP_REQUEST",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=round(duration_s * 1000, 2),
        )
        REQUEST_COUNT.labels(
            method=request.method, path=request.url.path, status_code=status_code
        ).inc()
        REQUEST_LATENCY.labels(path=request.url.path).observe(duration_s)
        clear_contextvars()


@app.exception_handler(CityNotFoundError)
async def city_not_found_handler(request: Request, exc: CityNotFoundError):
    """Convert city lookup misses into 404 responses."""
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ExternalAPIError)
async def external_api_error_handler(request: Request, exc: ExternalAPIError):
    """Convert required upstream failures into 502 responses."""
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(CityInsightsError)
async def city_insights_error_handler(request: Request, exc: CityInsightsError):
    """Convert any other service error into a generic 500 response."""
    return JSONResponse(status_code=500, content={"detail": "Unexpected error"})


@app.get("/")
async def root():
    """Return a basic liveness response."""
    return {"message": "City Insights"}


@app.get("/cities/suggest")
async def suggest_cities(request: Request, q: str = "") -> list[City]:
    """Return autocomplete candidates for a partial city name.

    Requests are debounced per caller, identified by the ``x-session-id``
    header or else the client address. A superseded request returns ``[]``.
    """
    caller = request.headers.get("x-session-id") or (
        request.client.host if request.client else "anonymous"
    )
    return await get_dashboard().suggest(q, caller)


@app.get("/insights")
async def get_city_insights(
    background_tasks: BackgroundTasks,
    city_name: str = Query(min_length=1),
) -> AggregatedCityRecord:
    """Aggregate insights for a city, then save it in the background.

    Args:
        background_tasks: Used to save the record after responding.
        city_name: City name string from the query parameter.

    Returns:
        The aggregated city record.
    """
    if not city_name.strip():
        return JSONResponse(status_code=422, content={"detail": "City name is empty"})
    dashboard = get_dashboard()
    record = await dashboard.search(city_name)
    background_tasks.add_task(dashboard.persist, record)
    return record


@app.get("/dashboard")
async def get_dashboard_state() -> DashboardState:
    """Return the displayed record with the latest statistics and history."""
    return get_dashboard().state


@app.get("/stats")
async def get_statistics() -> Statistics | None:
    """Return backend usage statistics, or null when unavailable."""
    return await get_dashboard().backend.fetch_statistics()


@app.get("/records")
async def get_records(
    page: int = Query(1, ge=1), limit: int = Query(5, ge=1, le=100)
) -> list[SavedRecord]:
    """Return saved lookups, most recent first."""
    return await get_dashboard().backend.fetch_records(page, limit)


@app.get("/favorites")
async def list_favorites() -> list[FavoriteEntry]:
    """Return favourite cities, oldest first."""
    return await favorites_store().entries()


@app.post("/favorites")
async def add_favorite(request: FavoriteRequest) -> FavoriteActionResponse:
    """Save a favourite city unless it is already saved."""
    added, entry = await favorites_store().add(request.city, request.country)
    return FavoriteActionResponse(added=added, favorite=entry)


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Report API health and dependency availability.

    Returns:
        A HealthResponse containing dependency status.
    """
    return HealthResponse.from_checks(
        backend=await is_backend_available(),
        redis=await is_redis_available(),
    )


@app.get("/metrics")
async def metrics():
    """Expose Prometheus metrics for scraping."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
