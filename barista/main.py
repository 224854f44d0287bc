"""
FastAPI Application Entry Point

Barista Order Service - runs the TCP order counter inside the FastAPI
process and exposes a small HTTP admin surface next to it.

Endpoints:
    - GET /: Service info
    - GET /health: Order counter and kitchen health
    - GET /api/dashboard-data: Live stage counts (the barista log)

The order counter itself speaks the line protocol described in
barista.protocol on ``cafe_port``.

Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from barista.core.config import Settings, get_settings, setup_logging
from barista.schemas import CafeSnapshot, ErrorResponse, HealthResponse
from barista.server import CafeServer
from barista.services import OrderService, PreparationScheduler, SessionDirectory, StageRegistry

settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


@dataclass
class Cafe:
    """Everything one running cafe is made of."""
    registry: StageRegistry
    sessions: SessionDirectory
    scheduler: PreparationScheduler
    service: OrderService
    server: CafeServer


def build_cafe(config: Settings) -> Cafe:
    """Wire registry, scheduler, sessions, service and TCP server from settings."""
    registry = StageRegistry(capacity=config.prep_capacity)
    sessions = SessionDirectory()
    scheduler = PreparationScheduler(registry, duration_for=config.brew_seconds)
    service = OrderService(
        registry, scheduler, sessions, max_items_per_order=config.max_items_per_order
    )
    server = CafeServer(
        service,
        host=config.cafe_host,
        port=config.cafe_port,
        max_line_length=config.max_line_length,
    )
    return Cafe(registry, sessions, scheduler, service, server)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Open the cafe on startup; on shutdown stop taking customers, cancel
    in-flight preparations (bounded by the grace period) and hang up.
    """
    config = get_settings()

    logger.info("=" * 60)
    logger.info(f"☕ Starting {config.app_name}")
    logger.info(f"   Version: {config.app_version}")
    logger.info(f"   Environment: {config.env_mode.value}")
    logger.info(f"   Capacity: {config.prep_capacity} drinks at once")
    logger.info(f"   Brew times: tea {config.tea_brew_seconds}s, coffee {config.coffee_brew_seconds}s")
    logger.info("=" * 60)

    cafe = build_cafe(config)
    await cafe.server.start()
    app.state.cafe = cafe
    logger.info("✅ Cafe open!")

    yield  # Application runs

    logger.info("Shutting down...")
    cafe.server.stop_accepting()
    cancelled = await cafe.scheduler.shutdown(grace=config.shutdown_grace_seconds)
    await cafe.server.close()
    cafe.sessions.close_all()
    logger.info(f"✅ Cleanup complete ({cancelled} preparation(s) abandoned)")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Concurrent cafe order counter. Customers order over a line-based TCP "
        "session; this API reports on the kitchen."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


def _cafe(request: Request) -> Cafe:
    return request.app.state.cafe


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root(request: Request) -> dict:
    """API root with navigation links."""
    cafe = _cafe(request)
    return {
        "message": f"☕ Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "order_counter_port": cafe.server.port,
        "documentation": "/docs",
        "dashboard": "/api/dashboard-data",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(request: Request) -> HealthResponse:
    """Report whether the order counter is listening and the kitchen is running."""
    cafe = _cafe(request)

    counter_status = "healthy" if cafe.server.is_serving else "unhealthy: not listening"
    scheduler_status = "healthy" if not cafe.scheduler.closed else "unhealthy: stopped"
    overall = "operational" if (
        counter_status == "healthy" and scheduler_status == "healthy"
    ) else "degraded"

    return HealthResponse(
        status=overall,
        order_counter=counter_status,
        scheduler=scheduler_status,
        timestamp=datetime.now(),
    )


# =============================================================================
# DASHBOARD ENDPOINTS
# =============================================================================

@app.get(
    "/api/dashboard-data",
    response_model=CafeSnapshot,
    tags=["Dashboard"],
)
async def dashboard_data(request: Request) -> CafeSnapshot:
    """Current clients and stage sizes."""
    return _cafe(request).service.snapshot()


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")
    show_detail = settings.debug or settings.is_development

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal Server Error",
            detail=str(exc) if show_detail else "An unexpected error occurred",
        ).model_dump(),
    )
