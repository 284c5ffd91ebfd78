"""
Main FastAPI application entry point
"""
import time
from datetime import datetime, timezone
from typing import Any, Dict

import uvicorn
from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import OPRError
from core.logging import get_logger
from core.metrics import get_metrics_response, metrics
from database.session import get_db

logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request tracking middleware
@app.middleware("http")
async def track_requests(request: Request, call_next):
    """Track all HTTP requests for metrics"""
    start_time = time.time()

    # Skip metrics endpoint to avoid recursion
    if request.url.path == "/metrics":
        return await call_next(request)

    response = await call_next(request)

    duration = time.time() - start_time
    metrics.track_request(
        method=request.method,
        endpoint=request.url.path,
        status=response.status_code,
        duration=duration,
    )

    return response


# Exception handlers
@app.exception_handler(OPRError)
async def opr_error_handler(request: Request, exc: OPRError):
    """Handle custom OPR errors"""
    logger.error(f"OPR error - error_code: {exc.error_code}, details: {exc.details}, path: {request.url.path}")
    metrics.track_error(exc.error_code, "api")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.exception(f"Unexpected error - path: {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": "An unexpected error occurred"},
    )


@app.get("/health")
async def health_check(db: Session = Depends(get_db)) -> JSONResponse:
    """Liveness plus database connectivity; 503 when the store is unreachable"""
    health_data: Dict[str, Any] = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": {"gateway": {"configured": settings.gateway_configured}},
    }

    try:
        start_time = time.time()
        db.execute(text("SELECT 1")).fetchone()
        health_data["checks"]["database"] = {
            "status": "connected",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_data["checks"]["database"] = {"status": "error", "error": str(e)}
        health_data["status"] = "unhealthy"

    status_code = 200 if health_data["status"] == "ok" else 503
    return JSONResponse(status_code=status_code, content=health_data)


# Custom metrics endpoint
@app.get("/metrics", include_in_schema=False)
async def prometheus_metrics():
    """Expose metrics for Prometheus scraping"""
    if not settings.prometheus_enabled:
        return JSONResponse(status_code=404, content={"error": "Metrics not enabled"})

    metrics_data, content_type = get_metrics_response()
    return Response(content=metrics_data, media_type=content_type)


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup"""
    logger.info(
        f"Starting {settings.app_name} version={settings.app_version} environment={settings.environment} "
        f"gateway_configured={settings.gateway_configured}"
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    from d9_delivery.api import get_orchestrator

    if get_orchestrator.cache_info().currsize:
        orchestrator = get_orchestrator()
        orchestrator.close()
        if orchestrator.gateway is not None:
            await orchestrator.gateway.aclose()
    logger.info(f"Shutting down {settings.app_name}")


# Import and register routers
from d1_records.api import router as records_router  # noqa: E402
from d9_delivery.api import router as delivery_router  # noqa: E402
from d10_analytics.api import router as analytics_router  # noqa: E402

# Routers include their own /api/v1 prefixes
app.include_router(records_router)
app.include_router(delivery_router)
app.include_router(analytics_router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
