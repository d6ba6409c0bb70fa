"""
Pickup Orders - FastAPI Backend Application
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
import structlog

from app.config import settings
from app.errors import ServiceError
from app.api import auth, dishes, time_slots, promo_codes, orders, payments, business_settings

# Configure structured logging
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Pickup Orders API", version="1.0.0", business=settings.business_name)
    yield
    logger.info("Shutting down Pickup Orders API")


# Create FastAPI application
app = FastAPI(
    title="Pickup Orders",
    description="Click-and-collect ordering for a single restaurant",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Render service errors as {"detail", "code"}"""
    log = logger.warning if exc.status_code >= 500 else logger.info
    log(
        "Request failed",
        path=request.url.path,
        code=exc.code,
        detail=exc.message,
        **exc.context,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


# Health check endpoints
@app.get("/health")
async def health():
    """Basic health check"""
    return {"status": "healthy", "service": "api", "version": "1.0.0"}


@app.get("/health/ready")
async def ready():
    """Readiness check with dependency verification"""
    from app.database import SessionLocal

    checks = {}

    # Check database
    try:
        async with SessionLocal() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"failed: {str(e)}"

    # Check Redis
    try:
        from app.jobs.celery_app import celery_app
        celery_app.control.ping(timeout=1)
        checks["redis"] = "ok"
    except Exception as e:
        checks["redis"] = f"failed: {str(e)}"

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
    }


# Include API routers
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(dishes.router, prefix="/dishes", tags=["Dishes"])
app.include_router(time_slots.router, prefix="/time_slots", tags=["Time Slots"])
app.include_router(promo_codes.router, prefix="/promo_codes", tags=["Promo Codes"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(payments.router, prefix="/payments", tags=["Payments"])
app.include_router(business_settings.router, prefix="/business_settings", tags=["Business Settings"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
