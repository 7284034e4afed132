"""
Bistro Reservations API

Wires logging, the HTTP routers and the liveness/readiness endpoints into
one ASGI app. Run it with ``uvicorn app.main:app`` or ``python -m app.main``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
import structlog

from app.config import settings
from app.api import auth, tables, reservations, payments, menu, menu_orders, feedback, users

VERSION = "1.0.0"


def configure_logging() -> None:
    """Route structlog through stdlib logging at the configured level"""
    logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("API starting", service="bistro-reservations", version=VERSION)
    yield
    logger.info("API stopped", service="bistro-reservations")


app = FastAPI(
    title="Bistro Reservations",
    description="Table reservations, approvals, deposits, pre-orders and reviews for a restaurant",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(tables.router, prefix="/tables", tags=["Tables"])
app.include_router(reservations.router, prefix="/reservations", tags=["Reservations"])
app.include_router(menu_orders.reservation_router, prefix="/reservations", tags=["Pre-orders"])
app.include_router(menu_orders.router, prefix="/menu-orders", tags=["Pre-orders"])
app.include_router(payments.router, prefix="/payments", tags=["Payments"])
app.include_router(menu.router, prefix="/menu", tags=["Menu"])
app.include_router(feedback.router, prefix="/feedback", tags=["Feedback"])


async def _check_database() -> str:
    from app.database import SessionLocal

    try:
        async with SessionLocal() as db:
            await db.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Database check failed", error=str(exc))
        return f"failed: {exc}"
    return "ok"


def _check_broker() -> str:
    from app.jobs.celery_app import celery_app

    try:
        celery_app.control.ping(timeout=1)
    except Exception as exc:
        logger.warning("Broker check failed", error=str(exc))
        return f"failed: {exc}"
    return "ok"


@app.get("/health")
async def health():
    """Liveness: the process is up"""
    return {"status": "healthy", "service": "api", "version": VERSION}


@app.get("/health/ready")
async def ready():
    """Readiness: database and Celery broker both answer"""
    checks = {"database": await _check_database(), "redis": _check_broker()}
    healthy = all(result == "ok" for result in checks.values())
    return {"status": "ready" if healthy else "not_ready", "checks": checks}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
