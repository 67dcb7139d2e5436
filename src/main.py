"""
FastAPI Application

Main entry point for the Customer Insights API.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from src.config import get_settings
from src.config.logging import configure_logging
from src.database.connection import init_database, close_database
from src.serving.cache import init_redis, close_redis
from src.serving.api.middleware import RequestLoggingMiddleware
from src.serving.api.routes import health_router, customers_router
from src.statistics.errors import StatisticsError

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info("Starting Customer Insights API", environment=settings.app_env)

    try:
        await init_database()
    except Exception as e:
        logger.warning("Database init failed", error=str(e))

    if settings.redis.enabled:
        try:
            await init_redis()
        except Exception as e:
            logger.warning("Redis init failed, serving uncached", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_database()
    if settings.redis.enabled:
        await close_redis()


app = FastAPI(
    title="Customer Insights API",
    description="Deduplicated demographic and behaviour statistics over customer visit records",
    version=settings.version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.security.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(health_router, prefix="/api/v1", tags=["Health"])
app.include_router(customers_router, prefix="/api/v1/customers", tags=["Customers"])


@app.exception_handler(StatisticsError)
async def statistics_error_handler(request: Request, exc: StatisticsError) -> JSONResponse:
    """Report faults never leak internals to the caller."""
    return JSONResponse(status_code=500, content={"message": exc.message})


@app.get("/")
async def root():
    return {"message": "Hello World!"}


@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": "Customer Insights API",
        "version": settings.version,
        "environment": settings.app_env,
        "documentation": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
