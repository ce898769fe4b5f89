"""
Storefront service

Article catalog, media downloads, orders for authenticated users and
payment sheets for the mobile checkout.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
import subprocess
import os

from storefront.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger
from storefront.core_settings import get_settings
from storefront.api.articles import router as articles_router
from storefront.api.orders import router as orders_router
from storefront.api.webhooks import router as webhooks_router
from storefront.api.errors import register_error_handlers
from storefront.infrastructure.db import engine, init_models, wait_for_db

settings = get_settings()

SERVICE_NAME = "storefront"
SERVICE_VERSION = settings.SERVICE_VERSION
SERVICE_DESCRIPTION = "Article catalog, orders and payments backend"
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

setup_logging(
    service_name=SERVICE_NAME,
    level=settings.LOG_LEVEL
)

logger = get_logger(__name__)

def run_migrations() -> bool:
    logger.info("Running database migrations")
    result = subprocess.run(
        ["alembic", "upgrade", "head"],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        check=False
    )
    if result.returncode != 0:
        logger.warning(f"Migration output: {result.stderr}")
        return False
    logger.info("Database migrations completed")
    return True

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {SERVICE_NAME} version {SERVICE_VERSION}")

    wait_for_db()
    if settings.RUN_MIGRATIONS:
        try:
            run_migrations()
        except OSError as e:
            logger.error(f"Migration error: {e}")

    try:
        init_models()
        logger.info("Database models initialized")
    except Exception:
        logger.exception("Failed to initialize database models")
        raise

    logger.info(f"{SERVICE_NAME} started successfully")

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")

app = FastAPI(
    title=SERVICE_NAME,
    description=SERVICE_DESCRIPTION,
    version=SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)
register_error_handlers(app)

health_service = ServiceHealth(SERVICE_NAME, engine, storage_path=settings.UPLOADS_DIR, version=SERVICE_VERSION)
app.include_router(health_service.create_health_router())

app.include_router(articles_router)
app.include_router(orders_router)
app.include_router(webhooks_router)

os.makedirs(settings.UPLOADS_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOADS_DIR), name="uploads")

@app.get("/")
async def root():
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "status": "running",
        "docs": "/api/docs"
    }
