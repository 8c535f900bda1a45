"""
FastAPI application entry point for Storefront API.
"""

# Load environment variables FIRST before any other imports
from pathlib import Path
from dotenv import load_dotenv

project_root = Path(__file__).parent.parent.parent.parent  # src/storefront/api/main.py -> root
env_file = project_root / ".env"
if env_file.exists():
    load_dotenv(env_file)

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from storefront import __version__
from storefront.api.routes import auth, users, products, carts, orchestrator, health
from storefront.api.middleware import AuthMiddleware, ErrorHandlerMiddleware, register_exception_handlers
from storefront.monitoring import MetricsMiddleware, setup_sentry, get_metrics
from storefront.utils.config import get_settings
from storefront.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging()
    settings = get_settings()
    logger.info(f"Starting Storefront API ({settings.app_environment})...")

    setup_sentry(
        dsn=settings.sentry_dsn,
        environment=settings.app_environment,
        release=f"storefront@{__version__}",
        traces_sample_rate=settings.sentry_traces_sample_rate,
    )
    get_metrics()

    logger.info("API started successfully")

    yield

    logger.info("Shutting down Storefront API...")


def create_app() -> FastAPI:
    """Build the application with middleware and routes."""
    settings = get_settings()

    app = FastAPI(
        title="Storefront API",
        description="Multi-tenant e-commerce backend: users, catalog, carts and app orchestration",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Last added runs first: CORS, GZip, error handling, metrics, auth
    app.add_middleware(AuthMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Public
    app.include_router(health.router, prefix=f"{API_PREFIX}/health", tags=["Health"])
    app.include_router(auth.router, prefix=f"{API_PREFIX}/auth", tags=["Authentication"])
    app.include_router(orchestrator.router, prefix=f"{API_PREFIX}/orchestrator", tags=["Orchestrator"])

    # Private
    app.include_router(users.router, prefix=f"{API_PREFIX}/users", tags=["Users"])
    app.include_router(orchestrator.admin_router, prefix=f"{API_PREFIX}/apps-orchestrator", tags=["Orchestrator"])
    app.include_router(products.router, prefix=f"{API_PREFIX}/products", tags=["Products"])
    app.include_router(carts.router, prefix=f"{API_PREFIX}/carts", tags=["Carts"])

    @app.get("/metrics", tags=["Monitoring"])
    async def metrics():
        """Prometheus metrics endpoint."""
        return PlainTextResponse(
            generate_latest(get_metrics().registry),
            media_type=CONTENT_TYPE_LATEST
        )

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "name": "Storefront API",
            "version": __version__,
            "status": "operational",
            "docs": "/docs"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "storefront.api.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.is_development,
    )
