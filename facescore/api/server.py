"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from facescore.api.routes import router
from facescore.api.middleware import setup_cors, setup_rate_limiting
from facescore.config import LOG_LEVEL, validate_config
from facescore.db.connection import db
from facescore.exceptions import AuthenticationError, FaceScoreError
from facescore.observability.sentry_config import init_sentry, shutdown_sentry

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application"""
    # Startup
    logger.info("Starting API server...")
    validate_config()
    init_sentry()
    await db.init_pool()
    logger.info("Database pool initialized")

    yield

    # Shutdown
    logger.info("Shutting down API server...")
    await db.close_pool()
    shutdown_sentry()
    logger.info("Database pool closed")


def create_api_application() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="FaceScore API",
        description="Facial analysis scoring, achievements and goals",
        version="1.0.0",
        lifespan=lifespan
    )

    # Setup middleware
    setup_cors(app)
    setup_rate_limiting(app)

    # Include routes
    app.include_router(router)
    app.mount("/metrics", make_asgi_app())

    @app.exception_handler(AuthenticationError)
    async def authentication_exception_handler(request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=exc.to_dict(),
            headers={"WWW-Authenticate": "Bearer"}
        )

    @app.exception_handler(FaceScoreError)
    async def facescore_exception_handler(request, exc: FaceScoreError):
        return JSONResponse(status_code=500, content=exc.to_dict())

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"}
        )

    logger.info("FastAPI application created")

    return app


app = create_api_application()
