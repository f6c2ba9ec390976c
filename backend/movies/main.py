"""
Movies Catalog - Main Application
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from movies import __version__
from movies.api.errors import register_exception_handlers
from movies.api.v1 import api_router
from movies.core.config import settings, validate_settings
from movies.core.database import init_database, close_database
from movies.core.logging import setup_logging, get_logger, with_request_context, validate_logging_config

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    for problem in validate_settings() + validate_logging_config():
        logger.warning(f"Configuration problem: {problem}")

    await init_database(create_tables=settings.DB_CREATE_TABLES)
    yield
    # Shutdown
    await close_database()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Movie catalog with genres, per-user ratings and aggregate scores",
        version=__version__,
        lifespan=lifespan,
        docs_url=settings.DOCS_URL if settings.ENABLE_DOCS else None,
        redoc_url=settings.REDOC_URL if settings.ENABLE_DOCS else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_HOSTS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        """Tag every log line of a request with its request id"""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        with with_request_context(request_id):
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    register_exception_handlers(app)

    # Include API router
    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/")
    async def root():
        return {
            "message": settings.APP_NAME,
            "version": __version__,
            "docs": settings.DOCS_URL,
        }

    return app


app = create_app()
