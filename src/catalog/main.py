"""
Application factory.

Run with:
    catalog-api
or
    uvicorn catalog.main:create_app --factory
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog.api.v1 import api_router
from catalog.api.v1.error_handlers import register_exception_handlers
from catalog.config.settings import Settings, get_settings
from catalog.core.logging import RequestIDMiddleware, setup_logging
from catalog.database.session import Database
from catalog.utils.project import get_project_version

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    When `database` is given the caller owns its lifecycle (tests); otherwise
    one is created from `settings` at startup and disposed at shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_database = app.state.database is None
        if owns_database:
            app.state.database = Database.from_settings(settings)
            if settings.DB_CREATE_SCHEMA:
                await app.state.database.create_schema()
        logger.info("app.startup", extra={"env": settings.ENV})
        try:
            yield
        finally:
            if owns_database:
                await app.state.database.dispose()
                app.state.database = None
            logger.info("app.shutdown")

    app = FastAPI(
        title=settings.APP_NAME,
        version=get_project_version(),
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    setup_logging(settings)
    uvicorn.run("catalog.main:create_app", factory=True, host=settings.HOST, port=settings.PORT, log_config=None)
