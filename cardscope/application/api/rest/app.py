import logging
from contextlib import asynccontextmanager

import logfire
from dishka import AsyncContainer
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from cardscope.application.api.v1.errors import map_cardscope_error
from cardscope.application.api.v1.routes import cards, health
from cardscope.application.di import create_container
from cardscope.config import Config, configure_logging
from cardscope.domain.shared.error import CardscopeError
from cardscope.infrastructure.persistence.database import create_schema
from cardscope.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: AsyncContainer = app.state.dishka_container
    config = await container.get(Config)

    # SQLite databases are created on first start; PostgreSQL is managed externally
    if config.catalog.backend == "sql":
        engine = await container.get(AsyncEngine)
        if engine.dialect.name == "sqlite":
            await create_schema(engine)

    yield

    await container.close()


def create_app(config: Config | None = None, container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application."""
    if config is None:
        # Pydantic Settings populates from env vars at runtime
        config = Config()  # type: ignore[call-arg]

    configure_logging(config.logging)
    logger.info("Starting %s v%s", config.server.name, config.server.version)

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    setup_dishka(container or create_container(config), app_instance)

    app_instance.include_router(health.router, prefix="/api/v1")
    app_instance.include_router(cards.router, prefix="/api/v1")

    # Maps domain and infrastructure errors to HTTP responses
    @app_instance.exception_handler(CardscopeError)
    async def cardscope_error_handler(request: Request, exc: CardscopeError):
        http_exc = map_cardscope_error(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=http_exc.detail,
        )

    # Global exception handler - logs all unhandled exceptions
    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app_instance
