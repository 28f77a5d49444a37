"""FastAPI application factory for the batonsql linter."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from batonsql import __version__
from batonsql.api.deps import init_engine, reset_engine
from batonsql.api.middleware import RequestBodyLimitMiddleware, RequestTimingMiddleware
from batonsql.api.routers import documents, rules, validation
from batonsql.api.schemas import HealthResponse
from batonsql.service.engine import ValidationEngine
from batonsql.settings import Settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Create the ValidationEngine for the lifetime of the application."""
    engine = ValidationEngine(settings=app.state.settings)
    init_engine(engine)
    try:
        yield
    finally:
        engine.shutdown()
        reset_engine()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="batonsql",
        description="Heuristic linter for SQL embedded in Baton SQL connector YAML.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Middleware
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(RequestBodyLimitMiddleware)

    app.include_router(rules.router, prefix="/rules", tags=["rules"])
    app.include_router(validation.router, prefix="/validate", tags=["validation"])
    app.include_router(documents.router, tags=["documents"])

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app


def main() -> None:
    """Run the REST API server using settings from environment / .env file."""
    settings = Settings()

    logging.basicConfig(level=settings.log_level.upper())
    logger = logging.getLogger("batonsql.api")
    logger.info(
        "batonsql API Server v%s starting (host=%s, port=%d)",
        __version__, settings.api_server_host, settings.effective_port,
    )

    uvicorn.run(
        "batonsql.api.app:create_app",
        factory=True,
        host=settings.api_server_host,
        port=settings.effective_port,
        log_level=settings.log_level.lower(),
    )
