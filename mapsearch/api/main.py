"""FastAPI application entry point."""
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mapsearch.api.routes import health, search
from mapsearch.config import settings
from mapsearch.domain.errors import NotFoundError, ValidationError
from mapsearch.logging_config import configure_logging
from mapsearch.service import SearchService, build_search_service

logger = structlog.get_logger(__name__)


def _error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        logger.info("search_rejected", path=request.url.path, reason=str(exc))
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "Job not found."},
        )


def create_app(service_factory: Callable[[], SearchService] | None = None) -> FastAPI:
    configure_logging(settings.log_level, settings.log_json)
    factory = service_factory or (lambda: build_search_service(settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("mapsearch_starting")
        service = factory()
        await service.start()
        app.state.search_service = service
        try:
            yield
        finally:
            logger.info("mapsearch_stopping")
            app.state.search_service = None
            await service.stop()

    app = FastAPI(
        title="MapSearch",
        description="Asynchronous local-business search jobs.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _error_handlers(app)
    app.include_router(health.router)
    app.include_router(search.router)

    return app


app = create_app()
