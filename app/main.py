from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import uvicorn

from app.api import admin, shortener
from app.core.config import Settings, get_settings
from app.core.exceptions import (
    BadRequest,
    CodeConflict,
    GenerationExhausted,
    NotFound,
    RegistryError,
    ReservedCode,
    StorageFailure,
    Unauthorized,
)
from app.core.logging_config import configure_logging
from app.db.database import build_store
from app.services.shortener import URLRegistry
from app.utils.encoding import CodeGenerator

logger = logging.getLogger("app")

# Most specific first: ReservedPath resolves through NotFound
STATUS_CODES = [
    (BadRequest, 400),
    (Unauthorized, 401),
    (ReservedCode, 400),
    (CodeConflict, 409),
    (NotFound, 404),
    (GenerationExhausted, 503),
    (StorageFailure, 500),
]


def status_for(exc: RegistryError) -> int:
    for kind, code in STATUS_CODES:
        if isinstance(exc, kind):
            return code
    return 500


def build_registry(settings: Settings) -> URLRegistry:
    generator = CodeGenerator(
        length=settings.SHORT_CODE_LENGTH,
        max_attempts=settings.MAX_GENERATION_ATTEMPTS,
    )
    return URLRegistry(build_store(settings), settings.BASE_URL, generator=generator)


def create_app(settings: Optional[Settings] = None, registry: Optional[URLRegistry] = None) -> FastAPI:
    settings = settings or get_settings()
    registry = registry or build_registry(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down gracefully...")
        app.state.registry.store.close()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="URL shortener with a pluggable record store",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry

    @app.get("/health", tags=["health"])
    def health_check():
        return {"status": "healthy", "service": "url-shortener"}

    @app.exception_handler(RegistryError)
    async def registry_exception_handler(request: Request, exc: RegistryError):
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.detail}")
        return JSONResponse(status_code=status_code, content={"detail": exc.detail, "error": exc.kind})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    # Admin routes must be registered ahead of the catch-all redirect
    app.include_router(admin.router)
    app.include_router(shortener.router)
    return app


settings = get_settings()
configure_logging(settings.LOG_LEVEL)
logger.info(f"Application '{settings.PROJECT_NAME}' starting up.")

app = create_app(settings)


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=3001, log_level="info")
