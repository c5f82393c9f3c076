"""Ephemeral Clip - Main Application."""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ephemeral_clip.adapters.memory_store.stores import MemoryBlobStore
from ephemeral_clip.api.secrets import router as secrets_router
from ephemeral_clip.core.config import Settings, settings as default_settings
from ephemeral_clip.dependencies import select_blob_store
from ephemeral_clip.errors import ClipError, ValidationError
from ephemeral_clip.jobs.expiry_sweeper import expiry_sweeper
from ephemeral_clip.logging_hardening import setup_logging_redaction
from ephemeral_clip.middleware.shutdown_gate import ShutdownGateMiddleware
from ephemeral_clip.routers import health

logger = logging.getLogger(__name__)

# Initialize logging redaction filters early
setup_logging_redaction()


def _check_startup_config(config: Settings) -> None:
    if config.MODE.lower() == "prod" and config.TRACING_ENABLED and not config.OTEL_EXPORTER_OTLP_ENDPOINT:
        raise RuntimeError("In PROD, OTEL_EXPORTER_OTLP_ENDPOINT must be present when tracing is enabled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    config: Settings = app.state.settings
    _check_startup_config(config)
    ShutdownGateMiddleware.set_shutting_down(False)

    store = await select_blob_store(config)
    app.state.blob_store = store
    logger.info(f"Secret store backend: {store.mode.value}")

    shutdown_event = asyncio.Event()
    sweeper_task = None
    if isinstance(store, MemoryBlobStore):
        sweeper_task = asyncio.create_task(
            expiry_sweeper(store, shutdown_event, interval=config.SWEEP_INTERVAL_SECONDS)
        )

    yield

    # Shutdown
    logger.info("Initiating graceful shutdown...")
    ShutdownGateMiddleware.set_shutting_down(True)
    shutdown_event.set()

    if sweeper_task:
        try:
            await asyncio.wait_for(sweeper_task, timeout=5.0)
        except asyncio.TimeoutError:
            logger.warning("Expiry sweeper shutdown timed out.")

    await store.close()
    logger.info("Shutdown complete.")


async def clip_error_handler(request: Request, exc: ClipError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in err.get("loc", ()) if p != "body") for err in exc.errors()]
    error = ValidationError("Invalid request body", details={"fields": [f for f in fields if f]})
    return JSONResponse(status_code=error.status_code, content=error.to_body())


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}}
    )


def create_app(config: Optional[Settings] = None) -> FastAPI:
    config = config or default_settings

    app = FastAPI(
        title="Ephemeral Clip",
        description="Zero-knowledge ephemeral secret sharing",
        version="0.1.0",
        lifespan=lifespan
    )
    app.state.settings = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type"],
    )
    app.add_middleware(ShutdownGateMiddleware)

    app.add_exception_handler(ClipError, clip_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Mount routers
    app.include_router(secrets_router.router, prefix="/api", tags=["Secrets"])
    app.include_router(health.router, tags=["Health"])

    if config.TRACING_ENABLED:
        from ephemeral_clip.observability.tracing import setup_opentelemetry
        setup_opentelemetry(app, config)

    return app


app = create_app()
