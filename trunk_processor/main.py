"""Application entry point and FastAPI app factory."""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, AsyncIterator, Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.ext.asyncio import AsyncEngine

from .config import Settings, load_settings
from .controllers import health, upload
from .database import create_database_engine, create_session_factory, dispose_engine, init_models
from .errors import ProcessorError, ServerInitError
from .middleware import StructuredLoggingMiddleware, TelemetryMiddleware
from .pipelines.upload import CallRepository, UploadProcessor
from .services import (
    BlobUploader,
    TranscriptionClient,
    WebhookNotifier,
    create_http_client,
    create_s3_client,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _configure_logging(settings: Settings) -> None:
    """Send application logs to stdout and, when configured, a rotating file."""

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(stdout_handler)

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=1_000_000,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)

    level = logging.DEBUG if settings.debug else logging.getLevelName(settings.log_level.upper())
    root_logger.setLevel(level if isinstance(level, int) else logging.INFO)

    middleware_logger = logging.getLogger("trunk_processor.middleware.structured")
    middleware_logger.handlers.clear()
    middleware_stdout = logging.StreamHandler(sys.stdout)
    middleware_stdout.setFormatter(logging.Formatter("%(message)s"))
    middleware_logger.addHandler(middleware_stdout)
    middleware_logger.setLevel(logging.INFO)
    middleware_logger.propagate = False

    noisy_loggers = [
        "botocore",
        "boto3",
        "urllib3",
        "httpx",
        "sqlalchemy.engine",
    ]
    for name in noisy_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def build_processor(
    settings: Settings,
    *,
    s3_client: Any,
    http_client: httpx.AsyncClient,
    engine: AsyncEngine,
) -> UploadProcessor:
    """Wire the upload pipeline from already constructed clients."""

    repository = CallRepository(
        create_session_factory(engine),
        reference_upserts_in_transaction=settings.database.reference_upserts_in_transaction,
    )
    return UploadProcessor(
        storage=BlobUploader(s3_client, settings.s3.bucket_name),
        transcriber=TranscriptionClient(
            http_client,
            settings.transcription.endpoint,
            settings.transcription.model_name,
        ),
        notifier=WebhookNotifier(http_client, settings.webhook),
        repository=repository,
        filter_config=settings.filter,
    )


def create_app(
    settings: Optional[Settings] = None,
    *,
    s3_client: Any = None,
    http_client: Optional[httpx.AsyncClient] = None,
    engine: Optional[AsyncEngine] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Clients that are not passed in are built from ``settings``; tests inject
    fakes through the keyword arguments.
    """

    settings = settings or load_settings()
    _configure_logging(settings)

    s3_client = s3_client if s3_client is not None else create_s3_client(settings.s3)
    http_client = http_client or create_http_client(settings)
    engine = engine or create_database_engine(settings.database, echo=settings.debug)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if settings.database.create_tables:
            await init_models(engine)
        logger.info(
            "%s %s ready (filtering=%s, default_transcribe=%s)",
            settings.app_name,
            settings.app_version,
            settings.filter.enabled(),
            settings.filter.default_transcribe,
        )
        try:
            yield
        finally:
            await http_client.aclose()
            await dispose_engine(engine)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        description="trunk-recorder call upload ingestion service",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.processor = build_processor(
        settings,
        s3_client=s3_client,
        http_client=http_client,
        engine=engine,
    )

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    app.include_router(upload.router)
    app.include_router(health.router)

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose application metrics for Prometheus scraping."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(ProcessorError)
    async def processor_exception_handler(request: Request, exc: ProcessorError):
        request.state.error_kind = exc.kind
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        else:
            logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.detail)
        return PlainTextResponse(exc.detail, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return PlainTextResponse("Internal server error", status_code=500)

    return app


def run() -> None:
    """Start the server with uvicorn on the configured host and port."""

    settings = load_settings()
    app = create_app(settings)
    try:
        uvicorn.run(
            app,
            host=settings.host,
            port=settings.port,
            log_config=None,
        )
    except OSError as exc:
        raise ServerInitError(f"cannot listen on {settings.host}:{settings.port}: {exc}") from exc


__all__ = ["build_processor", "create_app", "run"]
