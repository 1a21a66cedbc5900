"""
Assistant Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures logging and global exception handling, and provides a
test-friendly application factory.

Routes
------
- GET  /health   liveness and configuration report
- POST /chat     agent-routed, streamed answers
- POST /search   hybrid knowledge-base search
- POST /ingest   rebuild the vector index
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from .config import settings
from .core.errors import (
    IngestionError,
    PipelineError,
    ingestion_error_handler,
    service_unavailable_handler,
    timeout_handler,
    unhandled_exception_handler,
)
from .core.logging import configure_logging
from .llm.client import LLMError

from .api import (
    chat_routes,
    health_routes,
    ingest_routes,
    search_routes,
)


logger = logging.getLogger("blackink.app")


# ---------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup configuration report and shutdown log.

    Missing credentials are reported here but only fail the requests that
    need them.
    """
    logger.info("Starting black-ink-assistant (%s)", settings.environment)

    if not settings.openai_api_key.get_secret_value():
        logger.error("OPENAI_API_KEY is not set; chat and ingestion will fail")
    if not settings.pinecone_api_key.get_secret_value() or not settings.pinecone_index_host:
        logger.error("Pinecone is not configured; search and ingestion will fail")
    if not settings.mem0_api_key.get_secret_value():
        logger.warning("MEM0_API_KEY is not set; client memory is disabled")

    yield

    logger.info("Shutting down black-ink-assistant")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Handlers are registered most specific first: IngestionError reports
    its stage, other pipeline and LLM failures become a generic 503.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    configure_logging()

    app = FastAPI(
        title="black-ink-assistant",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(IngestionError, ingestion_error_handler)
    app.add_exception_handler(PipelineError, service_unavailable_handler)
    app.add_exception_handler(LLMError, service_unavailable_handler)
    app.add_exception_handler(asyncio.TimeoutError, timeout_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(chat_routes.router)
    app.include_router(search_routes.router)
    app.include_router(ingest_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
