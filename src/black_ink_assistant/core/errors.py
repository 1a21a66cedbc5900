"""
Global Error Handling

This module defines the pipeline exception hierarchy and the application-wide
exception handlers for the assistant API.

Design Goals
------------
- Never leak provider or internal exception details to clients
- Report ingestion failures with the pipeline stage that failed
- Log full stack traces internally for debugging
- Remain testable and framework-agnostic where possible
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Any

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("blackink.errors")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class PipelineError(RuntimeError):
    """
    Fatal failure of a pipeline invocation.

    Attributes
    ----------
    stage : str
        Name of the pipeline stage that failed (e.g. "embed", "store").
    """

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(message)
        self.stage = stage


class IngestionError(PipelineError):
    """Raised when an ingest run cannot complete."""


class RetrievalError(PipelineError):
    """Raised when a search cannot complete (distinct from "no matches")."""


class ConfigurationError(PipelineError):
    """Raised when a collaborator is missing credentials or an endpoint."""


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def ingestion_error_handler(
    request: Request,
    exc: IngestionError,
) -> JSONResponse:
    """
    Structured failure report for the ingest pipeline.

    Only the failed stage is reported; the cause stays in the logs.
    """
    logger.error(
        "Ingestion failed at stage '%s' during %s %s",
        exc.stage,
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "success": False,
        "error": "ingestion_failed",
        "stage": exc.stage,
    }
    return JSONResponse(status_code=500, content=payload)


async def service_unavailable_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Generic response for unreachable collaborators (LLM, vector store).
    """
    logger.error(
        "Collaborator failure (%s) during %s %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "service_unavailable",
        "detail": "The assistant is temporarily unavailable",
    }
    return JSONResponse(status_code=503, content=payload)


async def timeout_handler(
    request: Request,
    exc: asyncio.TimeoutError,
) -> JSONResponse:
    """
    Response for requests that exceeded their wall-clock budget.
    """
    logger.warning(
        "Request exceeded its time budget: %s %s",
        request.method,
        request.url.path,
    )

    payload: Dict[str, Any] = {
        "error": "timeout",
        "detail": "The request took too long",
    }
    return JSONResponse(status_code=504, content=payload)


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Last-resort 500 for anything the pipeline, LLM and timeout handlers
    do not cover (programming errors, unexpected provider payloads).

    The traceback is logged; the client only sees a fixed payload.
    """
    logger.exception(
        "Unhandled exception during %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }
    return JSONResponse(status_code=500, content=payload)
