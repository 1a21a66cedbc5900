"""
Ingest Routes

This module exposes the endpoint that (re)builds the knowledge base:

    load documents -> process -> chunk -> embed -> batch upsert

It is designed to be invoked by trusted studio tooling (a deploy hook or
an admin action), not by chat visitors.
"""

import asyncio
import hmac
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status

from .models import IngestRequest, IngestResponse, IngestStats
from .dependencies import get_pipeline
from ..config import settings
from ..core.errors import IngestionError
from ..rag.pipeline import RetrievalPipeline
from ..rag.sources import load_documents

logger = logging.getLogger("blackink.ingest")

router = APIRouter(prefix="/ingest", tags=["ingest"])


# ---------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------

def _check_secret(provided: Optional[str]) -> None:
    """
    Enforce the shared ingest secret outside development.

    No secret configured means the endpoint is open.
    """
    expected = settings.ingest_secret.get_secret_value()
    if settings.environment == "development" or not expected:
        return

    if not provided or not hmac.compare_digest(provided, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


# ---------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------

@router.post(
    "",
    response_model=IngestResponse,
    summary="Ingest knowledge-base documents",
)
async def ingest(
    pipeline: Annotated[RetrievalPipeline, Depends(get_pipeline)],
    req: Annotated[Optional[IngestRequest], Body()] = None,
) -> IngestResponse:
    """
    Run the ingest pipeline.

    Workflow
    --------
    1. Check the shared secret.
    2. Load the request's documents, or the built-in sources.
    3. Process, chunk, embed and store them under the ingest time budget.

    Failures are reported by the IngestionError handler with the failed
    stage; budget overruns become a 504.
    """
    req = req or IngestRequest()
    _check_secret(req.secret)

    try:
        documents = req.documents if req.documents is not None else load_documents()
    except Exception as exc:
        raise IngestionError("load", f"Loading documents failed: {type(exc).__name__}") from exc

    logger.info("Starting ingestion pipeline (%d documents)", len(documents))

    result = await asyncio.wait_for(
        pipeline.ingest(documents),
        timeout=settings.ingest_timeout_seconds,
    )

    return IngestResponse(
        success=True,
        stats=IngestStats(
            docs=result.documents,
            chunks=result.chunks,
            stored=result.stored,
        ),
    )
