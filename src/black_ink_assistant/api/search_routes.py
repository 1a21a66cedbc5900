"""
Search Routes

This module defines the hybrid search endpoint backed by the retrieval
pipeline. The chat agents call the pipeline directly; this route exposes
the same search for the studio's admin tooling and for diagnostics.
"""

from fastapi import APIRouter, Depends, status
from typing import List, Annotated

from .models import SearchRequest
from .dependencies import get_pipeline
from ..embeddings.models import RetrievalResult
from ..rag.pipeline import RetrievalPipeline

router = APIRouter(prefix="/search", tags=["search"])


@router.post(
    "",
    response_model=List[RetrievalResult],
    summary="Hybrid semantic + keyword search",
    status_code=status.HTTP_200_OK,
)
async def search(
    req: SearchRequest,
    pipeline: Annotated[RetrievalPipeline, Depends(get_pipeline)],
) -> List[RetrievalResult]:
    """
    Perform a hybrid search over the knowledge base.

    Parameters
    ----------
    req : SearchRequest
        Contains:
        - query: Search query string (blank returns no results)
        - top_k: Number of results to return
        - filters: Optional metadata filter

    Returns
    -------
    List[RetrievalResult]
        Results ordered by combined score.
    """
    # RetrievalError is mapped to a generic 503 by the global handlers.
    return await pipeline.search(req.query, req.top_k, req.filters)
