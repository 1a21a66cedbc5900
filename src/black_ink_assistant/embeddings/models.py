"""
Retrieval Data Models

This module defines the canonical data model flowing through the retrieval
pipeline:

    Document -> Chunk -> VectorRecord -> (vector store) -> VectorMatch
             -> RetrievalResult

Documents, chunks and vector records are immutable once created. Retrieval
results are ephemeral, per-query values that are never persisted.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict


# Max characters of chunk text copied into vector metadata
METADATA_TEXT_LIMIT = 4000


class DocumentType(str, Enum):
    FAQ = "faq"
    SERVICES = "services"
    POLICIES = "policies"
    BLOG = "blog"
    PORTFOLIO = "portfolio"
    PORTFOLIO_IMAGES = "portfolio_images"
    CARE = "care"


class DocumentMetadata(BaseModel):
    """
    Source metadata propagated unchanged to every chunk of a document.
    """

    source: str = Field(..., min_length=1)
    category: Optional[str] = None
    priority: Optional[int] = Field(
        default=None,
        ge=1,
        le=5,
        description="1-5, 5 = highest.",
    )
    last_updated: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    author: Optional[str] = None
    tags: Optional[List[str]] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class Document(BaseModel):
    """
    A unit of source knowledge produced by an ingestion source.
    """

    type: DocumentType
    title: str = Field(..., min_length=1)
    content: str
    metadata: DocumentMetadata

    model_config = ConfigDict(extra="forbid", frozen=True)


class Chunk(BaseModel):
    """
    A bounded-length span of a document's text.

    ``metadata`` holds the document metadata (JSON-serialisable form) plus
    ``tokens`` and ``original_length``.
    """

    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @staticmethod
    def estimate_tokens(text: str) -> int:
        """Approximate token count (~4 characters per token)."""
        return math.ceil(len(text) / 4)


class VectorRecord(BaseModel):
    """
    The persisted unit in the vector store.
    """

    id: str = Field(..., min_length=1)
    values: List[float]
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_chunk(
        cls,
        record_id: str,
        chunk: Chunk,
        embedding: List[float],
        chunk_index: int,
    ) -> "VectorRecord":
        metadata = {
            "text": chunk.content[:METADATA_TEXT_LIMIT],
            **chunk.metadata,
            "chunk_index": chunk_index,
        }
        return cls(id=record_id, values=embedding, metadata=metadata)


class VectorMatch(BaseModel):
    """
    A similarity-search candidate as returned by the vector store.
    """

    id: str
    score: Optional[float] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def text(self) -> str:
        return str(self.metadata.get("text") or "")


class RetrievalResult(BaseModel):
    """
    A ranked search result. ``score`` is the combined hybrid score.
    """

    id: str
    content: str
    score: float
    source: str = ""
    category: str = ""


class IngestResult(BaseModel):
    """
    Counts reported by a completed ingest run.
    """

    documents: int = Field(..., ge=0)
    chunks: int = Field(..., ge=0)
    stored: int = Field(..., ge=0)
