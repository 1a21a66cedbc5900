"""
Retrieval Pipeline

Composes the chunker, embedder, vector store and hybrid ranker into the two
flows used by the assistant:

    ingest:  documents -> process -> chunk -> embed -> batch upsert
    search:  query -> embed -> widened similarity search -> hybrid rank

Per-chunk embedding failures degrade to zero vectors inside the embedder and
never abort an ingest run. Configuration problems and vector store failures
are fatal for the invocation and surface as IngestionError / RetrievalError
carrying the failed stage.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Type

from ..config import settings
from ..core.errors import IngestionError, PipelineError, RetrievalError
from ..embeddings.embedder import Embedder
from ..embeddings.models import (
    Chunk,
    Document,
    IngestResult,
    RetrievalResult,
    VectorRecord,
)
from .chunker import ParagraphChunker, chunk_stats
from .ranker import rank
from .vector_store import VectorStore

logger = logging.getLogger("blackink.pipeline")


def new_record_id() -> str:
    return f"chunk-{uuid.uuid4().hex}"


class RetrievalPipeline:
    """
    Ingest and search over a single vector index.

    The pipeline keeps no per-request state; one instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        embedder: Embedder,
        vector_store: VectorStore,
        chunker: Optional[ParagraphChunker] = None,
        embed_concurrency: Optional[int] = None,
    ) -> None:
        self.embedder = embedder
        self.vector_store = vector_store
        self.chunker = chunker or ParagraphChunker()
        self.embed_concurrency = max(1, embed_concurrency or settings.embed_concurrency)

    # ------------------------------------------------------------------
    # Ingest
    # ------------------------------------------------------------------

    async def ingest(self, documents: Sequence[Document]) -> IngestResult:
        """
        Run the full ingest flow over ``documents``.

        Returns
        -------
        IngestResult
            Document, chunk and stored-record counts.

        Raises
        ------
        IngestionError
            With ``stage`` set to the stage that failed.
        """
        logger.info("Starting ingestion of %d documents", len(documents))

        with _stage(IngestionError, "process"):
            processed = self.process_documents(documents)

        with _stage(IngestionError, "chunk"):
            chunks = self.chunker.chunk_documents(processed)
        logger.info("Chunking finished: %s", chunk_stats(chunks))

        with _stage(IngestionError, "embed"):
            records = await self.embed_chunks(chunks)

        with _stage(IngestionError, "store"):
            stored = await self.vector_store.upsert(records)

        logger.info("Stored %d chunks", stored)
        return IngestResult(documents=len(documents), chunks=len(chunks), stored=stored)

    def process_documents(self, documents: Sequence[Document]) -> List[Document]:
        """
        Normalise raw documents before chunking.

        Text is passed through unchanged apart from line-ending
        normalisation.
        """
        processed = []
        for document in documents:
            content = document.content.replace("\r\n", "\n")
            if content != document.content:
                document = document.model_copy(update={"content": content})
            processed.append(document)
        return processed

    async def embed_chunks(self, chunks: Sequence[Chunk]) -> List[VectorRecord]:
        """
        Embed every chunk and build its vector record.

        With ``embed_concurrency`` of 1 (the default) chunks are embedded
        one after another; higher values overlap provider calls without
        changing record order or content.
        """
        logger.info("Generating embeddings for %d chunks", len(chunks))

        if self.embed_concurrency == 1:
            embeddings = [await self.embedder.embed(chunk.content) for chunk in chunks]
        else:
            semaphore = asyncio.Semaphore(self.embed_concurrency)

            async def _bounded(text: str) -> List[float]:
                async with semaphore:
                    return await self.embedder.embed(text)

            embeddings = await asyncio.gather(*(_bounded(c.content) for c in chunks))

        return [
            VectorRecord.from_chunk(new_record_id(), chunk, embedding, index)
            for index, (chunk, embedding) in enumerate(zip(chunks, embeddings))
        ]

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        top_k: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[RetrievalResult]:
        """
        Hybrid search for ``query``.

        An empty or whitespace-only query, or a ``top_k`` below 1, returns []
        without touching the embedder or the store. ``top_k=None`` uses
        settings.default_top_k.

        Raises
        ------
        RetrievalError
            If the query cannot be embedded or the store search fails.
        """
        if not query or not query.strip():
            return []

        if top_k is None:
            top_k = settings.default_top_k
        if top_k <= 0:
            return []

        with _stage(RetrievalError, "embed"):
            vector = await self.embedder.embed(query)

        with _stage(RetrievalError, "search"):
            candidates = await self.vector_store.query(vector, top_k, filters)

        with _stage(RetrievalError, "rank"):
            results = rank(query, candidates, top_k)

        logger.info(
            "Hybrid search returned %d of %d candidates (top score=%s)",
            len(results),
            len(candidates),
            f"{results[0].score:.3f}" if results else None,
        )
        return results


@contextmanager
def _stage(error_type: Type[PipelineError], name: str) -> Iterator[None]:
    """
    Translate any failure inside a pipeline stage into ``error_type``
    tagged with the stage name.
    """
    try:
        yield
    except error_type:
        raise
    except Exception as exc:
        logger.error("Pipeline stage '%s' failed (%s)", name, type(exc).__name__)
        raise error_type(name, f"Stage '{name}' failed: {type(exc).__name__}") from exc
