"""
Paragraph Chunker

Splits document text into overlapping, bounded-size chunks for embedding.

Paragraphs (text between runs of two or more newlines) are never split.
They are accumulated greedily into a buffer; when the next paragraph would
push a non-empty buffer past ``chunk_size`` the buffer is emitted and the
next one is seeded with the trailing ``overlap_size`` characters of the
emitted chunk. A seeded buffer can therefore exceed ``chunk_size`` by up to
``overlap_size``, and a paragraph longer than ``chunk_size`` is kept whole.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional

from ..config import settings
from ..embeddings.models import Chunk, Document

PARAGRAPH_BREAK = re.compile(r"(\n{2,})")


class ParagraphChunker:
    """Character-based paragraph chunker with trailing overlap."""

    def __init__(
        self,
        chunk_size: Optional[int] = None,
        overlap_size: Optional[int] = None,
    ) -> None:
        self.chunk_size = chunk_size if chunk_size is not None else settings.chunk_size
        self.overlap_size = (
            overlap_size if overlap_size is not None else settings.chunk_overlap
        )

        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if not 0 <= self.overlap_size < self.chunk_size:
            raise ValueError(
                f"Overlap ({self.overlap_size}) must be in [0, chunk size "
                f"({self.chunk_size}))"
            )

    def chunk(self, document: Document) -> List[Chunk]:
        """
        Split one document into chunks carrying its metadata.
        """
        base_metadata = document.metadata.model_dump(mode="json", exclude_none=True)
        return [
            Chunk(
                content=text,
                metadata={
                    **base_metadata,
                    "tokens": Chunk.estimate_tokens(text),
                    "original_length": len(text),
                },
            )
            for text in self.split_text(document.content)
        ]

    def chunk_documents(self, documents: Iterable[Document]) -> List[Chunk]:
        chunks: List[Chunk] = []
        for document in documents:
            chunks.extend(self.chunk(document))
        return chunks

    def split_text(self, text: str) -> List[str]:
        if not text or not text.strip():
            return []

        pieces: List[str] = []
        current = ""

        parts = PARAGRAPH_BREAK.split(text)
        separators = [""] + parts[1::2]

        for separator, paragraph in zip(separators, parts[0::2]):
            candidate = current + separator + paragraph if current else paragraph

            if len(candidate) > self.chunk_size and current:
                pieces.append(current)
                current = self._overlap_tail(current) + paragraph
            else:
                current = candidate

        if current:
            pieces.append(current)

        return pieces

    def _overlap_tail(self, emitted: str) -> str:
        # emitted[-0:] would be the whole string
        if not self.overlap_size:
            return ""
        return emitted[-self.overlap_size:]


def chunk_document(
    document: Document,
    chunk_size: int = 800,
    overlap_size: int = 100,
) -> List[Chunk]:
    """Chunk a single document (convenience function)."""
    return ParagraphChunker(chunk_size, overlap_size).chunk(document)


def chunk_stats(chunks: List[Chunk]) -> Dict[str, Any]:
    """Summary statistics for a list of chunks, used in ingest logs."""
    if not chunks:
        return {"chunk_count": 0, "total_chars": 0, "max_chunk_size": 0}

    sizes = [len(c.content) for c in chunks]
    return {
        "chunk_count": len(chunks),
        "total_chars": sum(sizes),
        "max_chunk_size": max(sizes),
    }
