"""
Retrieval Package

Chunking, vector storage, hybrid ranking and the ingest/search pipeline.
"""

from .chunker import ParagraphChunker, chunk_document
from .pipeline import RetrievalPipeline
from .ranker import rank
from .sources import load_documents
from .vector_store import VectorStore, VectorStoreError

__all__ = [
    "ParagraphChunker",
    "chunk_document",
    "RetrievalPipeline",
    "rank",
    "load_documents",
    "VectorStore",
    "VectorStoreError",
]
