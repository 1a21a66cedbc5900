"""Shared fixtures. Environment defaults must be set before the package is imported."""
import os

os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("PINECONE_API_KEY", "test-pinecone-key")
os.environ.setdefault("PINECONE_INDEX_HOST", "https://black-ink-test.svc.pinecone.io")
os.environ.setdefault("ENVIRONMENT", "test")

import httpx
import pytest

from black_ink_assistant.embeddings.models import (
    Document,
    DocumentMetadata,
    DocumentType,
    VectorMatch,
)


@pytest.fixture
def make_document():
    def _make(content, category="pricing", source="faq_system", doc_type=DocumentType.FAQ):
        return Document(
            type=doc_type,
            title="Test document",
            content=content,
            metadata=DocumentMetadata(source=source, category=category, priority=5),
        )
    return _make


@pytest.fixture
def make_match():
    def _make(id, score, text, source="faq_system", category="pricing"):
        return VectorMatch(
            id=id,
            score=score,
            metadata={"text": text, "source": source, "category": category},
        )
    return _make


class RecordingTransport:
    """
    httpx.MockTransport wrapper that records every request.

    ``responder`` receives the request and returns an httpx.Response or
    raises an httpx exception.
    """

    def __init__(self, responder):
        self.requests = []
        self._responder = responder
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request):
        self.requests.append(request)
        return self._responder(request)


@pytest.fixture
def recording_transport():
    return RecordingTransport
